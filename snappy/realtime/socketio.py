"""Socket.IO server and client message handlers.

Frontend convention:
- Socket.IO path: ``settings.SOCKETIO_PATH`` (``/ws/socket.io/`` by default)
- Auth: ``auth: {token}`` in the handshake, ``?token=`` accepted as fallback
- Client messages: ``join:list``, ``leave:list``, ``presence:update``,
  ``typing:start``, ``typing:stop``
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from typing import Any
from urllib.parse import parse_qs

import socketio
from django.conf import settings

from snappy.core.exceptions import AuthError
from snappy.core.exceptions import TokenExpired

from .events import PRESENCE_UPDATE
from .events import TYPING_START
from .events import TYPING_STOP
from .rooms import ListRoom

if TYPE_CHECKING:
    from .fanout import Fanout

logger = logging.getLogger(__name__)

JOIN_LIST = "join:list"
LEAVE_LIST = "leave:list"
RELAYED_EVENTS = (PRESENCE_UPDATE, TYPING_START, TYPING_STOP)


def build_server() -> socketio.AsyncServer:
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=getattr(settings, "SOCKETIO_CORS_ALLOWED_ORIGINS", "*"),
        logger=False,
        engineio_logger=False,
    )


def extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Extract the bearer token from the handshake.

    Handles python-socketio environ shapes across ASGI/WSGI servers.
    """

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token:
            return auth_token.removeprefix("Bearer ").strip() or None

    scope: Any = environ
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            scope = inner

    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    if isinstance(token, str) and token:
        return token
    return None


def attach_handlers(sio: socketio.AsyncServer, fanout: Fanout) -> None:
    @sio.on("connect")
    async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
        token = extract_token(environ, auth)
        try:
            await fanout.connect(sid, token)
        except TokenExpired as exc:
            logger.info("Realtime reject sid=%s: token expired", sid)
            msg = "jwt_expired"
            raise ConnectionRefusedError(msg) from exc
        except AuthError as exc:
            logger.info("Realtime reject sid=%s: %s", sid, exc.default_code)
            msg = "unauthorized"
            raise ConnectionRefusedError(msg) from exc
        except Exception as exc:
            logger.exception("Socket.IO connect error")
            msg = "server_error"
            raise ConnectionRefusedError(msg) from exc

    @sio.on("disconnect")
    async def disconnect(sid: str, reason: Any = None):
        fanout.disconnect(sid)

    @sio.on(JOIN_LIST)
    async def join_list(sid: str, data: Any = None):
        room = ListRoom.parse(data)
        if room is None:
            logger.debug("sid=%s sent unusable %s payload %r", sid, JOIN_LIST, data)
            return
        fanout.join(sid, room)

    @sio.on(LEAVE_LIST)
    async def leave_list(sid: str, data: Any = None):
        room = ListRoom.parse(data)
        if room is None:
            return
        fanout.leave(sid, room)

    for kind in RELAYED_EVENTS:
        sio.on(kind, handler=_relay_handler(fanout, kind))


def _relay_handler(fanout: Fanout, kind: str):
    async def relay(sid: str, data: Any = None):
        await fanout.relay(sid, kind, data)

    return relay
