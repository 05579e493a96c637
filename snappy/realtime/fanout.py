"""Connection registry, room membership and event routing.

Lifecycle of a connection::

    Connecting --token verifies--> Authenticated (auto-joins user:<id>)
    Authenticated --join/leave list:<id>--> Authenticated
    Authenticated --disconnect--> Disconnected (terminal)

A connection that fails verification is never registered, so it can never be
a recipient. Registry state is guarded by a plain lock that is never held
across an ``await``; delivery is serialized by a separate dispatch lock so each
connection sees events in the order ``route_event`` was called.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from functools import partial
from typing import Any
from typing import Protocol

from asgiref.sync import async_to_sync
from channels.db import database_sync_to_async
from django.db import transaction
from django.utils import timezone

from snappy.users.tokens import verify_token

from .events import PRESENCE_UPDATE
from .events import DomainEvent
from .rooms import ListRoom
from .rooms import Room
from .rooms import UserRoom

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def emit(self, event: str, data: Any = None, to: str | None = None, **kwargs): ...


@dataclass
class Connection:
    sid: str
    user_id: int
    rooms: set[Room] = field(default_factory=set)
    connected_at: datetime = field(default_factory=timezone.now)

    @property
    def user_room(self) -> UserRoom:
        return UserRoom(self.user_id)


class Fanout:
    def __init__(self, transport: Transport, verify=None):
        self.transport = transport
        self._verify = verify or database_sync_to_async(verify_token)
        self._lock = threading.Lock()
        self._dispatch_lock = asyncio.Lock()
        self._connections: dict[str, Connection] = {}
        self._members: dict[Room, set[str]] = {}

    # Registry -------------------------------------------------------------
    async def connect(self, sid: str, token: str | None) -> Connection:
        """Authenticate a new socket and register it.

        Raises the ``AuthError`` from token verification untouched; nothing is
        registered in that case.
        """
        user = await self._verify(token)
        conn = self.register(sid, user.pk)
        logger.info("Realtime connect sid=%s user=%s", sid, conn.user_id)
        return conn

    def register(self, sid: str, user_id: int) -> Connection:
        conn = Connection(sid=sid, user_id=int(user_id))
        with self._lock:
            previous = self._connections.pop(sid, None)
            if previous is not None:
                self._drop_memberships(previous)
            self._connections[sid] = conn
            self._add_member(conn, conn.user_room)
        return conn

    def disconnect(self, sid: str) -> Connection | None:
        with self._lock:
            conn = self._connections.pop(sid, None)
            if conn is not None:
                self._drop_memberships(conn)
        if conn is not None:
            logger.info("Realtime disconnect sid=%s user=%s", sid, conn.user_id)
        return conn

    def connection(self, sid: str) -> Connection | None:
        with self._lock:
            return self._connections.get(sid)

    def connection_count(self) -> int:
        with self._lock:
            return len(self._connections)

    # Membership -----------------------------------------------------------
    def join(self, sid: str, room: Room) -> bool:
        """Add ``sid`` to ``room``; False for unknown sids or repeat joins."""
        with self._lock:
            conn = self._connections.get(sid)
            if conn is None or room in conn.rooms:
                return False
            self._add_member(conn, room)
        logger.debug("sid=%s joined %s", sid, room)
        return True

    def leave(self, sid: str, room: Room) -> bool:
        with self._lock:
            conn = self._connections.get(sid)
            if conn is None or room not in conn.rooms:
                return False
            conn.rooms.discard(room)
            self._discard_member(room, sid)
        logger.debug("sid=%s left %s", sid, room)
        return True

    def members(self, room: Room) -> frozenset[str]:
        with self._lock:
            return frozenset(self._members.get(room, ()))

    def _add_member(self, conn: Connection, room: Room) -> None:
        conn.rooms.add(room)
        self._members.setdefault(room, set()).add(conn.sid)

    def _discard_member(self, room: Room, sid: str) -> None:
        sids = self._members.get(room)
        if sids is None:
            return
        sids.discard(sid)
        if not sids:
            del self._members[room]

    def _drop_memberships(self, conn: Connection) -> None:
        for room in conn.rooms:
            self._discard_member(room, conn.sid)
        conn.rooms.clear()

    # Routing --------------------------------------------------------------
    def recipients(self, event: DomainEvent) -> list[str]:
        """Current members of every target room, each sid at most once."""
        seen: dict[str, None] = {}
        with self._lock:
            for room in event.rooms:
                for sid in sorted(self._members.get(room, ())):
                    seen.setdefault(sid, None)
        seen.pop(event.exclude_sid, None)
        return list(seen)

    async def route_event(self, event: DomainEvent) -> int:
        """Deliver ``event`` to everyone in its rooms; returns the number reached.

        Rooms without members are not an error. A failing recipient is logged
        and skipped.
        """
        delivered = 0
        async with self._dispatch_lock:
            for sid in self.recipients(event):
                try:
                    await self.transport.emit(event.kind, event.payload, to=sid)
                except Exception:  # noqa: BLE001 - one bad socket must not stop the rest
                    logger.warning(
                        "Dropping %s for sid=%s",
                        event.kind,
                        sid,
                        exc_info=True,
                    )
                else:
                    delivered += 1
        return delivered

    def dispatch(self, event: DomainEvent) -> None:
        """Route ``event`` from synchronous Django code."""
        try:
            async_to_sync(self.route_event)(event)
        except Exception:
            logger.exception("Realtime dispatch of %s failed", event.kind)

    def publish(self, events: Iterable[DomainEvent]) -> None:
        """Hand events over for delivery once the current transaction commits.

        Delivery is at-most-once: if the process dies before the commit hook
        runs the events are lost while the data change stands.
        """
        for event in events:
            transaction.on_commit(partial(self.dispatch, event))

    # Presence / typing ----------------------------------------------------
    async def relay(self, sid: str, kind: str, data: Any) -> int:
        """Pass a client's presence or typing signal to the rest of a list room."""
        conn = self.connection(sid)
        if conn is None or not isinstance(data, dict):
            return 0
        room = ListRoom.parse(data.get("listId"))
        if room is None:
            return 0

        payload = {k: v for k, v in data.items() if k != "listId"}
        payload["userId"] = conn.user_id
        if kind == PRESENCE_UPDATE:
            payload["timestamp"] = timezone.now().isoformat()
        return await self.route_event(
            DomainEvent(kind, (room,), payload, exclude_sid=sid),
        )
