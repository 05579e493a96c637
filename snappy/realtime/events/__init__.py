"""Domain events emitted by mutation handlers.

Submodules hold *builders* only (entity in, events out). They never talk to
the Socket.IO server; routing is the ``Fanout``'s job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Generic
from typing import TypeVar

from snappy.realtime.rooms import Room

T = TypeVar("T")

TODO_CREATED = "todo:created"
TODO_UPDATED = "todo:updated"
TODO_DELETED = "todo:deleted"
COMMENT_ADDED = "comment:added"
COMMENT_UPDATED = "comment:updated"
COMMENT_DELETED = "comment:deleted"
COMMENT_REACTION = "comment:reaction"
COMMENT_REACTION_REMOVED = "comment:reaction:removed"
FOCUS_STARTED = "focus:started"
FOCUS_STOPPED = "focus:stopped"
PRESENCE_UPDATE = "presence:update"
TYPING_START = "typing:start"
TYPING_STOP = "typing:stop"


@dataclass(frozen=True)
class DomainEvent:
    kind: str
    rooms: tuple[Room, ...]
    payload: dict[str, Any]
    # Connection that must not receive its own echo (presence/typing).
    exclude_sid: str | None = None


@dataclass(frozen=True)
class MutationResult(Generic[T]):
    entity: T
    events: tuple[DomainEvent, ...] = ()
