from __future__ import annotations

from snappy.realtime.events import FOCUS_STARTED
from snappy.realtime.events import FOCUS_STOPPED
from snappy.realtime.events import DomainEvent
from snappy.realtime.rooms import UserRoom


def focus_started(todo_id: int, session_id: int, *, user_id: int):
    return (
        DomainEvent(
            FOCUS_STARTED,
            (UserRoom(user_id),),
            {"todoId": todo_id, "sessionId": session_id},
        ),
    )


def focus_stopped(todo_id: int, session_id: int, duration: int, *, user_id: int):
    return (
        DomainEvent(
            FOCUS_STOPPED,
            (UserRoom(user_id),),
            {"todoId": todo_id, "sessionId": session_id, "duration": duration},
        ),
    )
