"""Comment events go to the list room only; inbox todos have no audience."""

from __future__ import annotations

from typing import Any

from snappy.realtime.events import COMMENT_ADDED
from snappy.realtime.events import COMMENT_DELETED
from snappy.realtime.events import COMMENT_REACTION
from snappy.realtime.events import COMMENT_REACTION_REMOVED
from snappy.realtime.events import COMMENT_UPDATED
from snappy.realtime.events import DomainEvent
from snappy.realtime.rooms import ListRoom


def _to_list(kind: str, list_id: int | None, payload: dict[str, Any]):
    if list_id is None:
        return ()
    return (DomainEvent(kind, (ListRoom(list_id),), payload),)


def comment_added(todo_id: int, comment: dict[str, Any], *, list_id: int | None):
    return _to_list(COMMENT_ADDED, list_id, {"todoId": todo_id, "comment": comment})


def comment_updated(todo_id: int, comment: dict[str, Any], *, list_id: int | None):
    return _to_list(COMMENT_UPDATED, list_id, {"todoId": todo_id, "comment": comment})


def comment_deleted(todo_id: int, comment_id: int, *, list_id: int | None):
    return _to_list(
        COMMENT_DELETED,
        list_id,
        {"todoId": todo_id, "commentId": comment_id},
    )


def reaction_set(  # noqa: PLR0913
    todo_id: int,
    comment_id: int,
    *,
    user_id: int,
    reaction_type: str,
    list_id: int | None,
):
    return _to_list(
        COMMENT_REACTION,
        list_id,
        {
            "todoId": todo_id,
            "commentId": comment_id,
            "reaction": {"user": user_id, "type": reaction_type},
        },
    )


def reaction_removed(todo_id: int, comment_id: int, *, user_id: int, list_id: int | None):
    return _to_list(
        COMMENT_REACTION_REMOVED,
        list_id,
        {"todoId": todo_id, "commentId": comment_id, "userId": user_id},
    )
