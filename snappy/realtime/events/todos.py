from __future__ import annotations

from typing import Any

from snappy.realtime.events import TODO_CREATED
from snappy.realtime.events import TODO_DELETED
from snappy.realtime.events import TODO_UPDATED
from snappy.realtime.events import DomainEvent
from snappy.realtime.rooms import ListRoom
from snappy.realtime.rooms import UserRoom


def _rooms(actor_id: int, *list_ids: int | None) -> tuple:
    rooms = [ListRoom(list_id) for list_id in dict.fromkeys(list_ids) if list_id is not None]
    rooms.append(UserRoom(actor_id))
    return tuple(rooms)


def todo_created(payload: dict[str, Any], *, list_id: int | None, actor_id: int):
    return (DomainEvent(TODO_CREATED, _rooms(actor_id, list_id), payload),)


def todo_updated(
    payload: dict[str, Any],
    *,
    list_id: int | None,
    actor_id: int,
    previous_list_id: int | None = None,
):
    # A todo moved between lists is announced in both rooms.
    rooms = _rooms(actor_id, list_id, previous_list_id)
    return (DomainEvent(TODO_UPDATED, rooms, payload),)


def todo_deleted(todo_id: int, *, list_id: int | None, actor_id: int):
    return (DomainEvent(TODO_DELETED, _rooms(actor_id, list_id), {"id": todo_id}),)
