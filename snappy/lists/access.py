"""Read/write predicates for lists and the todos inside them.

Collaborator roles can change between two requests, so every call reads the
current collaborator row; nothing here is cached.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.db.models import Q

from .models import Collaborator
from .models import List

if TYPE_CHECKING:
    from django.db.models import QuerySet

    from snappy.todos.models import Todo


def _collaborator_role(user_id: int, list_id: int) -> str | None:
    return (
        Collaborator.objects.filter(list_id=list_id, user_id=user_id)
        .values_list("role", flat=True)
        .first()
    )


def can_read(user_id: int | None, task_list: List | None) -> bool:
    if user_id is None or task_list is None:
        return False
    if task_list.owner_id == user_id:
        return True
    return _collaborator_role(user_id, task_list.pk) is not None


def can_write(user_id: int | None, task_list: List | None) -> bool:
    if user_id is None or task_list is None:
        return False
    if task_list.owner_id == user_id:
        return True
    return _collaborator_role(user_id, task_list.pk) == Collaborator.Role.EDITOR


def is_owner(user_id: int | None, task_list: List | None) -> bool:
    return task_list is not None and user_id is not None and task_list.owner_id == user_id


def can_read_todo(user_id: int | None, todo: Todo) -> bool:
    if todo.list_id is None:
        return user_id is not None and todo.owner_id == user_id
    return can_read(user_id, todo.list)


def can_write_todo(user_id: int | None, todo: Todo) -> bool:
    if todo.list_id is None:
        return user_id is not None and todo.owner_id == user_id
    return can_write(user_id, todo.list)


def readable_lists(user_id: int) -> QuerySet[List]:
    return (
        List.objects.filter(Q(owner_id=user_id) | Q(collaborators__user_id=user_id))
        .distinct()
    )
