"""Mutation handlers for todos.

Every handler follows the same order: check access against current rows,
validate and persist the change, append an activity record, then hand the
resulting domain events to the fan-out, which delivers them only after the
surrounding transaction commits.
"""

from __future__ import annotations

import json
import logging
from functools import partial
from typing import TYPE_CHECKING
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from snappy.activity.models import Activity
from snappy.activity.utils import log_activity
from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.lists import access
from snappy.lists.models import List
from snappy.realtime.events import MutationResult
from snappy.realtime.events import todos as todo_events

from .api.serializers import TodoSerializer
from .models import Todo
from .models import TodoVersion
from .tasks import classify_todo

if TYPE_CHECKING:
    from snappy.realtime.fanout import Fanout

logger = logging.getLogger(__name__)

WRITABLE_FIELDS = (
    "title",
    "note",
    "blocks",
    "sub_steps",
    "links",
    "voice_note",
    "ai_summary",
    "tags",
    "priority",
    "due_at",
    "best_time_to_complete",
    "estimated_duration",
    "snooze_until",
    "energy_level",
    "effort_minutes",
    "location",
    "mood",
    "status",
    "source",
)
VERSIONED_FIELDS = ("title", "note")


def validate_todo_state(todo: Todo) -> None:
    """Reject a todo whose completion timestamp disagrees with its status."""
    is_done = todo.status == Todo.Status.DONE
    if is_done != (todo.completed_at is not None):
        msg = "completed_at must be set exactly when status is done"
        raise ValidationError({"completed_at": [msg]})


def _apply_status(todo: Todo, status: str) -> None:
    was_done = todo.status == Todo.Status.DONE
    todo.status = status
    if status == Todo.Status.DONE:
        if not was_done or todo.completed_at is None:
            todo.completed_at = timezone.now()
    else:
        todo.completed_at = None


def todo_payload(todo: Todo) -> dict[str, Any]:
    return dict(TodoSerializer(todo).data)


def get_todo_for(user, todo_id: Any) -> Todo:
    """Fetch a todo the user may read."""
    try:
        todo = Todo.objects.select_related("owner", "list").get(pk=todo_id)
    except (Todo.DoesNotExist, ValueError, TypeError) as exc:
        msg = "Todo not found"
        raise NotFound(msg) from exc
    if not access.can_read_todo(user.pk, todo):
        raise Forbidden
    return todo


def _lock_todo(todo_id: Any) -> Todo:
    try:
        return Todo.objects.select_for_update().get(pk=todo_id)
    except (Todo.DoesNotExist, ValueError, TypeError) as exc:
        msg = "Todo not found"
        raise NotFound(msg) from exc


def _readable_list(user, list_id: Any) -> List:
    task_list = List.objects.filter(pk=list_id).first()
    if task_list is None or not access.can_read(user.pk, task_list):
        msg = "List not found or access denied"
        raise NotFound(msg)
    return task_list


def _schedule_classification(actor, todo: Todo) -> None:
    if getattr(actor, "ai_enabled", False):
        transaction.on_commit(partial(classify_todo.delay, todo.pk))


def create_todo(actor, data: dict[str, Any], *, fanout: Fanout) -> MutationResult[Todo]:
    task_list = None
    if data.get("list_id") is not None:
        task_list = _readable_list(actor, data["list_id"])

    fields = {k: v for k, v in data.items() if k in WRITABLE_FIELDS}
    status = fields.pop("status", Todo.Status.TODO)
    with transaction.atomic():
        todo = Todo(owner=actor, list=task_list, **fields)
        _apply_status(todo, status)
        validate_todo_state(todo)
        todo.save()
        if data.get("assigned_to"):
            todo.assigned_to.set(data["assigned_to"])

    log_activity(
        Activity.Action.CREATE_TODO,
        actor=actor,
        target_type=Activity.TargetType.TODO,
        target_id=todo.pk,
        list_id=todo.list_id,
        payload={"title": todo.title},
    )
    events = todo_events.todo_created(
        todo_payload(todo),
        list_id=todo.list_id,
        actor_id=actor.pk,
    )
    fanout.publish(events)
    _schedule_classification(actor, todo)
    return MutationResult(todo, events)


def update_todo(
    actor,
    todo_id: Any,
    changes: dict[str, Any],
    *,
    fanout: Fanout,
) -> MutationResult[Todo]:
    with transaction.atomic():
        todo = _lock_todo(todo_id)
        if not access.can_write_todo(actor.pk, todo):
            raise Forbidden

        previous_list_id = todo.list_id
        if "list_id" in changes and changes["list_id"] != previous_list_id:
            todo.list = _destination_list(actor, changes["list_id"])

        applied = {k: v for k, v in changes.items() if k in WRITABLE_FIELDS}
        status = applied.pop("status", None)
        was_done = todo.status == Todo.Status.DONE
        title_changed = "title" in applied and applied["title"] != todo.title

        if any(
            field in applied and applied[field] != getattr(todo, field)
            for field in VERSIONED_FIELDS
        ):
            TodoVersion.objects.create(
                todo=todo,
                version=todo.version,
                title=todo.title,
                note=todo.note,
                modified_by=actor,
            )
            todo.version += 1

        for field, value in applied.items():
            setattr(todo, field, value)
        if status is not None:
            _apply_status(todo, status)

        validate_todo_state(todo)
        todo.save()
        if "assigned_to" in changes:
            todo.assigned_to.set(changes["assigned_to"])

    completed = not was_done and todo.status == Todo.Status.DONE
    changed = sorted(k for k in changes if k in (*WRITABLE_FIELDS, "list_id", "assigned_to"))
    log_activity(
        Activity.Action.COMPLETE_TODO if completed else Activity.Action.UPDATE_TODO,
        actor=actor,
        target_type=Activity.TargetType.TODO,
        target_id=todo.pk,
        list_id=todo.list_id,
        payload={"title": todo.title, "fields": changed},
    )
    events = todo_events.todo_updated(
        todo_payload(todo),
        list_id=todo.list_id,
        actor_id=actor.pk,
        previous_list_id=previous_list_id,
    )
    fanout.publish(events)
    if title_changed:
        _schedule_classification(actor, todo)
    return MutationResult(todo, events)


def _destination_list(actor, list_id: Any) -> List | None:
    if list_id is None:
        return None
    task_list = _readable_list(actor, list_id)
    if not access.can_write(actor.pk, task_list):
        msg = "Cannot move a todo into a read-only list"
        raise Forbidden(msg)
    return task_list


def delete_todo(actor, todo_id: Any, *, fanout: Fanout) -> MutationResult[int]:
    todo = get_todo_for(actor, todo_id)
    if not access.can_write_todo(actor.pk, todo):
        raise Forbidden
    pk, list_id, title = todo.pk, todo.list_id, todo.title
    todo.delete()
    log_activity(
        Activity.Action.DELETE_TODO,
        actor=actor,
        target_type=Activity.TargetType.TODO,
        target_id=pk,
        list_id=list_id,
        payload={"title": title},
    )
    events = todo_events.todo_deleted(pk, list_id=list_id, actor_id=actor.pk)
    fanout.publish(events)
    return MutationResult(pk, events)


def list_todos(
    user,
    *,
    list_id: int | None = None,
    tag: str | None = None,
    status: str | None = None,
) -> QuerySet[Todo]:
    """Todos visible in one list, or the user's own todos when no list is given."""
    if list_id is not None:
        task_list = List.objects.filter(pk=list_id).first()
        if task_list is None:
            msg = "List not found"
            raise NotFound(msg)
        if not access.can_read(user.pk, task_list):
            raise Forbidden
        qs = Todo.objects.filter(list=task_list)
    else:
        qs = Todo.objects.filter(owner=user)

    if tag:
        # JSON containment is not portable across backends; match the
        # serialized element instead.
        qs = qs.filter(tags__icontains=json.dumps(tag.strip().lower()))
    if status:
        qs = qs.filter(status=status)
    return qs.select_related("owner").prefetch_related("assigned_to")
