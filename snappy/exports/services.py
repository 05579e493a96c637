from __future__ import annotations

import csv
import io
from typing import Any

from django.db.models import Prefetch
from django.db.models import QuerySet
from django.utils import timezone

from snappy.lists.access import readable_lists
from snappy.lists.api.serializers import ListSerializer
from snappy.lists.models import Collaborator
from snappy.todos.api.serializers import TodoSerializer
from snappy.todos.models import Todo

EXPORT_VERSION = "1.0.0"
CSV_HEADERS = (
    "Title",
    "Status",
    "Priority",
    "List",
    "Tags",
    "Due Date",
    "Energy Level",
    "Effort (mins)",
    "Created At",
    "Completed At",
)


def exported_todos(user, *, include_archived: bool = False) -> QuerySet[Todo]:
    qs = Todo.objects.filter(owner=user).select_related("owner", "list")
    if not include_archived:
        qs = qs.exclude(status=Todo.Status.ARCHIVED)
    return qs.prefetch_related("assigned_to").order_by("created_at", "id")


def export_json(user, *, include_archived: bool = False, request=None) -> dict[str, Any]:
    todos = exported_todos(user, include_archived=include_archived)
    lists = readable_lists(user.pk).select_related("owner").prefetch_related(
        Prefetch("collaborators", queryset=Collaborator.objects.select_related("user")),
    )
    context = {"request": request}
    todo_data = TodoSerializer(todos, many=True, context=context).data
    list_data = ListSerializer(lists, many=True, context=context).data
    return {
        "version": EXPORT_VERSION,
        "exported_at": timezone.now().isoformat(),
        "user": user.pk,
        "data": {"todos": todo_data, "lists": list_data},
        "stats": {"total_todos": len(todo_data), "total_lists": len(list_data)},
    }


def _iso(value) -> str:
    return value.isoformat() if value else ""


def export_csv(user, *, include_archived: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for todo in exported_todos(user, include_archived=include_archived):
        writer.writerow(
            [
                todo.title,
                todo.status,
                todo.priority,
                todo.list.name if todo.list_id else "",
                "; ".join(todo.tags or []),
                _iso(todo.due_at),
                todo.energy_level,
                todo.effort_minutes,
                _iso(todo.created_at),
                _iso(todo.completed_at),
            ],
        )
    return buffer.getvalue()
