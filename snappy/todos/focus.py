"""Focus sessions on a todo.

A todo has at most one open session (no ``ended_at``). Starting re-checks
that under a row lock on the todo, and the partial unique constraint
``one_open_focus_session_per_todo`` backs it up at the database level.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING
from typing import Any

from django.db import IntegrityError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from snappy.core.exceptions import Conflict
from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.core.periods import DEFAULT_PERIOD
from snappy.core.periods import PERIODS
from snappy.core.periods import period_start
from snappy.realtime.events import MutationResult
from snappy.realtime.events import focus as focus_events

from .models import FocusSession
from .models import Todo

if TYPE_CHECKING:
    from snappy.realtime.fanout import Fanout

logger = logging.getLogger(__name__)


class SessionAlreadyActive(Conflict):
    default_detail = "Focus session already in progress"
    default_code = "session_already_active"


class NoActiveSession(Conflict):
    default_detail = "No active focus session found"
    default_code = "no_active_session"


def elapsed_minutes(started_at, ended_at) -> int:
    return max(0, int((ended_at - started_at).total_seconds() // 60))


def _owned_todo(user, todo_id: Any, *, lock: bool = False) -> Todo:
    qs = Todo.objects.select_for_update() if lock else Todo.objects.all()
    try:
        todo = qs.get(pk=todo_id)
    except (Todo.DoesNotExist, ValueError, TypeError) as exc:
        msg = "Todo not found"
        raise NotFound(msg) from exc
    if todo.owner_id != user.pk:
        msg = "Only the todo owner can track focus time"
        raise Forbidden(msg)
    return todo


def _open_session(todo: Todo) -> FocusSession | None:
    return FocusSession.objects.filter(todo=todo, ended_at__isnull=True).first()


def start_focus_session(actor, todo_id: Any, *, fanout: Fanout) -> MutationResult[FocusSession]:
    try:
        with transaction.atomic():
            todo = _owned_todo(actor, todo_id, lock=True)
            if _open_session(todo) is not None:
                raise SessionAlreadyActive
            session = FocusSession.objects.create(todo=todo)
    except IntegrityError as exc:
        # Lost a race with a concurrent start.
        raise SessionAlreadyActive from exc

    logger.info("Focus session %s started on todo %s", session.pk, todo.pk)
    events = focus_events.focus_started(todo.pk, session.pk, user_id=actor.pk)
    fanout.publish(events)
    return MutationResult(session, events)


def stop_focus_session(
    actor,
    todo_id: Any,
    *,
    interrupted: bool = False,
    fanout: Fanout,
) -> MutationResult[FocusSession]:
    with transaction.atomic():
        todo = _owned_todo(actor, todo_id, lock=True)
        session = _open_session(todo)
        if session is None:
            raise NoActiveSession

        session.ended_at = timezone.now()
        session.interrupted = interrupted
        session.duration = elapsed_minutes(session.started_at, session.ended_at)
        session.save(update_fields=["ended_at", "interrupted", "duration"])
        Todo.objects.filter(pk=todo.pk).update(
            total_focus_time=F("total_focus_time") + session.duration,
        )

    events = focus_events.focus_stopped(
        todo.pk,
        session.pk,
        session.duration,
        user_id=actor.pk,
    )
    fanout.publish(events)
    return MutationResult(session, events)


def active_focus_session(user, todo_id: Any) -> FocusSession | None:
    return _open_session(_owned_todo(user, todo_id))


def focus_stats(user, period: str | None = None) -> dict[str, Any]:
    since = period_start(period)
    sessions = FocusSession.objects.filter(
        todo__owner=user,
        started_at__gte=since,
    ).values_list("started_at", "duration", "interrupted")

    total_sessions = total_time = completed = interrupted_count = 0
    by_day: dict[str, int] = {}
    hours: Counter[int] = Counter()
    for started_at, duration, interrupted in sessions:
        total_sessions += 1
        if duration:
            total_time += duration
            completed += 1
        if interrupted:
            interrupted_count += 1
        local_start = timezone.localtime(started_at)
        day = local_start.date().isoformat()
        by_day[day] = by_day.get(day, 0) + (duration or 0)
        hours[local_start.hour] += 1

    most_productive = None
    if hours:
        # Earliest hour wins a tie.
        hour = min(hours, key=lambda h: (-hours[h], h))
        most_productive = f"{hour}:00"

    return {
        "period": period if period in PERIODS else DEFAULT_PERIOD,
        "total_sessions": total_sessions,
        "total_focus_time": total_time,
        "completed_sessions": completed,
        "interrupted_sessions": interrupted_count,
        "average_session_length": round(total_time / completed) if completed else 0,
        "by_day": by_day,
        "most_productive_time": most_productive,
    }


def all_focus_sessions(user):
    return FocusSession.objects.filter(todo__owner=user).select_related("todo")
