from datetime import timedelta

import pytest
from django.utils import timezone

from snappy.core.exceptions import Forbidden
from snappy.realtime.events import FOCUS_STARTED
from snappy.realtime.events import FOCUS_STOPPED
from snappy.realtime.rooms import UserRoom
from snappy.todos import focus
from snappy.todos.models import FocusSession
from snappy.todos.models import Todo

pytestmark = pytest.mark.django_db


@pytest.fixture
def todo(user):
    return Todo.objects.create(owner=user, title="Deep work")


def test_elapsed_minutes_floors():
    start = timezone.now()
    assert focus.elapsed_minutes(start, start + timedelta(seconds=59)) == 0
    assert focus.elapsed_minutes(start, start + timedelta(minutes=25, seconds=59)) == 25
    assert focus.elapsed_minutes(start, start - timedelta(minutes=1)) == 0


def test_start_emits_to_owner(user, todo, fanout):
    result = focus.start_focus_session(user, todo.pk, fanout=fanout)

    [event] = result.events
    assert event.kind == FOCUS_STARTED
    assert event.rooms == (UserRoom(user.pk),)
    assert event.payload == {"todoId": todo.pk, "sessionId": result.entity.pk}


def test_second_start_conflicts_and_keeps_first(user, todo, fanout):
    first = focus.start_focus_session(user, todo.pk, fanout=fanout).entity

    with pytest.raises(focus.SessionAlreadyActive):
        focus.start_focus_session(user, todo.pk, fanout=fanout)

    assert list(FocusSession.objects.filter(todo=todo)) == [first]
    first.refresh_from_db()
    assert first.ended_at is None


def test_stop_adds_whole_minutes(user, todo, fanout):
    session = focus.start_focus_session(user, todo.pk, fanout=fanout).entity
    FocusSession.objects.filter(pk=session.pk).update(
        started_at=timezone.now() - timedelta(minutes=25, seconds=40),
    )

    result = focus.stop_focus_session(user, todo.pk, interrupted=True, fanout=fanout)

    assert result.entity.duration == 25
    assert result.entity.interrupted is True
    assert result.events[0].kind == FOCUS_STOPPED
    assert result.events[0].payload["duration"] == 25
    todo.refresh_from_db()
    assert todo.total_focus_time == 25


def test_stop_without_session(user, todo, fanout):
    with pytest.raises(focus.NoActiveSession):
        focus.stop_focus_session(user, todo.pk, fanout=fanout)


def test_focus_is_owner_only(other_user, user, shared_list, fanout):
    shared = Todo.objects.create(owner=user, list=shared_list, title="Shared")
    with pytest.raises(Forbidden):
        focus.start_focus_session(other_user, shared.pk, fanout=fanout)


def test_new_session_after_stop(user, todo, fanout):
    focus.start_focus_session(user, todo.pk, fanout=fanout)
    focus.stop_focus_session(user, todo.pk, fanout=fanout)
    focus.start_focus_session(user, todo.pk, fanout=fanout)
    assert FocusSession.objects.filter(todo=todo).count() == 2
    assert focus.active_focus_session(user, todo.pk) is not None


def test_stats(user, todo):
    now = timezone.now()
    FocusSession.objects.create(
        todo=todo,
        started_at=now - timedelta(hours=2),
        ended_at=now - timedelta(hours=1, minutes=35),
        duration=25,
    )
    FocusSession.objects.create(
        todo=todo,
        started_at=now - timedelta(hours=1),
        ended_at=now - timedelta(minutes=45),
        duration=15,
        interrupted=True,
    )
    FocusSession.objects.create(
        todo=todo,
        started_at=now - timedelta(days=10),
        ended_at=now - timedelta(days=10) + timedelta(minutes=50),
        duration=50,
    )

    stats = focus.focus_stats(user, "7d")

    assert stats["period"] == "7d"
    assert stats["total_sessions"] == 2
    assert stats["completed_sessions"] == 2
    assert stats["interrupted_sessions"] == 1
    assert stats["total_focus_time"] == 40
    assert stats["average_session_length"] == 20
    assert sum(stats["by_day"].values()) == 40
    assert stats["most_productive_time"] is not None

    assert focus.focus_stats(user, "30d")["total_sessions"] == 3


def test_stats_empty(user):
    stats = focus.focus_stats(user, "bogus")
    assert stats["period"] == "7d"
    assert stats["total_sessions"] == 0
    assert stats["average_session_length"] == 0
    assert stats["most_productive_time"] is None
