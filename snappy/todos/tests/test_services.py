import pytest
from rest_framework.exceptions import ValidationError

from snappy.activity.models import Activity
from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.lists.models import List
from snappy.realtime.events import TODO_CREATED
from snappy.realtime.events import TODO_DELETED
from snappy.realtime.events import TODO_UPDATED
from snappy.realtime.rooms import ListRoom
from snappy.realtime.rooms import UserRoom
from snappy.todos import services
from snappy.todos.models import Todo
from snappy.todos.models import TodoVersion

pytestmark = pytest.mark.django_db


def test_create_inbox_todo_defaults(user, fanout):
    result = services.create_todo(user, {"title": "Call mom"}, fanout=fanout)
    todo = result.entity

    assert todo.owner == user
    assert todo.list_id is None
    assert todo.status == Todo.Status.TODO
    assert todo.completed_at is None
    assert todo.priority == 2
    assert todo.effort_minutes == 15
    assert [event.rooms for event in result.events] == [(UserRoom(user.pk),)]


def test_create_in_shared_list_targets_list_and_actor(other_user, shared_list, fanout):
    result = services.create_todo(
        other_user,
        {"title": "Bread", "list_id": shared_list.pk},
        fanout=fanout,
    )

    [event] = result.events
    assert event.kind == TODO_CREATED
    assert event.rooms == (ListRoom(shared_list.pk), UserRoom(other_user.pk))
    assert event.payload["title"] == "Bread"
    assert event.payload["list_id"] == shared_list.pk


def test_create_into_missing_or_foreign_list_is_not_found(user, stranger, fanout):
    with pytest.raises(NotFound):
        services.create_todo(user, {"title": "x", "list_id": 987654}, fanout=fanout)

    foreign = List.objects.create(name="Theirs", owner=stranger)
    with pytest.raises(NotFound):
        services.create_todo(user, {"title": "x", "list_id": foreign.pk}, fanout=fanout)
    assert not Todo.objects.exists()


def test_create_done_sets_completed_at(user, fanout):
    todo = services.create_todo(user, {"title": "Done already", "status": "done"}, fanout=fanout).entity
    assert todo.completed_at is not None


def test_status_transitions_keep_completed_at_in_step(user, fanout):
    todo = services.create_todo(user, {"title": "Ship it"}, fanout=fanout).entity

    done = services.update_todo(user, todo.pk, {"status": "done"}, fanout=fanout).entity
    assert done.completed_at is not None

    reopened = services.update_todo(user, todo.pk, {"status": "in-progress"}, fanout=fanout).entity
    assert reopened.completed_at is None


def test_validate_todo_state_rejects_mismatch(user):
    todo = Todo(owner=user, title="Broken", status=Todo.Status.DONE)
    with pytest.raises(ValidationError):
        services.validate_todo_state(todo)


def test_completing_logs_complete_action(user, fanout):
    todo = services.create_todo(user, {"title": "Finish"}, fanout=fanout).entity
    services.update_todo(user, todo.pk, {"status": "done"}, fanout=fanout)

    latest = Activity.objects.filter(target_id=todo.pk).first()
    assert latest.action == Activity.Action.COMPLETE_TODO
    assert latest.payload == {"title": "Finish", "fields": ["status"]}


def test_title_change_snapshots_previous_version(user, fanout):
    todo = services.create_todo(user, {"title": "Draft", "note": "v1"}, fanout=fanout).entity

    updated = services.update_todo(user, todo.pk, {"title": "Final"}, fanout=fanout).entity

    assert updated.version == 2
    snapshot = TodoVersion.objects.get(todo=todo)
    assert (snapshot.version, snapshot.title, snapshot.note) == (1, "Draft", "v1")
    assert snapshot.modified_by == user


def test_unversioned_change_keeps_version(user, fanout):
    todo = services.create_todo(user, {"title": "Same"}, fanout=fanout).entity
    updated = services.update_todo(user, todo.pk, {"priority": 0, "title": "Same"}, fanout=fanout).entity
    assert updated.version == 1
    assert not TodoVersion.objects.exists()


def test_viewer_cannot_update_or_delete(user, third_user, shared_list, fanout):
    todo = services.create_todo(user, {"title": "Milk", "list_id": shared_list.pk}, fanout=fanout).entity

    with pytest.raises(Forbidden):
        services.update_todo(third_user, todo.pk, {"title": "Oat milk"}, fanout=fanout)
    with pytest.raises(Forbidden):
        services.delete_todo(third_user, todo.pk, fanout=fanout)

    todo.refresh_from_db()
    assert todo.title == "Milk"


def test_stranger_cannot_touch_inbox_todo(user, stranger, fanout):
    todo = services.create_todo(user, {"title": "Mine"}, fanout=fanout).entity
    with pytest.raises(Forbidden):
        services.update_todo(stranger, todo.pk, {"title": "Yours"}, fanout=fanout)
    with pytest.raises(NotFound):
        services.update_todo(stranger, 424242, {"title": "?"}, fanout=fanout)


def test_editor_updates_shared_todo(user, other_user, shared_list, fanout):
    todo = services.create_todo(user, {"title": "Milk", "list_id": shared_list.pk}, fanout=fanout).entity

    result = services.update_todo(other_user, todo.pk, {"note": "2%"}, fanout=fanout)

    [event] = result.events
    assert event.kind == TODO_UPDATED
    assert event.rooms == (ListRoom(shared_list.pk), UserRoom(other_user.pk))
    assert event.payload["note"] == "2%"


def test_move_between_lists_announces_in_both(user, shared_list, fanout):
    other = List.objects.create(name="Errands", owner=user)
    todo = services.create_todo(user, {"title": "Stamps", "list_id": shared_list.pk}, fanout=fanout).entity

    result = services.update_todo(user, todo.pk, {"list_id": other.pk}, fanout=fanout)

    assert result.entity.list_id == other.pk
    assert set(result.events[0].rooms) == {
        ListRoom(other.pk),
        ListRoom(shared_list.pk),
        UserRoom(user.pk),
    }


def test_move_into_read_only_list_is_forbidden(user, third_user, shared_list, fanout):
    todo = services.create_todo(third_user, {"title": "Mine"}, fanout=fanout).entity
    with pytest.raises(Forbidden):
        services.update_todo(third_user, todo.pk, {"list_id": shared_list.pk}, fanout=fanout)


def test_delete_emits_id_only(user, shared_list, fanout):
    todo = services.create_todo(user, {"title": "Temp", "list_id": shared_list.pk}, fanout=fanout).entity
    pk = todo.pk

    result = services.delete_todo(user, pk, fanout=fanout)

    [event] = result.events
    assert event.kind == TODO_DELETED
    assert event.payload == {"id": pk}
    assert not Todo.objects.filter(pk=pk).exists()
    assert Activity.objects.filter(action=Activity.Action.DELETE_TODO, target_id=pk).exists()


def test_list_todos_filters(user, shared_list, fanout):
    services.create_todo(user, {"title": "a", "tags": ["home"]}, fanout=fanout)
    services.create_todo(user, {"title": "b", "tags": ["work"], "status": "done"}, fanout=fanout)
    services.create_todo(user, {"title": "c", "list_id": shared_list.pk}, fanout=fanout)

    assert {t.title for t in services.list_todos(user)} == {"a", "b", "c"}
    assert [t.title for t in services.list_todos(user, tag="HOME")] == ["a"]
    assert [t.title for t in services.list_todos(user, status="done")] == ["b"]
    assert [t.title for t in services.list_todos(user, list_id=shared_list.pk)] == ["c"]


def test_list_todos_for_unreadable_list(user, stranger, shared_list):
    with pytest.raises(Forbidden):
        services.list_todos(stranger, list_id=shared_list.pk)
    with pytest.raises(NotFound):
        services.list_todos(user, list_id=987654)


def test_events_are_delivered_only_after_commit(
    user,
    other_user,
    shared_list,
    fanout,
    transport,
    django_capture_on_commit_callbacks,
):
    fanout.register("owner-sid", user.pk)
    fanout.register("editor-sid", other_user.pk)
    fanout.join("editor-sid", ListRoom(shared_list.pk))

    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        services.create_todo(user, {"title": "Bread", "list_id": shared_list.pk}, fanout=fanout)
        assert transport.sent == []

    assert callbacks
    assert [kind for kind, _ in transport.to("editor-sid")] == [TODO_CREATED]
    assert [kind for kind, _ in transport.to("owner-sid")] == [TODO_CREATED]


def test_classification_runs_after_create(user, fanout, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        todo = services.create_todo(user, {"title": "Write the report"}, fanout=fanout).entity

    todo.refresh_from_db()
    assert todo.ai_classification == {
        "energy": "high",
        "duration": 30,
        "tags": ["general"],
        "confidence": 0.3,
    }


def test_no_classification_when_user_disabled_ai(user, fanout, django_capture_on_commit_callbacks):
    user.settings = {"ai_enabled": False, "multimedia_enabled": True}
    user.save()

    with django_capture_on_commit_callbacks(execute=True):
        todo = services.create_todo(user, {"title": "Write"}, fanout=fanout).entity

    todo.refresh_from_db()
    assert todo.ai_classification is None
