import pytest

from snappy.lists import access
from snappy.lists.models import Collaborator
from snappy.lists.models import List
from snappy.todos.models import Todo

pytestmark = pytest.mark.django_db


def test_owner_reads_and_writes(user, shared_list):
    assert access.can_read(user.pk, shared_list)
    assert access.can_write(user.pk, shared_list)


def test_editor_reads_and_writes(other_user, shared_list):
    assert access.can_read(other_user.pk, shared_list)
    assert access.can_write(other_user.pk, shared_list)


def test_viewer_reads_only(third_user, shared_list):
    assert access.can_read(third_user.pk, shared_list)
    assert not access.can_write(third_user.pk, shared_list)


def test_stranger_and_anonymous_have_no_access(stranger, shared_list):
    assert not access.can_read(stranger.pk, shared_list)
    assert not access.can_write(stranger.pk, shared_list)
    assert not access.can_read(None, shared_list)
    assert not access.can_write(None, None)


def test_write_implies_read_for_every_role(user, other_user, third_user, shared_list):
    for candidate in (user, other_user, third_user):
        if access.can_write(candidate.pk, shared_list):
            assert access.can_read(candidate.pk, shared_list)


def test_role_change_takes_effect_immediately(other_user, shared_list):
    assert access.can_write(other_user.pk, shared_list)
    Collaborator.objects.filter(list=shared_list, user=other_user).update(
        role=Collaborator.Role.VIEWER,
    )
    assert not access.can_write(other_user.pk, shared_list)
    Collaborator.objects.filter(list=shared_list, user=other_user).delete()
    assert not access.can_read(other_user.pk, shared_list)


def test_inbox_todo_is_owner_only(user, other_user):
    todo = Todo.objects.create(owner=user, title="Private")
    assert access.can_read_todo(user.pk, todo)
    assert access.can_write_todo(user.pk, todo)
    assert not access.can_read_todo(other_user.pk, todo)


def test_list_todo_follows_list_role(user, third_user, shared_list):
    todo = Todo.objects.create(owner=user, list=shared_list, title="Milk")
    assert access.can_read_todo(third_user.pk, todo)
    assert not access.can_write_todo(third_user.pk, todo)


def test_readable_lists(user, other_user, shared_list):
    List.objects.create(name="Mine only", owner=user)
    assert list(access.readable_lists(other_user.pk)) == [shared_list]
    assert access.readable_lists(user.pk).count() == 2
