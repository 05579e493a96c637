from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework import status

from snappy.activity.models import Activity
from snappy.activity.tasks import purge_expired
from snappy.activity.utils import log_activity
from snappy.lists.models import List

pytestmark = pytest.mark.django_db

URL = "/api/v1/activity/"


def record(actor, action=Activity.Action.CREATE_TODO, *, target_id=1, list_id=None, age=None):
    entry = log_activity(
        action,
        actor=actor,
        target_type=Activity.TargetType.TODO,
        target_id=target_id,
        list_id=list_id,
        payload={"title": "t"},
    )
    if age is not None:
        Activity.objects.filter(pk=entry.pk).update(created_at=timezone.now() - age)
    return entry


def test_feed_is_own_entries_only(auth_client, user, stranger):
    mine = record(user)
    record(stranger)

    r = auth_client.get(URL)
    assert r.status_code == status.HTTP_200_OK
    assert [a["id"] for a in r.data["results"]] == [mine.pk]
    assert r.data["pagination"]["limit"] == 50


def test_feed_filters_by_target(auth_client, user):
    record(user, target_id=1)
    wanted = record(user, target_id=2)

    r = auth_client.get(URL, {"target_type": "todo", "target_id": 2})
    assert [a["id"] for a in r.data["results"]] == [wanted.pk]


def test_list_feed_for_readers(client_for, user, third_user, shared_list):
    entry = record(user, list_id=shared_list.pk)
    record(user, list_id=None)

    r = client_for(third_user).get(f"{URL}lists/{shared_list.pk}/")
    assert r.status_code == status.HTTP_200_OK
    assert [a["id"] for a in r.data["results"]] == [entry.pk]


def test_list_feed_denied_for_strangers(client_for, stranger, shared_list):
    client = client_for(stranger)
    assert client.get(f"{URL}lists/{shared_list.pk}/").status_code == status.HTTP_403_FORBIDDEN
    assert client.get(f"{URL}lists/999999/").status_code == status.HTTP_404_NOT_FOUND


def test_list_activity_survives_list_deletion_in_actor_feed(auth_client, user):
    task_list = List.objects.create(name="Gone", owner=user)
    record(user, Activity.Action.DELETE_LIST, target_id=task_list.pk, list_id=task_list.pk)
    task_list.delete()
    assert auth_client.get(URL).data["pagination"]["total"] == 1


def test_stats(auth_client, user):
    record(user)
    record(user)
    record(user, Activity.Action.COMPLETE_TODO)
    record(user, age=timedelta(days=20))

    r = auth_client.get(f"{URL}stats/", {"period": "7d"})
    assert r.status_code == status.HTTP_200_OK
    assert r.data["total"] == 3
    assert r.data["by_action"] == {"create_todo": 2, "complete_todo": 1}
    assert r.data["most_active"]["count"] == 3


def test_cleanup_removes_only_old_own_entries(auth_client, user, stranger):
    record(user, age=timedelta(days=100))
    fresh = record(user)
    record(stranger, age=timedelta(days=100))

    r = auth_client.delete(f"{URL}cleanup/")
    assert r.status_code == status.HTTP_200_OK
    assert r.data == {"deleted": 1}
    assert list(Activity.objects.filter(actor=user)) == [fresh]
    assert Activity.objects.filter(actor__email="stranger@example.com").count() == 1


def test_purge_task_uses_retention(settings, user):
    settings.SNAPPY_ACTIVITY_RETENTION_DAYS = 30
    record(user, age=timedelta(days=31))
    record(user)
    assert purge_expired() == 1
    assert Activity.objects.count() == 1
