"""A shared list seen from two connected clients."""

import pytest
from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.test import APIClient

from snappy.realtime.events import COMMENT_ADDED
from snappy.realtime.events import TODO_CREATED
from snappy.realtime.events import TODO_UPDATED
from snappy.realtime.rooms import ListRoom

pytestmark = pytest.mark.django_db


def bearer(token):
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
    return client


@pytest.fixture
def team(user, other_user, third_user, token_for, fanout):
    owner = bearer(token_for(user))
    created = owner.post("/api/v1/lists/", {"name": "Launch"}, format="json")
    assert created.status_code == status.HTTP_201_CREATED, created.content
    list_id = created.data["id"]

    for person, role in ((other_user, "editor"), (third_user, "viewer")):
        invited = owner.post(
            f"/api/v1/lists/{list_id}/invite/",
            {"email": person.email, "role": role},
            format="json",
        )
        assert invited.status_code == status.HTTP_201_CREATED, invited.content

    async_to_sync(fanout.connect)("owner-sid", token_for(user))
    async_to_sync(fanout.connect)("editor-sid", token_for(other_user))
    fanout.join("editor-sid", ListRoom(list_id))
    return {
        "list_id": list_id,
        "owner": owner,
        "editor": bearer(token_for(other_user)),
        "viewer": bearer(token_for(third_user)),
    }


def test_editor_todo_reaches_the_list_room(team, transport, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        r = team["editor"].post(
            "/api/v1/todos/",
            {"title": "Write release notes", "list_id": team["list_id"]},
            format="json",
        )
    assert r.status_code == status.HTTP_201_CREATED, r.content

    # The owner has not joined the list room.
    assert [kind for kind, _ in transport.to("editor-sid")] == [TODO_CREATED]
    assert transport.to("owner-sid") == []

    payload = transport.to("editor-sid")[0][1]
    assert payload["id"] == r.data["id"]
    assert payload["list_id"] == team["list_id"]


def test_owner_joining_list_sees_updates(team, fanout, transport, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        todo_id = team["editor"].post(
            "/api/v1/todos/",
            {"title": "Book venue", "list_id": team["list_id"]},
            format="json",
        ).data["id"]
    fanout.join("owner-sid", ListRoom(team["list_id"]))

    with django_capture_on_commit_callbacks(execute=True):
        r = team["owner"].patch(f"/api/v1/todos/{todo_id}/", {"status": "done"}, format="json")
    assert r.status_code == status.HTTP_200_OK, r.content

    for sid in ("owner-sid", "editor-sid"):
        assert transport.to(sid)[-1][0] == TODO_UPDATED
        assert transport.to(sid)[-1][1]["status"] == "done"


def test_viewer_edit_is_rejected_without_event(team, transport, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        todo_id = team["owner"].post(
            "/api/v1/todos/",
            {"title": "Order swag", "list_id": team["list_id"]},
            format="json",
        ).data["id"]
    before = len(transport.sent)

    with django_capture_on_commit_callbacks(execute=True):
        r = team["viewer"].patch(f"/api/v1/todos/{todo_id}/", {"title": "Sneaky"}, format="json")
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert r.json()["error"]["code"] == "forbidden"
    assert len(transport.sent) == before


def test_viewer_comment_is_broadcast(team, transport, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        todo_id = team["owner"].post(
            "/api/v1/todos/",
            {"title": "Pick a date", "list_id": team["list_id"]},
            format="json",
        ).data["id"]
        r = team["viewer"].post(f"/api/v1/todos/{todo_id}/comments/", {"text": "Friday?"}, format="json")
    assert r.status_code == status.HTTP_201_CREATED, r.content

    assert [kind for kind, _ in transport.to("editor-sid")] == [TODO_CREATED, COMMENT_ADDED]


def test_expired_token_is_rejected_over_rest(user, expired_token):
    r = bearer(expired_token(user.pk)).get("/api/v1/todos/")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
    assert r.json()["error"]["code"] == "token_expired"
