import pytest
from rest_framework import status

from snappy.todos.models import Todo

pytestmark = pytest.mark.django_db

TODOS_URL = "/api/v1/todos/"


def test_create_and_read_back(auth_client, user):
    payload = {
        "title": "  Buy groceries  ",
        "note": "milk, eggs",
        "tags": ["Home", " errands", "home"],
        "priority": 1,
        "energy_level": "low",
        "effort_minutes": 20,
        "sub_steps": [{"title": "Make a list"}, {"title": "Go", "order": 1}],
        "links": [{"url": "https://example.com/shop", "title": "Shop"}],
    }
    r = auth_client.post(TODOS_URL, payload, format="json")
    assert r.status_code == status.HTTP_201_CREATED, r.content
    created = r.data
    assert created["title"] == "Buy groceries"
    assert created["tags"] == ["home", "errands"]
    assert created["status"] == "todo"
    assert created["completed_at"] is None
    assert created["owner"]["id"] == user.pk
    assert all(step["id"] for step in created["sub_steps"])

    r = auth_client.get(f"{TODOS_URL}{created['id']}/")
    assert r.status_code == status.HTTP_200_OK
    for field in ("title", "note", "tags", "priority", "energy_level", "effort_minutes", "links"):
        assert r.data[field] == created[field]


def test_title_is_required(auth_client):
    r = auth_client.post(TODOS_URL, {"title": "   "}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert "title" in r.json()["error"]["details"]


def test_effort_bounds(auth_client):
    r = auth_client.post(TODOS_URL, {"title": "x", "effort_minutes": 481}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST


def test_completed_at_is_server_managed(auth_client):
    r = auth_client.post(
        TODOS_URL,
        {"title": "x", "completed_at": "2024-01-01T00:00:00Z"},
        format="json",
    )
    assert r.status_code == status.HTTP_201_CREATED
    assert r.data["completed_at"] is None

    r = auth_client.patch(f"{TODOS_URL}{r.data['id']}/", {"status": "done"}, format="json")
    assert r.status_code == status.HTTP_200_OK
    assert r.data["completed_at"] is not None


def test_list_is_paginated_with_skip_and_limit(auth_client, user):
    for n in range(3):
        Todo.objects.create(owner=user, title=f"t{n}")

    r = auth_client.get(TODOS_URL, {"limit": 2, "skip": 0})
    assert r.status_code == status.HTTP_200_OK
    assert len(r.data["results"]) == 2
    assert r.data["pagination"] == {"total": 3, "limit": 2, "skip": 0, "hasMore": True}


def test_list_by_foreign_list_is_forbidden(client_for, stranger, shared_list):
    r = client_for(stranger).get(TODOS_URL, {"list_id": shared_list.pk})
    assert r.status_code == status.HTTP_403_FORBIDDEN


def test_create_in_foreign_list_is_not_found(client_for, stranger, shared_list):
    r = client_for(stranger).post(
        TODOS_URL,
        {"title": "sneaky", "list_id": shared_list.pk},
        format="json",
    )
    assert r.status_code == status.HTTP_404_NOT_FOUND
    assert r.json()["error"]["code"] == "not_found"


def test_viewer_can_read_but_not_edit(client_for, user, third_user, shared_list):
    todo = Todo.objects.create(owner=user, list=shared_list, title="Milk")
    client = client_for(third_user)

    assert client.get(f"{TODOS_URL}{todo.pk}/").status_code == status.HTTP_200_OK
    r = client.patch(f"{TODOS_URL}{todo.pk}/", {"title": "Oat"}, format="json")
    assert r.status_code == status.HTTP_403_FORBIDDEN
    assert client.delete(f"{TODOS_URL}{todo.pk}/").status_code == status.HTTP_403_FORBIDDEN


def test_missing_todo(auth_client):
    r = auth_client.get(f"{TODOS_URL}999999/")
    assert r.status_code == status.HTTP_404_NOT_FOUND


def test_versions_endpoint(auth_client, user):
    todo = Todo.objects.create(owner=user, title="v1")
    auth_client.patch(f"{TODOS_URL}{todo.pk}/", {"title": "v2"}, format="json")
    auth_client.patch(f"{TODOS_URL}{todo.pk}/", {"title": "v3"}, format="json")

    r = auth_client.get(f"{TODOS_URL}{todo.pk}/versions/")
    assert r.status_code == status.HTTP_200_OK
    assert [(v["version"], v["title"]) for v in r.data["results"]] == [(1, "v1"), (2, "v2")]


def test_comment_flow(client_for, user, other_user, shared_list):
    todo = Todo.objects.create(owner=user, list=shared_list, title="Party")
    editor = client_for(other_user)

    r = editor.post(f"{TODOS_URL}{todo.pk}/comments/", {"text": " Bring cake "}, format="json")
    assert r.status_code == status.HTTP_201_CREATED, r.content
    comment_id = r.data["id"]
    assert r.data["text"] == "Bring cake"

    r = editor.post(
        f"{TODOS_URL}{todo.pk}/comments/{comment_id}/reactions/",
        {"type": "love"},
        format="json",
    )
    assert r.status_code == status.HTTP_200_OK
    assert [x["type"] for x in r.data["reactions"]] == ["love"]

    r = editor.patch(
        f"{TODOS_URL}{todo.pk}/comments/{comment_id}/",
        {"text": "Bring two cakes"},
        format="json",
    )
    assert r.data["text"] == "Bring two cakes"

    r = client_for(user).get(f"{TODOS_URL}{todo.pk}/comments/")
    assert [c["text"] for c in r.data["results"]] == ["Bring two cakes"]

    r = client_for(user).delete(f"{TODOS_URL}{todo.pk}/comments/{comment_id}/")
    assert r.status_code == status.HTTP_204_NO_CONTENT


def test_focus_endpoints(auth_client, user):
    todo = Todo.objects.create(owner=user, title="Focus")
    base = f"{TODOS_URL}{todo.pk}/focus"

    assert auth_client.get(f"{base}/active/").data == {"active": False}
    r = auth_client.post(f"{base}/start/")
    assert r.status_code == status.HTTP_201_CREATED

    r = auth_client.post(f"{base}/start/")
    assert r.status_code == status.HTTP_409_CONFLICT
    assert r.json()["error"]["code"] == "session_already_active"

    r = auth_client.get(f"{base}/active/")
    assert r.data["active"] is True
    assert r.data["elapsed_minutes"] == 0

    r = auth_client.post(f"{base}/stop/", {"interrupted": True}, format="json")
    assert r.status_code == status.HTTP_200_OK
    assert r.data["session"]["interrupted"] is True
    assert r.data["total_focus_time"] == 0

    r = auth_client.post(f"{base}/stop/")
    assert r.json()["error"]["code"] == "no_active_session"

    r = auth_client.get("/api/v1/focus/sessions/")
    assert r.data["results"][0]["todo_title"] == "Focus"
    r = auth_client.get("/api/v1/focus/stats/", {"period": "24h"})
    assert r.data["total_sessions"] == 1


def test_create_without_tags_defaults_to_empty_list(auth_client):
    assert Todo._meta.get_field("tags").default is list

    r = auth_client.post(TODOS_URL, {"title": "Buy milk"}, format="json")

    assert r.status_code == status.HTTP_201_CREATED, r.content
    assert r.data["tags"] == []
    assert Todo.objects.get(pk=r.data["id"]).tags == []
