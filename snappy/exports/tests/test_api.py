import csv
import io

import pytest
from django.utils import timezone
from rest_framework import status

from snappy.exports.services import CSV_HEADERS
from snappy.todos.models import Todo

pytestmark = pytest.mark.django_db


@pytest.fixture
def todos(user, shared_list):
    Todo.objects.create(owner=user, title="Open", tags=["home", "weekly"])
    Todo.objects.create(owner=user, list=shared_list, title="Listed", priority=3)
    Todo.objects.create(owner=user, title="Old", status=Todo.Status.ARCHIVED)
    Todo.objects.create(
        owner=user,
        title="Finished",
        status=Todo.Status.DONE,
        completed_at=timezone.now(),
    )


def test_json_export_excludes_archived(auth_client, user, shared_list, todos):
    r = auth_client.get("/api/v1/export/json/")
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert body["version"] == "1.0.0"
    assert body["user"] == user.pk
    assert {t["title"] for t in body["data"]["todos"]} == {"Open", "Listed", "Finished"}
    assert [item["id"] for item in body["data"]["lists"]] == [shared_list.pk]
    assert body["stats"] == {"total_todos": 3, "total_lists": 1}


def test_json_export_can_include_archived(auth_client, todos):
    r = auth_client.get("/api/v1/export/json/", {"include_archived": "true"})
    assert r.json()["stats"]["total_todos"] == 4


def test_csv_export(auth_client, todos):
    r = auth_client.get("/api/v1/export/csv/")
    assert r.status_code == status.HTTP_200_OK
    assert r["Content-Type"].startswith("text/csv")
    assert r["Content-Disposition"].startswith('attachment; filename="snappy-todo-export-')

    rows = list(csv.reader(io.StringIO(r.content.decode())))
    assert tuple(rows[0]) == CSV_HEADERS
    by_title = {row[0]: row for row in rows[1:]}
    assert set(by_title) == {"Open", "Listed", "Finished"}
    assert by_title["Open"][4] == "home; weekly"
    assert by_title["Listed"][3] == "Groceries"
    assert by_title["Finished"][9] != ""


def test_csv_quotes_every_field(auth_client, user):
    Todo.objects.create(owner=user, title='Say "hi", then leave')
    r = auth_client.get("/api/v1/export/csv/")
    second_line = r.content.decode().splitlines()[1]
    assert second_line.startswith('"Say ""hi"", then leave","todo","2"')


def test_export_requires_auth(api_client):
    r = api_client.get("/api/v1/export/json/")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED
