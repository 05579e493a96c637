from http import HTTPStatus
from unittest import mock

import pytest
import redis
from django.db import connection as dj_conn


class DummyDbError(Exception):
    """Synthetic DB error for testing."""


@pytest.mark.django_db
def test_health_ok(client):
    with mock.patch("config.health.redis.Redis.ping", return_value=True):
        resp = client.get("/health/")
    assert resp.status_code == HTTPStatus.OK
    data = resp.json()
    assert data["status"] == "ok"
    assert data["components"]["db"]["ok"] is True
    assert data["components"]["redis"] == {"ok": True}


@pytest.mark.django_db
def test_health_degraded_when_redis_fails(client):
    with mock.patch(
        "config.health.redis.Redis.ping",
        side_effect=redis.ConnectionError("redis timeout"),
    ):
        resp = client.get("/health/")
    assert resp.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    data = resp.json()
    assert data["components"]["redis"]["ok"] is False
    assert data["status"] == "degraded"


@pytest.mark.django_db
def test_health_down_when_everything_fails(client, monkeypatch):
    msg = "db down"

    def raise_cursor():
        raise DummyDbError(msg)

    monkeypatch.setattr(dj_conn, "cursor", raise_cursor, raising=True)
    with mock.patch(
        "config.health.redis.Redis.ping",
        side_effect=redis.ConnectionError("refused"),
    ):
        resp = client.get("/health/")
    assert resp.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    data = resp.json()
    assert data["components"]["db"] == {"ok": False, "error": msg}
    assert data["status"] == "down"
