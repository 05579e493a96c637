"""Liveness probe for the load balancer and the uptime monitor."""

from __future__ import annotations

import logging
from typing import Any

import redis
from django.conf import settings
from django.db import connection
from django.http import JsonResponse

logger = logging.getLogger(__name__)


def check_db() -> dict[str, Any]:
    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1;")
            cursor.fetchone()
    except Exception as exc:  # noqa: BLE001
        logger.warning("Database health check failed: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True, "vendor": connection.vendor}


def check_redis() -> dict[str, Any]:
    url = getattr(settings, "REDIS_URL", None)
    if not url:
        return {"ok": False, "error": "REDIS_URL not configured"}
    try:
        redis.Redis.from_url(
            url,
            socket_timeout=0.5,
            socket_connect_timeout=0.5,
        ).ping()
    except redis.RedisError as exc:
        logger.warning("Redis health check failed: %s", exc)
        return {"ok": False, "error": str(exc)}
    return {"ok": True}


def overall_status(components: dict[str, dict[str, Any]]) -> str:
    healthy = [c.get("ok", False) for c in components.values()]
    if all(healthy):
        return "ok"
    return "degraded" if any(healthy) else "down"


def health(request):
    components = {"db": check_db(), "redis": check_redis()}
    status = overall_status(components)
    return JsonResponse(
        {"status": status, "components": components},
        status=200 if status == "ok" else 503,
    )
