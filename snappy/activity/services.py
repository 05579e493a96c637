"""Read side of the activity log: feeds and aggregate counts."""

from __future__ import annotations

from collections import Counter
from typing import Any

from django.db.models import QuerySet
from django.utils import timezone

from snappy.core.exceptions import Forbidden
from snappy.core.exceptions import NotFound
from snappy.core.periods import DEFAULT_PERIOD
from snappy.core.periods import PERIODS
from snappy.core.periods import period_start
from snappy.lists import access
from snappy.lists.models import List

from .models import Activity


def user_feed(
    user,
    *,
    target_type: str | None = None,
    target_id: int | None = None,
) -> QuerySet[Activity]:
    qs = Activity.objects.filter(actor=user)
    if target_type:
        qs = qs.filter(target_type=target_type)
    if target_id is not None:
        qs = qs.filter(target_id=target_id)
    return qs.select_related("actor")


def list_feed(user, list_id: Any) -> QuerySet[Activity]:
    """Everything recorded against a list and the todos it holds."""
    try:
        task_list = List.objects.get(pk=list_id)
    except (List.DoesNotExist, ValueError, TypeError) as exc:
        msg = "List not found"
        raise NotFound(msg) from exc
    if not access.can_read(user.pk, task_list):
        raise Forbidden
    return Activity.objects.filter(list_id=task_list.pk).select_related("actor")


def activity_stats(user, period: str | None = None) -> dict[str, Any]:
    if period not in PERIODS:
        period = DEFAULT_PERIOD
    rows = Activity.objects.filter(
        actor=user,
        created_at__gte=period_start(period),
    ).values_list("action", "created_at")

    by_action: Counter[str] = Counter()
    by_day: Counter[str] = Counter()
    for action, created_at in rows:
        by_action[action] += 1
        by_day[timezone.localtime(created_at).date().isoformat()] += 1

    most_active = None
    if by_day:
        day = min(by_day, key=lambda d: (-by_day[d], d))
        most_active = {"date": day, "count": by_day[day]}

    return {
        "period": period,
        "total": sum(by_action.values()),
        "by_action": dict(by_action),
        "by_day": dict(sorted(by_day.items())),
        "most_active": most_active,
    }
