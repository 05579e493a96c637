from __future__ import annotations

from datetime import datetime
from datetime import timedelta

from django.utils import timezone

PERIODS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}
DEFAULT_PERIOD = "7d"


def period_start(period: str | None, now: datetime | None = None) -> datetime:
    """Start of a reporting window; unknown periods fall back to seven days."""

    now = now or timezone.now()
    return now - PERIODS.get(period or DEFAULT_PERIOD, PERIODS[DEFAULT_PERIOD])
