from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from django.db import DatabaseError
from django.db import transaction
from django.utils import timezone

from .models import Activity

logger = logging.getLogger(__name__)


def log_activity(  # noqa: PLR0913
    action: str,
    *,
    actor,
    target_type: str,
    target_id: int,
    list_id: int | None = None,
    payload: dict[str, Any] | None = None,
) -> Activity | None:
    """Append an activity record for a completed mutation.

    The record is written in its own savepoint: a failure here is logged and
    never undoes the mutation it describes.
    """

    try:
        with transaction.atomic():
            return Activity.objects.create(
                action=action,
                actor=actor,
                target_type=target_type,
                target_id=target_id,
                list_id=list_id,
                payload=payload or {},
            )
    except DatabaseError:
        logger.exception(
            "Failed to record activity %s on %s:%s",
            action,
            target_type,
            target_id,
        )
        return None


def purge_activity_older_than(days: int, actor=None) -> int:
    cutoff = timezone.now() - timedelta(days=days)
    qs = Activity.objects.filter(created_at__lt=cutoff)
    if actor is not None:
        qs = qs.filter(actor=actor)
    deleted, _ = qs.delete()
    return deleted
