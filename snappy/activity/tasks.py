import logging

from celery import shared_task
from django.conf import settings

from snappy.activity.utils import purge_activity_older_than

logger = logging.getLogger(__name__)


@shared_task(name="activity.purge_expired")
def purge_expired(days: int | None = None) -> int:
    """Delete activity records past the retention window.

    Args:
        days: Override for ``SNAPPY_ACTIVITY_RETENTION_DAYS``.

    Returns:
        Number of records removed.
    """
    retention = days if days is not None else settings.SNAPPY_ACTIVITY_RETENTION_DAYS
    deleted = purge_activity_older_than(retention)
    logger.info("Purged %s activity records older than %s days", deleted, retention)
    return deleted
