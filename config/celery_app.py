"""Celery application for background work.

Two task families run here: AI classification of new todos
(``todos.classify``) and the periodic activity purge
(``activity.purge_expired``, scheduled through ``CELERY_BEAT_SCHEDULE``).
"""

import os

from celery import Celery
from celery.signals import setup_logging

# Workers are deployed without DJANGO_SETTINGS_MODULE; pytest passes --ds.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("snappy")
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    """Log through the same ``LOGGING`` dict as the web process."""
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


app.autodiscover_tasks(["snappy.todos", "snappy.activity"])
