"""Realtime fan-out of domain events to connected Socket.IO clients.

A single ``Fanout`` is built when the ``realtime`` app is ready and shared by
the ASGI entry point (which mounts its Socket.IO server) and by every mutation
handler (which hands it the events they produce).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.apps import apps as django_apps

if TYPE_CHECKING:
    from .fanout import Fanout


def get_fanout() -> Fanout:
    return django_apps.get_app_config("realtime").fanout
