"""Typed room identifiers.

Rooms are compared and hashed as values; ``str(room)`` is the name clients see
(``user:<id>`` / ``list:<id>``).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class UserRoom:
    user_id: int

    def __str__(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True)
class ListRoom:
    list_id: int

    def __str__(self) -> str:
        return f"list:{self.list_id}"

    @classmethod
    def parse(cls, value: Any) -> ListRoom | None:
        """Build a room from a client-supplied list id, or None if unusable."""

        if isinstance(value, dict):
            value = value.get("listId")
        if isinstance(value, bool):
            return None
        try:
            list_id = int(value)
        except (TypeError, ValueError):
            return None
        if list_id <= 0:
            return None
        return cls(list_id)


Room = UserRoom | ListRoom
