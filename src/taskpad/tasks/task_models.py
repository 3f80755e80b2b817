# src/taskpad/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskFilter(StrEnum):
    """Which tasks the list shows. UI-only state, never stored."""

    ALL = "all"
    COMPLETED = "completed"
    ONGOING = "ongoing"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        key = (raw or "").strip().lower()
        aliases = {"done": cls.COMPLETED, "open": cls.ONGOING}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown filter: {raw!r} (use all, completed or ongoing)") from None


@dataclass(slots=True, frozen=True)
class Task:
    """
    One task record.

    `id` is the key the store assigned on creation; None until the first write.
    `username` is the owner and never changes after creation.
    """

    id: str | None = None
    username: str = ""
    title: str = ""
    description: str = ""
    completed: bool = False

    def to_record(self) -> dict[str, Any]:
        rec: dict[str, Any] = {
            "username": self.username,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
        }
        if self.id:
            rec["id"] = self.id
        return rec

    @classmethod
    def from_record(cls, key: str, raw: Any) -> Task | None:
        """Decode a stored child; the child key wins over any stored id field."""
        if not isinstance(raw, dict):
            return None
        return cls(
            id=key,
            username=str(raw.get("username") or ""),
            title=str(raw.get("title") or ""),
            description=str(raw.get("description") or ""),
            completed=bool(raw.get("completed", False)),
        )
