# src/todo_tracker/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

ALL_CATEGORIES = "All"


class ViewMode(StrEnum):
    """Which half of the task list is on screen."""

    CURRENT = "current"
    COMPLETED = "completed"

    def toggled(self) -> ViewMode:
        return ViewMode.COMPLETED if self is ViewMode.CURRENT else ViewMode.CURRENT


def to_int(raw: object, default: int = 0) -> int:
    """Lenient integer decoding: anything unparsable becomes `default`."""
    if raw is None:
        return default
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        try:
            return int(float(str(raw).strip()))
        except (TypeError, ValueError):
            return default


def to_flag(raw: object) -> bool:
    if isinstance(raw, bool):
        return raw
    return str(raw).strip() == "1"


@dataclass(slots=True)
class Notification:
    id: int
    task_id: int | None
    scheduled_at: int
    triggered: bool
    message: str

    @property
    def is_set(self) -> bool:
        # scheduled_at == 0 is the "no reminder" marker
        return self.scheduled_at > 0


@dataclass(slots=True)
class Task:
    id: int
    description: str
    completed: bool
    created_at: int
    completed_at: int
    category: str = ""
    overdue_every: int = 0
    reminder: Notification | None = None

    def display_date(self) -> int:
        """Completion time for completed tasks, creation time otherwise."""
        return self.completed_at if self.completed else self.created_at

    @property
    def reminder_at(self) -> int:
        if self.reminder is None:
            return 0
        return self.reminder.scheduled_at

    def matches(self, category: str | None) -> bool:
        if not category or category == ALL_CATEGORIES:
            return True
        return self.category == category
