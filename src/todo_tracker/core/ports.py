# src/todo_tracker/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the UI, the CLI and the reminder daemon.

Both storage backends (SQLite and flat files) satisfy TaskRepo, so callers
never need to know which one is configured.
"""

from typing import Awaitable, Protocol

from ..tasks.task_models import Notification, Task


class TaskRepo(Protocol):
    # Task CRUD
    def add_task(self, description: str, category: str = "") -> int: ...
    def get_task(self, task_id: int) -> Task | None: ...
    def list_tasks(
            self,
            *,
            completed: bool | None = None,
            category: str | None = None,
    ) -> list[Task]: ...
    def list_categories(self, *, completed: bool | None = None) -> list[str]: ...
    def count_tasks(self, *, completed: bool | None = None) -> int: ...
    def update_description(self, task_id: int, description: str) -> None: ...
    def set_category(self, task_id: int, category: str) -> None: ...
    def complete_task(self, task_id: int, now_ts: int | None = None) -> None: ...
    def reopen_task(self, task_id: int) -> None: ...
    def delete_task(self, task_id: int) -> None: ...

    # Reminders
    def set_reminder(self, task_id: int, scheduled_at: int, message: str | None = None) -> None: ...
    def clear_reminder(self, task_id: int) -> None: ...
    def set_overdue_frequency(self, task_id: int, seconds: int) -> None: ...

    # Daemon API
    def list_due_notifications(self, *, now_ts: int, limit: int = 64) -> list[Notification]: ...
    def mark_triggered(self, notification_id: int) -> bool: ...

    def close(self) -> None: ...


class Notifier(Protocol):
    """How the daemon alerts the user (desktop notification, test recorder, ...)."""

    def send(self, *, title: str, message: str) -> Awaitable[None]: ...
