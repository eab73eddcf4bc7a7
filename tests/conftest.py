# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from todo_tracker.tasks.flat_store import FlatFileStore
from todo_tracker.tasks.task_store import TaskStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="test todo",
        log_level="DEBUG",
        backend="sqlite",
        data_dir=tmp_path,
        db_path=tmp_path / "todo.sqlite3",
        tasks_file=tmp_path / "todo.db",
        notifications_file=tmp_path / "notifications.db",
        flat_delimiter=";",
        poll_interval_seconds=0.01,
        reminder_grace_seconds=0,
        notify_command="true",
        notify_title="TODO!",
    )


@pytest.fixture()
def sqlite_store(settings: SimpleNamespace) -> TaskStore:
    return TaskStore(settings.db_path)


@pytest.fixture()
def flat_store(settings: SimpleNamespace) -> FlatFileStore:
    return FlatFileStore(settings.tasks_file, settings.notifications_file)


@pytest.fixture(params=["sqlite", "flat"])
def store(request, settings: SimpleNamespace):
    """
    Every backend behind the same API.

    Tests using this fixture check behaviour both stores must share.
    """
    if request.param == "sqlite":
        return TaskStore(settings.db_path)
    return FlatFileStore(settings.tasks_file, settings.notifications_file)


@pytest.fixture()
def reopen(settings: SimpleNamespace):
    """Build a fresh store of the same kind on the same files (simulates a restart)."""

    def _reopen(existing):
        if isinstance(existing, TaskStore):
            return TaskStore(settings.db_path)
        return FlatFileStore(settings.tasks_file, settings.notifications_file)

    return _reopen
