# src/todo_tracker/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local data directories exist,
- wires the configured storage backend into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TaskRepo
from ..core.state import AppState
from ..tasks.flat_store import FlatFileStore
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.tasks_file.parent.mkdir(parents=True, exist_ok=True)
    settings.notifications_file.parent.mkdir(parents=True, exist_ok=True)


def create_task_store(settings) -> TaskRepo:
    backend = str(getattr(settings, "backend", "sqlite")).lower()
    if backend == "flat":
        return FlatFileStore(
            settings.tasks_file,
            settings.notifications_file,
            delimiter=settings.flat_delimiter,
        )
    if backend != "sqlite":
        logger.warning("Unknown backend %r; using sqlite", backend)
    return TaskStore(settings.db_path)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    return AppState(settings=settings, task_store=create_task_store(settings))
