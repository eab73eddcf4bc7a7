# src/todo_tracker/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Everything has a default; a bare `todo-tracker` works out of the box.
- Invalid values fall back to defaults instead of failing at startup.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TODO"

BACKENDS = ("sqlite", "flat")

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in choices else default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    backend: str
    data_dir: Path
    db_path: Path
    tasks_file: Path
    notifications_file: Path
    flat_delimiter: str

    # ---- Reminder daemon ----
    poll_interval_seconds: float
    reminder_grace_seconds: int
    notify_command: str
    notify_title: str

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "CLI TODO APP") or "CLI TODO APP"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        backend = _env_choice(_k("BACKEND"), BACKENDS, "sqlite")

        data_dir = _env_path(_k("DATA_DIR"), Path("~/.local/share/todo").expanduser())
        db_path = _env_path(_k("DB_PATH"), data_dir / "todo.sqlite3")
        tasks_file = _env_path(_k("TASKS_FILE"), data_dir / "todo.db")
        notifications_file = _env_path(_k("NOTIFICATIONS_FILE"), data_dir / "notifications.db")
        flat_delimiter = _env_choice(_k("FLAT_DELIMITER"), (";", "|"), ";")

        poll_interval_seconds = max(0.1, _env_float(_k("POLL_INTERVAL_SECONDS"), 1.0))
        reminder_grace_seconds = max(0, _env_int(_k("REMINDER_GRACE_SECONDS"), 0))
        notify_command = _env(_k("NOTIFY_COMMAND"), "notify-send").strip() or "notify-send"
        notify_title = _env(_k("NOTIFY_TITLE"), "TODO!")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            backend=backend,
            data_dir=data_dir,
            db_path=db_path,
            tasks_file=tasks_file,
            notifications_file=notifications_file,
            flat_delimiter=flat_delimiter,
            poll_interval_seconds=poll_interval_seconds,
            reminder_grace_seconds=reminder_grace_seconds,
            notify_command=notify_command,
            notify_title=notify_title,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
