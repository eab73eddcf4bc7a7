# src/todo_tracker/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then runs one of:
- the interactive curses list (default),
- the reminder daemon (--daemon, or the todo-tracker-daemon script).
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from pathlib import Path

import click

from ..cli.bootstrap import create_initial_state
from ..config import BACKENDS, Settings, get_settings
from ..daemon.notifier import DesktopNotifier
from ..daemon.reminder_daemon import run_reminder_daemon
from ..logging_setup import level_from_name, setup_logging

logger = logging.getLogger(__name__)


def _apply_overrides(settings: Settings, backend: str | None, db: Path | None) -> Settings:
    changes: dict[str, object] = {}
    if backend:
        changes["backend"] = backend
    if db is not None:
        effective = backend or settings.backend
        if effective == "flat":
            notifications = db.with_name("notifications" + (db.suffix or ".db"))
            if notifications == db:
                raise click.BadParameter(
                    f"{db.name} is the reminders file name; pick another tasks file name",
                    param_hint="'--db'",
                )
            changes["tasks_file"] = db
            changes["notifications_file"] = notifications
        else:
            changes["db_path"] = db
    return dataclasses.replace(settings, **changes) if changes else settings


def run_daemon(settings: Settings) -> None:
    setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(settings.log_level),
        log_name="todo_daemon.log",
    )
    logger.info("Starting %s reminder daemon (backend=%s)...", settings.app_name, settings.backend)

    state = create_initial_state(settings=settings)
    notifier = DesktopNotifier(settings.notify_command)
    try:
        asyncio.run(
            run_reminder_daemon(
                state.task_store,
                notifier,
                interval_seconds=settings.poll_interval_seconds,
                grace_seconds=settings.reminder_grace_seconds,
                title=settings.notify_title,
            )
        )
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    finally:
        state.task_store.close()
        logger.info("Bye.")


def run_ui(settings: Settings) -> None:
    # curses owns the terminal: logs go to the file only.
    log_file = setup_logging(log_dir=settings.data_dir, console=False)
    logger.info("Starting %s (backend=%s)...", settings.app_name, settings.backend)

    state = create_initial_state(settings=settings)

    from ..ui.app import run_tui

    try:
        run_tui(state.task_store, title=settings.app_name)
    except Exception:
        logger.exception("UI crashed.")
        click.echo(f"todo-tracker crashed; details in {log_file}", err=True)
        raise SystemExit(1)
    logger.info("Bye.")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--daemon", "daemon", is_flag=True, help="Run the reminder daemon instead of the UI.")
@click.option(
    "--backend",
    type=click.Choice(BACKENDS),
    default=None,
    help="Storage backend (default from TODO_BACKEND, else sqlite).",
)
@click.option(
    "--db",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Database file (sqlite) or tasks file (flat).",
)
def main(daemon: bool, backend: str | None, db: Path | None) -> None:
    """Terminal to-do list with reminders."""
    settings = _apply_overrides(get_settings(), backend, db)
    if daemon:
        run_daemon(settings)
    else:
        run_ui(settings)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--backend", type=click.Choice(BACKENDS), default=None, help="Storage backend.")
@click.option("--db", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Store file.")
def daemon_main(backend: str | None, db: Path | None) -> None:
    """Poll the store and fire desktop notifications for due reminders."""
    run_daemon(_apply_overrides(get_settings(), backend, db))


if __name__ == "__main__":
    main()
