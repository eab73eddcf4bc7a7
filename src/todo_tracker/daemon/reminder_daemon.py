# src/todo_tracker/daemon/reminder_daemon.py

from __future__ import annotations

"""
Reminder daemon.

A small polling loop that:
- fetches due reminders from the store,
- claims them (triggered 0 -> 1) so each one fires once,
- sends a desktop notification through an injected notifier port,
- re-arms reminders for overdue tasks that ask for repeats.

The daemon shares nothing with the UI process except the backing store.
"""

import asyncio
import logging
import time

from ..core.ports import Notifier, TaskRepo
from ..tasks.reminders import next_overdue_time
from ..tasks.task_models import Notification

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "TODO!"


def is_stale(notification: Notification, *, now_ts: int, grace_seconds: int) -> bool:
    """True when a reminder is too old to be worth showing (grace_seconds=0 disables)."""
    if grace_seconds <= 0:
        return False
    return notification.scheduled_at < now_ts - grace_seconds


def rearm_overdue(task_store: TaskRepo, notification: Notification, *, now_ts: int) -> int:
    """
    Schedule the next repeat for an overdue, still-open task.

    Returns the new scheduled time, or 0 if nothing was scheduled.
    """
    if notification.task_id is None:
        return 0
    task = task_store.get_task(notification.task_id)
    if task is None or task.completed or task.overdue_every <= 0:
        return 0
    if task.reminder is not None:
        # Another pending reminder already covers this task.
        return 0
    next_at = next_overdue_time(notification.scheduled_at, task.overdue_every, now_ts)
    task_store.set_reminder(task.id, next_at, notification.message)
    logger.info("Task %s overdue; next reminder at %s", task.id, next_at)
    return next_at


async def process_due(
        task_store: TaskRepo,
        notifier: Notifier,
        *,
        now_ts: int,
        title: str = DEFAULT_TITLE,
        grace_seconds: int = 0,
        batch_limit: int = 64,
) -> int:
    """Run one polling tick. Returns how many notifications were sent."""
    try:
        due = task_store.list_due_notifications(now_ts=now_ts, limit=int(batch_limit))
    except Exception:
        logger.exception("list_due_notifications failed")
        return 0

    sent = 0
    for notification in due:
        try:
            claimed = task_store.mark_triggered(notification.id)
        except Exception:
            logger.exception("mark_triggered failed notification_id=%s", notification.id)
            continue

        if not claimed:
            continue

        if is_stale(notification, now_ts=now_ts, grace_seconds=grace_seconds):
            logger.info(
                "Reminder %s missed by %ss; marked without notifying",
                notification.id,
                now_ts - notification.scheduled_at,
            )
        else:
            try:
                await notifier.send(title=title, message=notification.message)
                sent += 1
                logger.info("Reminder %s fired task_id=%s", notification.id, notification.task_id)
            except Exception:
                # Triggered stays set: a reminder is surfaced at most once.
                logger.exception("notification send failed notification_id=%s", notification.id)

        try:
            rearm_overdue(task_store, notification, now_ts=now_ts)
        except Exception:
            logger.exception("rearm_overdue failed task_id=%s", notification.task_id)

    return sent


async def run_reminder_daemon(
        task_store: TaskRepo,
        notifier: Notifier,
        *,
        interval_seconds: float = 1.0,
        grace_seconds: int = 0,
        title: str = DEFAULT_TITLE,
        batch_limit: int = 64,
) -> None:
    """
    Simple polling daemon.

    Every interval_seconds, rescan the store for untriggered reminders with
    scheduled_at <= now and fire each one exactly once.

    To stop the daemon, cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))
    logger.info("Reminder daemon started (interval=%ss grace=%ss)", sleep_s, grace_seconds)

    while True:
        await process_due(
            task_store,
            notifier,
            now_ts=int(time.time()),
            title=title,
            grace_seconds=int(grace_seconds),
            batch_limit=batch_limit,
        )
        await asyncio.sleep(sleep_s)
