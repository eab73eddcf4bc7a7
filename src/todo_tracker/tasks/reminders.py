# src/todo_tracker/tasks/reminders.py

"""Reminder arithmetic shared by the UI overlays and the daemon."""

from __future__ import annotations

import time
from datetime import datetime

NO_REMINDER = "NoRem"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M"

UNIT_SECONDS: dict[str, int] = {
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
}


def convert_to_seconds(quantity: int, unit: str) -> int:
    """Unknown units fall back to seconds."""
    factor = UNIT_SECONDS.get((unit or "s")[:1].lower(), 1)
    return int(quantity) * factor


def parse_quantity(text: str | None) -> int:
    if not text:
        return 0
    try:
        return int(text.strip())
    except ValueError:
        return 0


def schedule_from_now(quantity: int, unit: str, now_ts: int | None = None) -> int:
    """Epoch time `quantity` units from now, or 0 ("no reminder") for a zero offset."""
    offset = convert_to_seconds(quantity, unit)
    if offset == 0:
        return 0
    if now_ts is None:
        now_ts = int(time.time())
    return int(now_ts) + offset


def next_overdue_time(scheduled_at: int, every: int, now_ts: int) -> int:
    """First repeat slot strictly after now_ts on the grid scheduled_at + k * every."""
    if every <= 0:
        return 0
    if scheduled_at > now_ts:
        return scheduled_at
    steps = (now_ts - scheduled_at) // every + 1
    return scheduled_at + steps * every


def format_timestamp(ts: int, *, empty: str = "") -> str:
    if ts <= 0:
        return empty
    return datetime.fromtimestamp(ts).strftime(TIMESTAMP_FORMAT)


def format_reminder(ts: int) -> str:
    return format_timestamp(ts, empty=NO_REMINDER)
