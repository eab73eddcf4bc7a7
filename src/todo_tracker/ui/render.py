# src/todo_tracker/ui/render.py

from __future__ import annotations

from dataclasses import dataclass

from ..tasks.reminders import format_reminder, format_timestamp
from ..tasks.task_models import Task, ViewMode
from .list_view import ListView

DESCRIPTION_COL = 6


@dataclass(slots=True, frozen=True)
class ColumnLayout:
    """Column x-positions inside the boxed list window, measured from its right edge."""

    description: int
    reminder: int
    category: int
    date: int

    @property
    def description_width(self) -> int:
        return max(1, self.reminder - DESCRIPTION_COL - 1)

    @classmethod
    def for_width(cls, width: int) -> ColumnLayout:
        return cls(
            description=DESCRIPTION_COL,
            reminder=max(DESCRIPTION_COL + 2, width - 56),
            category=max(DESCRIPTION_COL + 4, width - 36),
            date=max(DESCRIPTION_COL + 6, width - 18),
        )


def wrap_text(text: str, width: int) -> list[str]:
    """
    Word-wrap `text` into lines of at most `width` characters.

    Breaks at whitespace; a word longer than the width is split hard.
    Empty text still occupies one (empty) line.
    """
    if not text:
        return [""]
    width = max(1, width)
    lines: list[str] = []
    pos = 0
    n = len(text)

    while pos < n:
        end = min(pos + width, n)
        if end < n:
            cut = end
            while cut > pos and not text[cut].isspace():
                cut -= 1
            if cut > pos:
                end = cut
        lines.append(text[pos:end])
        pos = end
        while pos < n and text[pos].isspace():
            pos += 1

    return lines or [""]


def format_row_dates(task: Task) -> tuple[str, str]:
    """(reminder, creation-or-completion date) strings for one row."""
    return format_reminder(task.reminder_at), format_timestamp(task.display_date())


def column_titles(mode: ViewMode) -> dict[str, str]:
    if mode is ViewMode.CURRENT:
        return {"tasks": " Current Tasks ", "date": " Added on "}
    return {"tasks": " Completed Tasks ", "date": " Completed on "}


def header_lines(view: ListView, *, title: str, key_help: str) -> list[str]:
    return [
        title,
        f"Current Tasks: {len(view.current)} | Completed Tasks: {len(view.completed)}",
        "",  # horizontal rule drawn by the caller
        f"Keys: {key_help}",
        "Nav: Up/Down, PgUp/PgDn, Home/End, Goto ':<num>'",
        f"Category Filter: {view.filter_category}",
    ]
