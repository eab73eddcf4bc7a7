# src/todo_tracker/ui/list_view.py

"""
List model behind the terminal UI.

Holds everything the screen needs to know (view mode, category filter,
selection) without touching curses, so navigation and mutations are testable.
"""

from __future__ import annotations

import logging

from ..core.ports import TaskRepo
from ..tasks.task_models import ALL_CATEGORIES, Task, ViewMode

logger = logging.getLogger(__name__)

PAGE_SIZE = 10


class ListView:
    def __init__(self, store: TaskRepo) -> None:
        self.store = store
        self.mode = ViewMode.CURRENT
        self.filter_category = ALL_CATEGORIES
        self.selected = 0
        self.current: list[Task] = []
        self.completed: list[Task] = []
        self.reload()

    # ---- data ----

    def reload(self) -> None:
        tasks = self.store.list_tasks()
        self.current = [t for t in tasks if not t.completed]
        self.completed = [t for t in tasks if t.completed]
        self._clamp()

    def mode_tasks(self) -> list[Task]:
        return self.current if self.mode is ViewMode.CURRENT else self.completed

    def filtered_indices(self) -> list[int]:
        """Positions (in the unfiltered view) of tasks that pass the category filter."""
        return [i for i, t in enumerate(self.mode_tasks()) if t.matches(self.filter_category)]

    def visible_tasks(self) -> list[tuple[int, Task]]:
        """(1-based item number, task) pairs for the rows on screen."""
        tasks = self.mode_tasks()
        return [(i + 1, tasks[i]) for i in self.filtered_indices()]

    def selected_task(self) -> Task | None:
        rows = self.visible_tasks()
        if not rows or self.selected >= len(rows):
            return None
        return rows[self.selected][1]

    def categories(self) -> list[str]:
        """Filter choices for the current view, "All" first."""
        cats = sorted({t.category for t in self.mode_tasks() if t.category})
        return [ALL_CATEGORIES, *cats]

    # ---- navigation ----

    def _clamp(self) -> None:
        n = len(self.filtered_indices())
        if n == 0:
            self.selected = 0
            return
        self.selected = max(0, min(self.selected, n - 1))

    def move(self, delta: int) -> None:
        self.selected += delta
        self._clamp()

    def page(self, delta: int, size: int = PAGE_SIZE) -> None:
        self.move(delta * size)

    def home(self) -> None:
        self.selected = 0

    def end(self) -> None:
        self.selected = max(0, len(self.filtered_indices()) - 1)

    def goto(self, item_number: int) -> bool:
        """Select the task shown as `item_number`; ignored when out of range or filtered out."""
        idx = item_number - 1
        if idx < 0 or idx >= len(self.mode_tasks()):
            return False
        indices = self.filtered_indices()
        if idx not in indices:
            return False
        self.selected = indices.index(idx)
        return True

    def toggle_mode(self) -> None:
        self.mode = self.mode.toggled()
        self.selected = 0
        self._clamp()

    def set_filter(self, category: str | None) -> None:
        self.filter_category = category or ALL_CATEGORIES
        self._clamp()

    def scroll_offset(self, visible_lines: int) -> int:
        if visible_lines <= 0:
            return self.selected
        if self.selected >= visible_lines:
            return self.selected - (visible_lines - 1)
        return 0

    # ---- mutations (selected task) ----

    def add(self, description: str, category: str = "") -> int | None:
        if not description.strip():
            return None
        task_id = self.store.add_task(description, category)
        self.reload()
        return task_id

    def complete_selected(self) -> bool:
        if self.mode is not ViewMode.CURRENT:
            return False
        task = self.selected_task()
        if task is None:
            return False
        self.store.complete_task(task.id)
        self.reload()
        return True

    def delete_selected(self) -> bool:
        task = self.selected_task()
        if task is None:
            return False
        self.store.delete_task(task.id)
        self.reload()
        return True

    def edit_selected(self, description: str) -> bool:
        task = self.selected_task()
        if task is None or not description.strip():
            return False
        self.store.update_description(task.id, description)
        self.reload()
        return True

    def categorize_selected(self, category: str) -> bool:
        task = self.selected_task()
        if task is None or not category.strip():
            return False
        self.store.set_category(task.id, category)
        self.reload()
        return True

    def remind_selected(self, scheduled_at: int) -> bool:
        task = self.selected_task()
        if task is None:
            return False
        self.store.set_reminder(task.id, scheduled_at)
        self.reload()
        return True

    def clear_reminder_selected(self) -> bool:
        task = self.selected_task()
        if task is None:
            return False
        self.store.clear_reminder(task.id)
        self.reload()
        return True

    def set_overdue_selected(self, seconds: int) -> bool:
        task = self.selected_task()
        if task is None:
            return False
        self.store.set_overdue_frequency(task.id, seconds)
        self.reload()
        return True
