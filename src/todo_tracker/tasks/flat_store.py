# src/todo_tracker/tasks/flat_store.py

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from .task_models import ALL_CATEGORIES, Notification, Task, to_flag, to_int

logger = logging.getLogger(__name__)

SUPPORTED_DELIMITERS = (";", "|")


class FlatFileStore:
    """
    Flat-file task store: two delimited text files, one record per line.

    tasks file:
        created_at;completed_at;completed;description;category;reminder_at;overdue_every
    notifications file:
        scheduled_at;triggered;message;task_created_at;id

    No header, no escaping (delimiters inside user text are replaced with a
    space on write). A task is identified by its creation timestamp, a
    notification by its id column. Older files without the trailing columns
    still load: rows without an id are numbered after the highest stored id in
    line order, and rows without an owner are linked to the task whose
    reminder column holds the same time. Both are written back on the next save.

    Every call re-reads the files, so the daemon and the UI see each other's
    writes. Malformed lines are skipped and bad numbers decode as 0.
    """

    def __init__(
        self,
        tasks_path: str | Path = "todo.db",
        notifications_path: str | Path = "notifications.db",
        *,
        delimiter: str = ";",
    ) -> None:
        if delimiter not in SUPPORTED_DELIMITERS:
            raise ValueError(f"unsupported delimiter {delimiter!r}")
        self._tasks_path = Path(tasks_path)
        self._notifications_path = Path(notifications_path)
        self._delim = delimiter
        self._tasks_path.parent.mkdir(parents=True, exist_ok=True)
        self._notifications_path.parent.mkdir(parents=True, exist_ok=True)
        # Make sure both files exist so readers never have to special-case them.
        self._tasks_path.touch(exist_ok=True)
        self._notifications_path.touch(exist_ok=True)
        logger.info(
            "FlatFileStore ready tasks=%s notifications=%s total=%s",
            self._tasks_path,
            self._notifications_path,
            self.count_tasks(),
        )

    def close(self) -> None:
        return

    # ---- parsing / formatting ----

    def _clean(self, text: str) -> str:
        out = text.replace("\n", " ").replace("\r", " ")
        for d in SUPPORTED_DELIMITERS:
            out = out.replace(d, " ")
        return out.strip()

    def _parse_task(self, line: str) -> tuple[Task, int] | None:
        parts = line.split(self._delim)
        if len(parts) < 4:
            return None
        created_at = to_int(parts[0])
        if created_at <= 0:
            return None
        task = Task(
            id=created_at,
            description=parts[3],
            completed=to_flag(parts[2]),
            created_at=created_at,
            completed_at=to_int(parts[1]),
            category=parts[4] if len(parts) > 4 else "",
            overdue_every=to_int(parts[6]) if len(parts) > 6 else 0,
        )
        reminder_at = to_int(parts[5]) if len(parts) > 5 else 0
        return task, reminder_at

    def _parse_notification(self, line: str) -> Notification | None:
        """Parse one reminder line; id is 0 when the line predates the id column."""
        parts = line.split(self._delim)
        if len(parts) < 3:
            return None
        tail = [p.strip() for p in parts[3:]]
        notif_id = 0
        task_id: int | None = None
        if len(tail) >= 2 and tail[-1].isdigit() and tail[-2].isdigit():
            notif_id = int(tail[-1])
            task_id = int(tail[-2]) or None
            message = self._delim.join(parts[2:-2])
        elif tail and tail[-1].isdigit():
            task_id = int(tail[-1]) or None
            message = self._delim.join(parts[2:-1])
        else:
            message = self._delim.join(parts[2:])
        return Notification(
            id=notif_id,
            task_id=task_id,
            scheduled_at=to_int(parts[0]),
            triggered=to_flag(parts[1]),
            message=message,
        )

    def _format_task(self, task: Task) -> str:
        fields = [
            str(task.created_at),
            str(task.completed_at if task.completed else 0),
            "1" if task.completed else "0",
            self._clean(task.description),
            self._clean(task.category),
            str(task.reminder_at),
            str(task.overdue_every),
        ]
        return self._delim.join(fields)

    def _format_notification(self, n: Notification) -> str:
        fields = [
            str(n.scheduled_at),
            "1" if n.triggered else "0",
            self._clean(n.message),
            str(n.task_id or 0),
            str(n.id),
        ]
        return self._delim.join(fields)

    # ---- load / save ----

    @staticmethod
    def _read_lines(path: Path) -> list[str]:
        try:
            text = path.read_text("utf-8")
        except FileNotFoundError:
            return []
        return [ln for ln in text.splitlines() if ln.strip()]

    @staticmethod
    def _write_lines(path: Path, lines: list[str]) -> None:
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text("".join(f"{ln}\n" for ln in lines), "utf-8")
        os.replace(tmp, path)

    def _load_notifications(self) -> list[Notification]:
        out: list[Notification] = []
        seen: set[int] = set()
        for lineno, line in enumerate(self._read_lines(self._notifications_path), start=1):
            n = self._parse_notification(line)
            if n is None:
                logger.debug("Skipping malformed notification line %d", lineno)
                continue
            if n.id in seen:
                # Duplicate ids are renumbered like rows that have none.
                n.id = 0
            seen.add(n.id)
            out.append(n)

        next_id = max((n.id for n in out), default=0) + 1
        for n in out:
            if n.id <= 0:
                n.id = next_id
                next_id += 1
        return out

    def _load(self) -> tuple[list[Task], list[Notification]]:
        notifs = self._load_notifications()
        tasks: list[Task] = []
        for line in self._read_lines(self._tasks_path):
            parsed = self._parse_task(line)
            if parsed is None:
                logger.debug("Skipping malformed task line %r", line)
                continue
            task, reminder_at = parsed
            self._link_legacy(task, reminder_at, notifs)
            task.reminder = self._pending_for(task, notifs)
            tasks.append(task)
        return tasks, notifs

    @staticmethod
    def _link_legacy(task: Task, reminder_at: int, notifs: list[Notification]) -> None:
        """Give ownerless pending rows matching the task's reminder column to that task."""
        if reminder_at <= 0:
            return
        for n in notifs:
            if n.task_id is None and not n.triggered and n.scheduled_at == reminder_at:
                n.task_id = task.id

    @staticmethod
    def _pending_for(task: Task, notifs: list[Notification]) -> Notification | None:
        pending = [n for n in notifs if not n.triggered and n.is_set and n.task_id == task.id]
        if not pending:
            return None
        return min(pending, key=lambda n: (n.scheduled_at, n.id))

    def _save(self, tasks: list[Task], notifs: list[Notification]) -> None:
        self._write_lines(self._tasks_path, [self._format_task(t) for t in tasks])
        self._write_lines(self._notifications_path, [self._format_notification(n) for n in notifs])

    def _save_notifications(self, notifs: list[Notification]) -> None:
        self._write_lines(self._notifications_path, [self._format_notification(n) for n in notifs])

    def _refresh(self, tasks: list[Task], notifs: list[Notification]) -> None:
        """Re-link each task to its earliest pending reminder after a change."""
        for t in tasks:
            t.reminder = self._pending_for(t, notifs)

    @staticmethod
    def _find(tasks: list[Task], task_id: int) -> Task | None:
        for t in tasks:
            if t.id == int(task_id):
                return t
        return None

    # ---- public API: tasks ----

    def count_tasks(self, *, completed: bool | None = None) -> int:
        return len(self.list_tasks(completed=completed))

    def add_task(self, description: str, category: str = "") -> int:
        if not description or not description.strip():
            raise ValueError("description is required")

        tasks, notifs = self._load()
        taken = {t.id for t in tasks}
        created_at = int(time.time())
        while created_at in taken:
            created_at += 1

        tasks.append(
            Task(
                id=created_at,
                description=self._clean(description),
                completed=False,
                created_at=created_at,
                completed_at=0,
                category=self._clean(category or ""),
            )
        )
        self._save(tasks, notifs)
        logger.debug("Task added id=%s category=%r", created_at, category)
        return created_at

    def get_task(self, task_id: int) -> Task | None:
        tasks, _ = self._load()
        return self._find(tasks, task_id)

    def list_tasks(
        self,
        *,
        completed: bool | None = None,
        category: str | None = None,
    ) -> list[Task]:
        tasks, _ = self._load()
        out = [t for t in tasks if completed is None or t.completed == completed]
        if category and category != ALL_CATEGORIES:
            out = [t for t in out if t.category == category]
        return out

    def list_categories(self, *, completed: bool | None = None) -> list[str]:
        return sorted({t.category for t in self.list_tasks(completed=completed) if t.category})

    def _mutate(self, task_id: int, fn) -> bool:
        tasks, notifs = self._load()
        task = self._find(tasks, task_id)
        if task is None:
            return False
        if fn(task) is False:
            return False
        self._save(tasks, notifs)
        return True

    def update_description(self, task_id: int, description: str) -> None:
        if not description or not description.strip():
            return

        def apply(t: Task) -> None:
            t.description = self._clean(description)

        self._mutate(task_id, apply)

    def set_category(self, task_id: int, category: str) -> None:
        if not category or not category.strip():
            return

        def apply(t: Task) -> None:
            t.category = self._clean(category)

        self._mutate(task_id, apply)

    def complete_task(self, task_id: int, now_ts: int | None = None) -> None:
        stamp = int(time.time()) if now_ts is None else int(now_ts)

        def apply(t: Task) -> bool:
            if t.completed:
                return False
            t.completed = True
            t.completed_at = stamp
            return True

        if self._mutate(task_id, apply):
            logger.info("Task %s -> completed", task_id)

    def reopen_task(self, task_id: int) -> None:
        def apply(t: Task) -> None:
            t.completed = False
            t.completed_at = 0

        self._mutate(task_id, apply)

    def delete_task(self, task_id: int) -> None:
        tasks, notifs = self._load()
        task = self._find(tasks, task_id)
        if task is None:
            return
        tasks.remove(task)
        notifs = [n for n in notifs if n.task_id != task.id]
        self._save(tasks, notifs)
        logger.info("Task %s deleted", task_id)

    # ---- public API: reminders ----

    def set_reminder(self, task_id: int, scheduled_at: int, message: str | None = None) -> None:
        if scheduled_at <= 0:
            self.clear_reminder(task_id)
            return

        tasks, notifs = self._load()
        task = self._find(tasks, task_id)
        if task is None:
            logger.warning("set_reminder: task %s does not exist", task_id)
            return
        notifs.append(
            Notification(
                id=max((n.id for n in notifs), default=0) + 1,
                task_id=task.id,
                scheduled_at=int(scheduled_at),
                triggered=False,
                message=task.description if message is None else message,
            )
        )
        self._refresh(tasks, notifs)
        self._save(tasks, notifs)
        logger.debug("Reminder set task_id=%s at=%s", task_id, scheduled_at)

    def clear_reminder(self, task_id: int) -> None:
        tasks, notifs = self._load()
        task = self._find(tasks, task_id)
        if task is None:
            return
        notifs = [n for n in notifs if n.triggered or n.task_id != task.id]
        self._refresh(tasks, notifs)
        self._save(tasks, notifs)

    def set_overdue_frequency(self, task_id: int, seconds: int) -> None:
        def apply(t: Task) -> None:
            t.overdue_every = max(0, int(seconds))

        self._mutate(task_id, apply)

    def list_due_notifications(self, *, now_ts: int, limit: int = 64) -> list[Notification]:
        _, notifs = self._load()
        due = [n for n in notifs if not n.triggered and 0 < n.scheduled_at <= now_ts]
        due.sort(key=lambda n: (n.scheduled_at, n.id))
        return due[: int(limit)]

    def mark_triggered(self, notification_id: int) -> bool:
        _, notifs = self._load()
        for n in notifs:
            if n.id == int(notification_id):
                if n.triggered:
                    return False
                n.triggered = True
                self._save_notifications(notifs)
                return True
        return False
