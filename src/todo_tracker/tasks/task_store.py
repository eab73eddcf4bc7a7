# src/todo_tracker/tasks/task_store.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
import time
from pathlib import Path
from typing import Any

from .task_models import ALL_CATEGORIES, Notification, Task, to_int

logger = logging.getLogger(__name__)

# Earliest untriggered reminder per task, joined back onto the task row.
_TASK_SELECT = """
    SELECT t.id, t.description, t.completed, t.created_at, t.completed_at,
           t.category, t.overdue_every,
           n.id AS n_id, n.scheduled_at AS n_scheduled_at,
           n.triggered AS n_triggered, n.message AS n_message
    FROM tasks t
    LEFT JOIN (
        SELECT task_id, MIN(scheduled_at) AS next_at
        FROM notifications
        WHERE triggered = 0 AND scheduled_at > 0
        GROUP BY task_id
    ) nxt ON nxt.task_id = t.id
    LEFT JOIN notifications n
        ON n.id = (
            SELECT id FROM notifications
            WHERE task_id = t.id AND triggered = 0 AND scheduled_at = nxt.next_at
            ORDER BY id ASC
            LIMIT 1
        )
"""


class TaskStore:
    """
    SQLite task store.

    Two tables:
    - tasks: one row per to-do item
    - notifications: reminders, linked to their task by foreign key
      (ON DELETE CASCADE)

    The schema is created idempotently on startup; missing columns are added
    with ALTER TABLE so older database files keep working.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "todo.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        try:
            total = self.count_tasks()
        except sqlite3.Error:
            total = -1
        logger.info("TaskStore ready db=%s total=%s", self._db_path, total)

    @property
    def db_path(self) -> Path:
        return self._db_path

    def close(self) -> None:
        """Compatibility hook for shutdown (no persistent connections to close)."""
        return

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        conn.execute("PRAGMA foreign_keys=ON")
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    description TEXT NOT NULL,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at INTEGER NOT NULL,
                    completed_at INTEGER NOT NULL DEFAULT 0,
                    category TEXT NOT NULL DEFAULT '',
                    overdue_every INTEGER NOT NULL DEFAULT 0
                )
                """
            )
            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS notifications (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    task_id INTEGER REFERENCES tasks(id) ON DELETE CASCADE,
                    scheduled_at INTEGER NOT NULL DEFAULT 0,
                    triggered INTEGER NOT NULL DEFAULT 0,
                    message TEXT NOT NULL DEFAULT ''
                )
                """
            )

            # Migrations (safe): add missing columns.
            def add_cols(table: str, wanted: dict[str, str]) -> None:
                cur.execute(f"PRAGMA table_info({table})")
                cols = {row["name"] for row in cur.fetchall()}
                for name, decl in wanted.items():
                    if name in cols:
                        continue
                    cur.execute(f"ALTER TABLE {table} ADD COLUMN {name} {decl}")
                    logger.info("TaskStore migration: added column %s.%s", table, name)

            add_cols(
                "tasks",
                {
                    "completed_at": "INTEGER NOT NULL DEFAULT 0",
                    "category": "TEXT NOT NULL DEFAULT ''",
                    "overdue_every": "INTEGER NOT NULL DEFAULT 0",
                },
            )
            add_cols(
                "notifications",
                {
                    "task_id": "INTEGER REFERENCES tasks(id) ON DELETE CASCADE",
                    "message": "TEXT NOT NULL DEFAULT ''",
                },
            )

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_completed ON tasks(completed)")
            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category)")
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_notifications_scheduled "
                "ON notifications(scheduled_at)"
            )
            cur.execute(
                "CREATE INDEX IF NOT EXISTS idx_notifications_task "
                "ON notifications(task_id, triggered)"
            )

            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> Task:
        reminder = None
        if row["n_id"] is not None:
            reminder = Notification(
                id=int(row["n_id"]),
                task_id=int(row["id"]),
                scheduled_at=to_int(row["n_scheduled_at"]),
                triggered=bool(row["n_triggered"]),
                message=str(row["n_message"] or ""),
            )
        return Task(
            id=int(row["id"]),
            description=str(row["description"] or ""),
            completed=bool(row["completed"]),
            created_at=to_int(row["created_at"]),
            completed_at=to_int(row["completed_at"]),
            category=str(row["category"] or ""),
            overdue_every=to_int(row["overdue_every"]),
            reminder=reminder,
        )

    @staticmethod
    def _row_to_notification(row: sqlite3.Row) -> Notification:
        return Notification(
            id=int(row["id"]),
            task_id=int(row["task_id"]) if row["task_id"] is not None else None,
            scheduled_at=to_int(row["scheduled_at"]),
            triggered=bool(row["triggered"]),
            message=str(row["message"] or ""),
        )

    @staticmethod
    def _where(completed: bool | None, category: str | None) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if completed is not None:
            clauses.append("t.completed = ?")
            params.append(1 if completed else 0)
        if category and category != ALL_CATEGORIES:
            clauses.append("t.category = ?")
            params.append(category)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    def _execute(self, sql: str, params: tuple[Any, ...] | list[Any]) -> int:
        conn = self._get_conn()
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.rowcount
        finally:
            conn.close()

    # ---- public API: tasks ----

    def count_tasks(self, *, completed: bool | None = None) -> int:
        where, params = self._where(completed, None)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(f"SELECT COUNT(*) FROM tasks t{where}", params)
            (n,) = cur.fetchone()
            return int(n)
        finally:
            conn.close()

    def add_task(self, description: str, category: str = "") -> int:
        if not description or not description.strip():
            raise ValueError("description is required")

        now = int(time.time())
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO tasks(description, completed, created_at, completed_at, category)
                VALUES (?, 0, ?, 0, ?)
                """,
                (description.strip(), now, (category or "").strip()),
            )
            conn.commit()
            rowid = cur.lastrowid
            if rowid is None:
                raise RuntimeError("SQLite did not return lastrowid for tasks insert")
            task_id = int(rowid)
            logger.debug("Task added id=%s category=%r", task_id, category)
            return task_id
        finally:
            conn.close()

    def get_task(self, task_id: int) -> Task | None:
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(_TASK_SELECT + " WHERE t.id = ?", (int(task_id),))
            row = cur.fetchone()
            return self._row_to_task(row) if row else None
        finally:
            conn.close()

    def list_tasks(
        self,
        *,
        completed: bool | None = None,
        category: str | None = None,
    ) -> list[Task]:
        """Tasks in insertion order, optionally filtered by state and category."""
        where, params = self._where(completed, category)
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(_TASK_SELECT + where + " ORDER BY t.id ASC", params)
            return [self._row_to_task(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def list_categories(self, *, completed: bool | None = None) -> list[str]:
        where, params = self._where(completed, None)
        where = (where + " AND" if where else " WHERE") + " t.category != ''"
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                f"SELECT DISTINCT t.category FROM tasks t{where} ORDER BY t.category ASC",
                params,
            )
            return [str(r[0]) for r in cur.fetchall()]
        finally:
            conn.close()

    def update_description(self, task_id: int, description: str) -> None:
        if not description or not description.strip():
            return
        self._execute(
            "UPDATE tasks SET description = ? WHERE id = ?",
            (description.strip(), int(task_id)),
        )

    def set_category(self, task_id: int, category: str) -> None:
        if not category or not category.strip():
            return
        self._execute(
            "UPDATE tasks SET category = ? WHERE id = ?",
            (category.strip(), int(task_id)),
        )

    def complete_task(self, task_id: int, now_ts: int | None = None) -> None:
        if now_ts is None:
            now_ts = int(time.time())
        n = self._execute(
            "UPDATE tasks SET completed = 1, completed_at = ? WHERE id = ? AND completed = 0",
            (int(now_ts), int(task_id)),
        )
        if n:
            logger.info("Task %s -> completed", task_id)

    def reopen_task(self, task_id: int) -> None:
        self._execute(
            "UPDATE tasks SET completed = 0, completed_at = 0 WHERE id = ?",
            (int(task_id),),
        )

    def delete_task(self, task_id: int) -> None:
        conn = self._get_conn()
        try:
            # Explicit delete keeps legacy rows (added before the FK existed) in step.
            conn.execute("DELETE FROM notifications WHERE task_id = ?", (int(task_id),))
            conn.execute("DELETE FROM tasks WHERE id = ?", (int(task_id),))
            conn.commit()
            logger.info("Task %s deleted", task_id)
        finally:
            conn.close()

    # ---- public API: reminders ----

    def set_reminder(self, task_id: int, scheduled_at: int, message: str | None = None) -> None:
        """
        Attach a pending reminder to a task.

        scheduled_at <= 0 means "no reminder" and clears pending ones instead.
        The message defaults to the task description.
        """
        if scheduled_at <= 0:
            self.clear_reminder(task_id)
            return

        conn = self._get_conn()
        try:
            cur = conn.cursor()
            if message is None:
                cur.execute("SELECT description FROM tasks WHERE id = ?", (int(task_id),))
                row = cur.fetchone()
                if row is None:
                    logger.warning("set_reminder: task %s does not exist", task_id)
                    return
                message = str(row["description"])
            cur.execute(
                """
                INSERT INTO notifications(task_id, scheduled_at, triggered, message)
                VALUES (?, ?, 0, ?)
                """,
                (int(task_id), int(scheduled_at), message),
            )
            conn.commit()
            logger.debug("Reminder set task_id=%s at=%s", task_id, scheduled_at)
        finally:
            conn.close()

    def clear_reminder(self, task_id: int) -> None:
        self._execute(
            "DELETE FROM notifications WHERE task_id = ? AND triggered = 0",
            (int(task_id),),
        )

    def set_overdue_frequency(self, task_id: int, seconds: int) -> None:
        self._execute(
            "UPDATE tasks SET overdue_every = ? WHERE id = ?",
            (max(0, int(seconds)), int(task_id)),
        )

    def list_due_notifications(self, *, now_ts: int, limit: int = 64) -> list[Notification]:
        """Untriggered reminders whose time has come, oldest first."""
        conn = self._get_conn()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                SELECT id, task_id, scheduled_at, triggered, message
                FROM notifications
                WHERE triggered = 0
                  AND scheduled_at > 0
                  AND scheduled_at <= ?
                ORDER BY scheduled_at ASC, id ASC
                    LIMIT ?
                """,
                (int(now_ts), int(limit)),
            )
            return [self._row_to_notification(r) for r in cur.fetchall()]
        finally:
            conn.close()

    def mark_triggered(self, notification_id: int) -> bool:
        """
        Atomically flip triggered 0 -> 1.

        Returns True only for the caller that actually flipped it, so two
        daemons on the same file never fire the same reminder twice.
        """
        n = self._execute(
            "UPDATE notifications SET triggered = 1 WHERE id = ? AND triggered = 0",
            (int(notification_id),),
        )
        return n == 1
