# tests/test_task_store.py

from __future__ import annotations

import sqlite3
import time
from pathlib import Path

from todo_tracker.tasks.task_store import TaskStore


def _index_names(db: Path) -> set[str]:
    conn = sqlite3.connect(str(db))
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_schema_is_idempotent(tmp_path: Path) -> None:
    db = tmp_path / "todo.sqlite3"
    first = TaskStore(db)
    task_id = first.add_task("persist me")

    second = TaskStore(db)
    assert second.count_tasks() == 1
    assert second.get_task(task_id).description == "persist me"

    names = _index_names(db)
    assert {
        "idx_tasks_completed",
        "idx_tasks_category",
        "idx_notifications_scheduled",
        "idx_notifications_task",
    } <= names


def test_old_database_gets_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(str(db))
    conn.execute(
        "CREATE TABLE tasks (id INTEGER PRIMARY KEY AUTOINCREMENT, description TEXT NOT NULL, "
        "completed INTEGER NOT NULL DEFAULT 0, created_at INTEGER NOT NULL)"
    )
    conn.execute(
        "CREATE TABLE notifications (id INTEGER PRIMARY KEY AUTOINCREMENT, "
        "scheduled_at INTEGER NOT NULL DEFAULT 0, triggered INTEGER NOT NULL DEFAULT 0)"
    )
    conn.execute("INSERT INTO tasks(description, completed, created_at) VALUES ('legacy', 0, 1700000000)")
    conn.commit()
    conn.close()

    store = TaskStore(db)
    tasks = store.list_tasks()
    assert len(tasks) == 1
    assert tasks[0].description == "legacy"
    assert tasks[0].category == ""
    assert tasks[0].overdue_every == 0

    store.set_category(tasks[0].id, "old")
    store.set_reminder(tasks[0].id, int(time.time()) + 60)
    task = store.get_task(tasks[0].id)
    assert task.category == "old"
    assert task.reminder is not None
    assert task.reminder.message == "legacy"


def test_delete_cascades_to_notifications(sqlite_store: TaskStore) -> None:
    task_id = sqlite_store.add_task("with reminders")
    now = int(time.time())
    sqlite_store.set_reminder(task_id, now + 10)
    sqlite_store.set_reminder(task_id, now + 20)

    sqlite_store.delete_task(task_id)

    conn = sqlite3.connect(str(sqlite_store.db_path))
    try:
        (n,) = conn.execute("SELECT COUNT(*) FROM notifications").fetchone()
    finally:
        conn.close()
    assert n == 0


def test_reminder_for_missing_task_is_ignored(sqlite_store: TaskStore) -> None:
    sqlite_store.set_reminder(999, int(time.time()) + 60)
    assert sqlite_store.list_due_notifications(now_ts=int(time.time()) + 120) == []


def test_clear_reminder_keeps_triggered_history(sqlite_store: TaskStore) -> None:
    task_id = sqlite_store.add_task("history")
    now = int(time.time())
    sqlite_store.set_reminder(task_id, now - 5)
    (due,) = sqlite_store.list_due_notifications(now_ts=now)
    assert sqlite_store.mark_triggered(due.id)

    sqlite_store.set_reminder(task_id, now + 100)
    sqlite_store.clear_reminder(task_id)

    conn = sqlite3.connect(str(sqlite_store.db_path))
    try:
        rows = conn.execute("SELECT triggered FROM notifications WHERE task_id = ?", (task_id,)).fetchall()
    finally:
        conn.close()
    assert [r[0] for r in rows] == [1]


def test_two_stores_on_one_file_claim_once(tmp_path: Path) -> None:
    db = tmp_path / "shared.sqlite3"
    ui = TaskStore(db)
    daemon = TaskStore(db)

    task_id = ui.add_task("shared")
    ui.set_reminder(task_id, int(time.time()) - 1)

    (due,) = daemon.list_due_notifications(now_ts=int(time.time()))
    assert daemon.mark_triggered(due.id) is True
    assert ui.mark_triggered(due.id) is False
