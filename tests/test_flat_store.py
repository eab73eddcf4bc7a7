# tests/test_flat_store.py

from __future__ import annotations

import time
from pathlib import Path

import pytest

from todo_tracker.daemon.reminder_daemon import process_due
from todo_tracker.tasks.flat_store import FlatFileStore

from .fakes import FakeNotifier


def test_missing_files_load_as_empty(tmp_path: Path) -> None:
    store = FlatFileStore(tmp_path / "sub" / "todo.db", tmp_path / "sub" / "notifications.db")
    assert store.list_tasks() == []
    assert store.list_due_notifications(now_ts=int(time.time())) == []
    assert (tmp_path / "sub" / "todo.db").exists()


def test_line_format(flat_store: FlatFileStore, settings) -> None:
    task_id = flat_store.add_task("Pay rent", "bills")
    flat_store.set_reminder(task_id, 1_900_000_000)

    task_line = settings.tasks_file.read_text("utf-8").strip()
    assert task_line == f"{task_id};0;0;Pay rent;bills;1900000000;0"

    notif_line = settings.notifications_file.read_text("utf-8").strip()
    assert notif_line == f"1900000000;0;Pay rent;{task_id};1"


def test_malformed_lines_are_skipped(tmp_path: Path) -> None:
    tasks = tmp_path / "todo.db"
    tasks.write_text(
        "\n".join(
            [
                "1700000000;0;0;good task;home;0",
                "garbage",
                "not-a-number;0;0;bad stamp",
                "1700000100;oops;1;bad completion stamp;;0",
                "",
            ]
        ),
        "utf-8",
    )
    store = FlatFileStore(tasks, tmp_path / "notifications.db")
    loaded = store.list_tasks()
    assert [t.description for t in loaded] == ["good task", "bad completion stamp"]
    assert loaded[1].completed is True
    assert loaded[1].completed_at == 0


def test_legacy_lines_without_trailing_columns(tmp_path: Path) -> None:
    tasks = tmp_path / "todo.db"
    notifs = tmp_path / "notifications.db"
    tasks.write_text("1700000000;0;0;old style;misc;1800000000\n", "utf-8")
    notifs.write_text("1800000000;0;old style\n", "utf-8")

    store = FlatFileStore(tasks, notifs)
    (task,) = store.list_tasks()
    assert task.overdue_every == 0
    assert task.reminder is not None
    assert task.reminder_at == 1800000000

    (due,) = store.list_due_notifications(now_ts=1800000001)
    assert due.task_id == 1700000000
    assert due.message == "old style"


def test_pipe_delimiter_and_text_sanitizing(tmp_path: Path) -> None:
    tasks = tmp_path / "todo.db"
    store = FlatFileStore(tasks, tmp_path / "notifications.db", delimiter="|")

    task_id = store.add_task("a|b;c", "x|y")

    line = tasks.read_text("utf-8").strip()
    assert line.split("|")[3] == "a b c"
    assert store.get_task(task_id).category == "x y"


def test_unsupported_delimiter(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        FlatFileStore(tmp_path / "t", tmp_path / "n", delimiter=",")


def test_same_second_adds_get_distinct_ids(flat_store: FlatFileStore) -> None:
    ids = [flat_store.add_task(f"task {i}") for i in range(3)]
    assert len(set(ids)) == 3
    assert [t.description for t in flat_store.list_tasks()] == ["task 0", "task 1", "task 2"]


def test_ui_and_daemon_instances_see_each_other(settings) -> None:
    ui = FlatFileStore(settings.tasks_file, settings.notifications_file)
    daemon = FlatFileStore(settings.tasks_file, settings.notifications_file)

    task_id = ui.add_task("shared")
    ui.set_reminder(task_id, int(time.time()) - 1)

    (due,) = daemon.list_due_notifications(now_ts=int(time.time()))
    assert daemon.mark_triggered(due.id) is True
    assert ui.mark_triggered(due.id) is False
    assert ui.get_task(task_id).reminder is None


def test_legacy_reminder_owner_is_written_back(tmp_path: Path) -> None:
    tasks = tmp_path / "todo.db"
    notifs = tmp_path / "notifications.db"
    tasks.write_text("1700000000;0;0;old style;misc;1800000000\n", "utf-8")
    notifs.write_text("1800000000;0;old style\n", "utf-8")

    store = FlatFileStore(tasks, notifs)
    store.set_category(1700000000, "home")
    assert notifs.read_text("utf-8").splitlines() == ["1800000000;0;old style;1700000000;1"]

    # An earlier reminder changes the task's reminder column; the old row stays owned.
    store.set_reminder(1700000000, 1750000000)
    store.delete_task(1700000000)
    assert notifs.read_text("utf-8") == ""


@pytest.mark.asyncio
async def test_claims_survive_rewrites_around_malformed_lines(tmp_path: Path) -> None:
    notifs = tmp_path / "notifications.db"
    notifs.write_text(
        "garbage\n100;0;A;0\n200;0;B;0\n9999999999;0;C-future;0\n",
        "utf-8",
    )
    store = FlatFileStore(tmp_path / "todo.db", notifs)
    notifier = FakeNotifier()

    assert await process_due(store, notifier, now_ts=300) == 2
    assert await process_due(store, notifier, now_ts=301) == 0

    assert [n.message for n in notifier.sent] == ["A", "B"]
    assert notifs.read_text("utf-8").splitlines() == [
        "100;1;A;0;1",
        "200;1;B;0;2",
        "9999999999;0;C-future;0;3",
    ]


def test_new_reminder_ids_never_collide(tmp_path: Path) -> None:
    tasks = tmp_path / "todo.db"
    notifs = tmp_path / "notifications.db"
    tasks.write_text("1700000000;0;0;task;;0;0\n", "utf-8")
    notifs.write_text("bad\n100;1;done;1700000000;7\n200;0;legacy;0\n", "utf-8")

    store = FlatFileStore(tasks, notifs)
    store.set_reminder(1700000000, 1900000000)

    ids = [line.rsplit(";", 1)[1] for line in notifs.read_text("utf-8").splitlines()]
    assert ids == ["7", "8", "9"]
    assert store.get_task(1700000000).reminder.id == 9
