# tests/test_reminder_daemon.py

from __future__ import annotations

import asyncio
import time

import pytest

from todo_tracker.daemon.reminder_daemon import process_due, run_reminder_daemon

from .fakes import FakeNotifier


@pytest.mark.asyncio
async def test_daemon_fires_due_reminder_exactly_once(store) -> None:
    task_id = store.add_task("Take out trash")
    store.set_reminder(task_id, int(time.time()) - 1)
    notifier = FakeNotifier()

    runner = asyncio.create_task(
        run_reminder_daemon(store, notifier, interval_seconds=0.01, title="TODO!")
    )

    await asyncio.sleep(0.1)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [(n.title, n.message) for n in notifier.sent] == [("TODO!", "Take out trash")]
    assert store.list_due_notifications(now_ts=int(time.time())) == []


@pytest.mark.asyncio
async def test_future_reminder_is_not_fired(store) -> None:
    task_id = store.add_task("Later")
    now = int(time.time())
    store.set_reminder(task_id, now + 3600)
    notifier = FakeNotifier()

    assert await process_due(store, notifier, now_ts=now) == 0
    assert notifier.sent == []
    assert store.get_task(task_id).reminder_at == now + 3600


@pytest.mark.asyncio
async def test_stale_reminder_is_marked_without_notifying(store) -> None:
    task_id = store.add_task("Missed")
    now = int(time.time())
    store.set_reminder(task_id, now - 600)
    notifier = FakeNotifier()

    sent = await process_due(store, notifier, now_ts=now, grace_seconds=2)

    assert sent == 0
    assert notifier.sent == []
    assert store.list_due_notifications(now_ts=now) == []


@pytest.mark.asyncio
async def test_failed_send_does_not_refire(store) -> None:
    task_id = store.add_task("Flaky")
    now = int(time.time())
    store.set_reminder(task_id, now - 1)
    notifier = FakeNotifier(fail=True)

    assert await process_due(store, notifier, now_ts=now) == 0

    notifier.fail = False
    assert await process_due(store, notifier, now_ts=now) == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_overdue_task_gets_rearmed(store) -> None:
    task_id = store.add_task("Drink water")
    now = int(time.time())
    store.set_reminder(task_id, now - 30)
    store.set_overdue_frequency(task_id, 60)
    notifier = FakeNotifier()

    assert await process_due(store, notifier, now_ts=now) == 1

    task = store.get_task(task_id)
    assert task.reminder is not None
    assert task.reminder_at == now + 30
    assert task.reminder.message == "Drink water"


@pytest.mark.asyncio
async def test_completed_task_is_not_rearmed(store) -> None:
    task_id = store.add_task("Done already")
    now = int(time.time())
    store.set_reminder(task_id, now - 30)
    store.set_overdue_frequency(task_id, 60)
    store.complete_task(task_id, now_ts=now - 10)
    notifier = FakeNotifier()

    assert await process_due(store, notifier, now_ts=now) == 1
    assert store.get_task(task_id).reminder is None


class _BrokenStore:
    def list_due_notifications(self, *, now_ts: int, limit: int = 64):
        raise RuntimeError("database is locked")


@pytest.mark.asyncio
async def test_store_failure_is_logged_and_tick_survives(caplog) -> None:
    notifier = FakeNotifier()
    assert await process_due(_BrokenStore(), notifier, now_ts=int(time.time())) == 0
    assert "list_due_notifications failed" in caplog.text
