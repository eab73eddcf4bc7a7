# tests/test_notifier.py

from __future__ import annotations

import asyncio
import shutil

import pytest

from todo_tracker.daemon.notifier import DesktopNotifier, NotifierError

pytestmark = pytest.mark.skipif(shutil.which("true") is None, reason="needs POSIX true/false")


@pytest.mark.asyncio
async def test_successful_command() -> None:
    await DesktopNotifier("true").send(title="TODO!", message="it's 'quoted' text")


@pytest.mark.asyncio
async def test_failing_command_raises() -> None:
    with pytest.raises(NotifierError):
        await DesktopNotifier("false").send(title="TODO!", message="x")


@pytest.mark.asyncio
async def test_missing_command_raises() -> None:
    with pytest.raises(NotifierError):
        await DesktopNotifier("definitely-not-a-real-notifier-cmd").send(title="t", message="m")


def test_empty_command_rejected() -> None:
    with pytest.raises(ValueError):
        DesktopNotifier("   ")


@pytest.mark.asyncio
@pytest.mark.skipif(shutil.which("sh") is None, reason="needs POSIX sh")
async def test_cancelled_send_kills_the_child(monkeypatch) -> None:
    started: list[asyncio.subprocess.Process] = []
    real_exec = asyncio.create_subprocess_exec

    async def recording_exec(*args, **kwargs):
        proc = await real_exec(*args, **kwargs)
        started.append(proc)
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", recording_exec)

    notifier = DesktopNotifier("sh -c 'sleep 30'", timeout_seconds=60)
    sending = asyncio.create_task(notifier.send(title="t", message="m"))
    while not started:
        await asyncio.sleep(0.01)
    await asyncio.sleep(0.05)
    sending.cancel()
    with pytest.raises(asyncio.CancelledError):
        await sending

    assert started[0].returncode is not None
