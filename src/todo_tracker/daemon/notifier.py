# src/todo_tracker/daemon/notifier.py

from __future__ import annotations

import asyncio
import logging
import shlex

logger = logging.getLogger(__name__)


class NotifierError(RuntimeError):
    """The desktop notification command could not be run or failed."""


class DesktopNotifier:
    """
    Sends reminders through a desktop notification command (notify-send by default).

    The command is executed directly (no shell), so reminder text never needs quoting.
    """

    def __init__(self, command: str = "notify-send", *, timeout_seconds: float = 10.0) -> None:
        argv = shlex.split(command or "")
        if not argv:
            raise ValueError("notification command is empty")
        self._argv = argv
        self._timeout = max(0.5, float(timeout_seconds))

    async def send(self, *, title: str, message: str) -> None:
        argv = [*self._argv, title, message]
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise NotifierError(f"cannot run {self._argv[0]!r}: {e}") from e

        try:
            _, err = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            await self._kill(proc)
            raise NotifierError(f"{self._argv[0]!r} timed out") from e
        except asyncio.CancelledError:
            await self._kill(proc)
            raise

        if proc.returncode != 0:
            detail = (err or b"").decode("utf-8", "replace").strip()
            raise NotifierError(f"{self._argv[0]!r} exited with {proc.returncode}: {detail}")

        logger.debug("Notification sent title=%r", title)

    @staticmethod
    async def _kill(proc: asyncio.subprocess.Process) -> None:
        if proc.returncode is None:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
        await proc.wait()
