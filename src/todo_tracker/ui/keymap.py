# src/todo_tracker/ui/keymap.py

from __future__ import annotations

import curses
import logging
from collections.abc import Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Key = int | str
KeyHandler = Callable[[], "KeyResult | None"]

ESC = "\x1b"
TAB = "\t"


class KeyResult:
    """What the main loop should do after a handler ran."""

    CONTINUE = "continue"
    QUIT = "quit"


@dataclass(slots=True, frozen=True)
class Binding:
    action: str
    handler: KeyHandler
    help_text: str | None


def normalize_key(key: object) -> Key | None:
    """Map curses' mix of ints and 1-char strings onto one comparable form."""
    if isinstance(key, str):
        if len(key) != 1:
            return None
        if ord(key) == 27:
            return ESC
        return key
    if isinstance(key, int):
        if key == 9:
            return TAB
        if key == 27:
            return ESC
        if 32 <= key < 127:
            return chr(key)
        return key
    return None


class KeyMap:
    """Simple key registry used by the terminal UI (n, c, d, Tab, ...)."""

    def __init__(self) -> None:
        self._bindings: dict[Key, Binding] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        action: str,
        keys: list[Key],
        handler: KeyHandler,
        help_text: str | None = None,
    ) -> None:
        binding = Binding(action=action, handler=handler, help_text=help_text)
        for raw in keys:
            key = normalize_key(raw)
            if key is None:
                raise ValueError(f"cannot bind {raw!r}")
            previous = self._bindings.get(key)
            if previous is not None and previous.action != action:
                logger.warning("Key %r rebound from %s to %s", raw, previous.action, action)
            self._bindings[key] = binding
        if help_text:
            self._help[action] = help_text

    def lookup(self, key: object) -> Binding | None:
        norm = normalize_key(key)
        if norm is None:
            return None
        return self._bindings.get(norm)

    def handle(self, key: object) -> str | None:
        """
        Run the handler bound to `key`.

        Returns KeyResult.QUIT / KeyResult.CONTINUE, or None if the key is unbound.
        """
        binding = self.lookup(key)
        if binding is None:
            return None
        result = binding.handler()
        return KeyResult.QUIT if result == KeyResult.QUIT else KeyResult.CONTINUE

    def build_help(self) -> str:
        return ", ".join(self._help.values())


NAV_KEYS: dict[str, list[Key]] = {
    "up": [curses.KEY_UP],
    "down": [curses.KEY_DOWN],
    "page_up": [curses.KEY_PPAGE],
    "page_down": [curses.KEY_NPAGE],
    "home": [curses.KEY_HOME],
    "end": [curses.KEY_END],
}
