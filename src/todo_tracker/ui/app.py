# src/todo_tracker/ui/app.py

"""
Curses front end.

One thread, one loop: draw, block on a single key, run the bound action
(at most one store round-trip), redraw.
"""

from __future__ import annotations

import curses
import logging
from typing import Any

from ..core.ports import TaskRepo
from ..tasks.reminders import UNIT_SECONDS, convert_to_seconds, parse_quantity, schedule_from_now
from .keymap import ESC, NAV_KEYS, TAB, KeyMap, KeyResult
from .list_view import ListView
from .render import ColumnLayout, column_titles, format_row_dates, header_lines, wrap_text

logger = logging.getLogger(__name__)

LIST_TOP = 8
PAIR_TEXT = 1
PAIR_SELECTED = 2
PAIR_OVERLAY = 3


def prompt_text(win: Any, y: int, x: int, *, initial: str = "", max_len: int = 1024) -> str:
    """
    Line editor inside `win`: Enter accepts, Esc cancels (returns "").

    Left/Right move the cursor, Backspace deletes, printable keys insert.
    """
    text = list(initial)
    pos = len(text)
    _, width = win.getmaxyx()
    visible = max(1, width - x - 2)
    win.keypad(True)
    curses.curs_set(1)

    try:
        while True:
            offset = max(0, pos - visible + 1)
            segment = "".join(text)[offset : offset + visible]
            win.move(y, x)
            win.addnstr(y, x, segment.ljust(visible), visible)
            win.move(y, x + pos - offset)
            win.refresh()

            try:
                key = win.get_wch()
            except curses.error:
                continue

            if key in ("\n", "\r", curses.KEY_ENTER):
                break
            if key == ESC:
                text = []
                break
            if key in (curses.KEY_BACKSPACE, "\b", "\x7f"):
                if pos > 0:
                    text.pop(pos - 1)
                    pos -= 1
                continue
            if key == curses.KEY_LEFT:
                pos = max(0, pos - 1)
                continue
            if key == curses.KEY_RIGHT:
                pos = min(len(text), pos + 1)
                continue
            if key == curses.KEY_HOME:
                pos = 0
                continue
            if key == curses.KEY_END:
                pos = len(text)
                continue
            if isinstance(key, str) and key.isprintable() and len(text) < max_len:
                text.insert(pos, key)
                pos += 1
    finally:
        curses.curs_set(0)

    return "".join(text).strip()


class TodoApp:
    def __init__(self, stdscr: Any, store: TaskRepo, *, title: str = "CLI TODO APP") -> None:
        self.stdscr = stdscr
        self.view = ListView(store)
        self.title = title
        self.status = ""
        self.keymap = self._build_keymap()
        self.list_win: Any = None

    # ---- setup ----

    def _init_curses(self) -> None:
        curses.curs_set(0)
        # Esc quits and cancels overlays; don't make it wait a full second.
        curses.set_escdelay(25)
        self.stdscr.keypad(True)
        if curses.has_colors():
            curses.start_color()
            curses.init_pair(PAIR_TEXT, curses.COLOR_GREEN, curses.COLOR_BLACK)
            curses.init_pair(PAIR_SELECTED, curses.COLOR_BLACK, curses.COLOR_WHITE)
            curses.init_pair(PAIR_OVERLAY, curses.COLOR_BLUE, curses.COLOR_BLACK)
        self._make_list_window()

    def _make_list_window(self) -> None:
        lines, cols = self.stdscr.getmaxyx()
        height = max(3, lines - LIST_TOP - 2)
        width = max(20, cols - 4)
        self.list_win = curses.newwin(height, width, LIST_TOP, 2)
        self.list_win.keypad(True)

    def _build_keymap(self) -> KeyMap:
        km = KeyMap()
        v = self.view
        km.register("up", NAV_KEYS["up"], lambda: v.move(-1))
        km.register("down", NAV_KEYS["down"], lambda: v.move(1))
        km.register("page_up", NAV_KEYS["page_up"], lambda: v.page(-1))
        km.register("page_down", NAV_KEYS["page_down"], lambda: v.page(1))
        km.register("home", NAV_KEYS["home"], v.home)
        km.register("end", NAV_KEYS["end"], v.end)
        km.register("complete", ["c"], v.complete_selected, "c=complete")
        km.register("delete", ["d"], v.delete_selected, "d=delete")
        km.register("add", ["n"], self.add_task, "n=add")
        km.register("edit", ["e"], self.edit_task, "e=edit")
        km.register("category", ["s"], self.set_category, "s=category")
        km.register("reminder", ["r", "R"], self.set_reminder, "r=reminder")
        km.register("overdue", ["O"], self.set_overdue, "O=overdue repeat")
        km.register("filter", ["#"], self.pick_filter, "#=filter")
        km.register("switch", [TAB], v.toggle_mode, "Tab=switch")
        km.register("goto", [":"], self.goto_prompt)
        km.register("quit", ["q", ESC], lambda: KeyResult.QUIT, "q=save+exit")
        km.register("resize", [curses.KEY_RESIZE], self._make_list_window)
        return km

    # ---- drawing ----

    def _attr(self, pair: int) -> int:
        return curses.color_pair(pair) if curses.has_colors() else 0

    def draw(self) -> None:
        self.stdscr.erase()
        lines, cols = self.stdscr.getmaxyx()
        text_attr = self._attr(PAIR_TEXT)
        for i, line in enumerate(header_lines(self.view, title=self.title, key_help=self.keymap.build_help())):
            y = i + 1
            if y >= lines:
                break
            if i == 2:
                self.stdscr.hline(y, 2, curses.ACS_HLINE, max(0, cols - 4))
                continue
            self.stdscr.addnstr(y, 2, line, max(0, cols - 3), text_attr)
        if self.status and lines > 1:
            self.stdscr.addnstr(lines - 1, 0, self.status, max(0, cols - 1), text_attr)
        self.stdscr.noutrefresh()
        self._draw_list()
        curses.doupdate()

    def _draw_list(self) -> None:
        win = self.list_win
        win.erase()
        win.box()
        height, width = win.getmaxyx()
        layout = ColumnLayout.for_width(width)
        titles = column_titles(self.view.mode)

        def put(y: int, x: int, text: str, attr: int = 0) -> None:
            if 0 <= y < height and 0 <= x < width - 1:
                win.addnstr(y, x, text, max(0, width - 1 - x), attr)

        put(0, 2, " # ")
        put(0, layout.description, titles["tasks"])
        put(0, layout.reminder, " Reminder ")
        put(0, layout.category, " Category ")
        put(0, layout.date, titles["date"])

        rows = self.view.visible_tasks()
        visible_lines = height - 2
        offset = self.view.scroll_offset(visible_lines)
        y = 1
        for idx in range(offset, len(rows)):
            if y >= height - 1:
                break
            number, task = rows[idx]
            attr = self._attr(PAIR_SELECTED if idx == self.view.selected else PAIR_TEXT)
            reminder, date = format_row_dates(task)
            put(y, 2, f"{number:<3d}", attr)
            put(y, layout.reminder, reminder, attr)
            put(y, layout.category, f"{task.category:<12.12s}", attr)
            put(y, layout.date, date, attr)
            wrapped = wrap_text(task.description, layout.description_width)
            for j, part in enumerate(wrapped):
                if y + j >= height - 1:
                    break
                put(y + j, layout.description, part, attr)
            y += len(wrapped)
        win.noutrefresh()

    # ---- overlays ----

    def _overlay(self, height: int, width: int | None = None) -> Any:
        lines, cols = self.stdscr.getmaxyx()
        width = min(cols - 2, width if width is not None else cols - 20)
        height = min(lines - 2, height)
        win = curses.newwin(max(3, height), max(10, width), max(0, (lines - height) // 2), max(0, (cols - width) // 2))
        win.bkgd(" ", self._attr(PAIR_OVERLAY))
        win.box()
        win.keypad(True)
        return win

    def _ask(self, label: str, *, initial: str = "", max_len: int = 1024) -> str:
        win = self._overlay(7)
        win.addnstr(1, 2, label, max(0, win.getmaxyx()[1] - 4))
        win.refresh()
        try:
            return prompt_text(win, 2, 2, initial=initial, max_len=max_len)
        finally:
            del win
            self.stdscr.touchwin()

    def _ask_duration(self, label: str) -> int:
        """Quantity + unit prompt; returns seconds (0 when blank/invalid)."""
        win = self._overlay(8, 60)
        win.addnstr(1, 2, label, 56)
        win.refresh()
        try:
            quantity = parse_quantity(prompt_text(win, 2, 2, max_len=32))
            if quantity == 0:
                return 0
            win.addnstr(3, 2, "Choose unit: (s)econds, (m)inutes, (h)ours, (d)ays", 56)
            win.refresh()
            unit = win.getkey()
            return convert_to_seconds(quantity, unit if unit[:1].lower() in UNIT_SECONDS else "s")
        finally:
            del win
            self.stdscr.touchwin()

    # ---- actions ----

    def add_task(self) -> None:
        description = self._ask("Enter new task:")
        if self.view.add(description):
            self.status = "Task added."

    def edit_task(self) -> None:
        task = self.view.selected_task()
        if task is None:
            return
        self.view.edit_selected(self._ask("Edit task:", initial=task.description))

    def set_category(self) -> None:
        task = self.view.selected_task()
        if task is None:
            return
        label = f"Enter category for {self.view.mode.value} item #{self.view.selected + 1}:"
        self.view.categorize_selected(self._ask(label, initial=task.category))

    def set_reminder(self) -> None:
        if self.view.selected_task() is None:
            return
        seconds = self._ask_duration("Set reminder quantity (integer):")
        if seconds <= 0:
            self.view.clear_reminder_selected()
            self.status = "Reminder cleared."
            return
        self.view.remind_selected(schedule_from_now(seconds, "s"))
        self.status = "Reminder set."

    def set_overdue(self) -> None:
        if self.view.selected_task() is None:
            return
        seconds = self._ask_duration("Repeat reminder while overdue every (0=off):")
        self.view.set_overdue_selected(seconds)
        self.status = "Overdue repeat set." if seconds else "Overdue repeat off."

    def pick_filter(self) -> None:
        cats = self.view.categories()
        win = self._overlay(5 + len(cats), 40)
        height, _ = win.getmaxyx()
        win.addnstr(1, 2, "Select a category to filter:", 36)
        choice = 0
        try:
            while True:
                for i, cat in enumerate(cats):
                    if i + 3 >= height - 1:
                        break
                    attr = self._attr(PAIR_SELECTED if i == choice else PAIR_OVERLAY)
                    win.addnstr(i + 3, 2, f"{cat}  ", 34, attr)
                win.refresh()
                key = win.getch()
                if key == curses.KEY_UP:
                    choice = max(0, choice - 1)
                elif key == curses.KEY_DOWN:
                    choice = min(len(cats) - 1, choice + 1)
                elif key in (ord("q"), 27):
                    return
                elif key in (10, 13, curses.KEY_ENTER):
                    self.view.set_filter(cats[choice])
                    return
        finally:
            del win
            self.stdscr.touchwin()

    def goto_prompt(self) -> None:
        lines, cols = self.stdscr.getmaxyx()
        label = "Goto item (blank=cancel): "
        self.stdscr.move(lines - 1, 0)
        self.stdscr.clrtoeol()
        self.stdscr.addnstr(lines - 1, 0, label, max(0, cols - 1))
        win = curses.newwin(1, max(1, cols - len(label) - 1), lines - 1, min(cols - 1, len(label)))
        raw = prompt_text(win, 0, 0, max_len=15)
        del win
        if raw:
            if not self.view.goto(parse_quantity(raw)):
                self.status = f"No item {raw} in this view."

    # ---- main loop ----

    def run(self) -> None:
        self._init_curses()
        while True:
            self.draw()
            try:
                key = self.stdscr.get_wch()
            except curses.error:
                continue
            except KeyboardInterrupt:
                break

            self.status = ""
            try:
                result = self.keymap.handle(key)
            except Exception as e:
                logger.exception("Action for key %r failed", key)
                self.status = f"Error: {e}"
                # The store may have changed underneath us; show what is really there.
                try:
                    self.view.reload()
                except Exception:
                    logger.exception("Reload after failure failed")
                continue

            if result == KeyResult.QUIT:
                break

        self.view.store.close()
        logger.info("UI closed.")


def run_tui(store: TaskRepo, *, title: str = "CLI TODO APP") -> None:
    def _main(stdscr: Any) -> None:
        TodoApp(stdscr, store, title=title).run()

    curses.wrapper(_main)
