"""Keyboard ownership, raw-mode lifecycle and the menu/input state machine."""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import sys
import termios
import tty
from collections.abc import Callable, Iterable, Iterator
from enum import Enum
from typing import TextIO

from .actions import ACTIONS, Action, best_match, normalize
from .exceptions import InputCancelledError, TerminalStateError
from .keys import INTERRUPT, KeyEvent, KeyKind, decode_keys, split_pending, to_menu_event
from .models import InlinePrompt, Tab, UiState

logger = logging.getLogger("xint_tui")

DEFAULT_SCROLL_STEP = 10
ESCAPE_TIMEOUT = 0.05
_TAB_BY_DIGIT = {1: Tab.COMMANDS, 2: Tab.OUTPUT, 3: Tab.HELP}
_QUIT_WORDS = {"0", "q", "quit", "exit"}


class Sentinel(Enum):
    QUIT = "quit"
    PALETTE = "palette"
    FILTER = "filter"


Resolution = str | Sentinel


def apply_menu_event(
    event: KeyEvent,
    ui: UiState,
    actions: tuple[Action, ...] = ACTIONS,
    *,
    scroll_step: int = DEFAULT_SCROLL_STEP,
) -> Resolution | None:
    """Mutate ``ui`` for one menu keystroke; return a resolution when one is reached."""
    kind = event.kind
    if kind is KeyKind.UP:
        ui.active_index = (ui.active_index - 1) % len(actions)
    elif kind is KeyKind.DOWN:
        ui.active_index = (ui.active_index + 1) % len(actions)
    elif kind is KeyKind.TAB:
        ui.tab = ui.tab.next()
    elif kind is KeyKind.PAGE_UP:
        if ui.tab is Tab.OUTPUT:
            ui.output_offset += scroll_step
    elif kind is KeyKind.PAGE_DOWN:
        if ui.tab is Tab.OUTPUT:
            ui.output_offset = max(0, ui.output_offset - scroll_step)
    elif kind is KeyKind.CONFIRM:
        ui.tab = Tab.OUTPUT
        return actions[ui.active_index].key
    elif kind in (KeyKind.CANCEL, KeyKind.INTERRUPT):
        return Sentinel.QUIT
    elif kind is KeyKind.HELP_TOGGLE:
        ui.tab = Tab.COMMANDS if ui.tab is Tab.HELP else Tab.HELP
    elif kind is KeyKind.DIGIT_JUMP:
        ui.tab = _TAB_BY_DIGIT.get(event.digit, ui.tab)
    elif kind is KeyKind.FILTER_REQUEST:
        return Sentinel.FILTER
    elif kind is KeyKind.PALETTE_REQUEST:
        return Sentinel.PALETTE
    elif kind is KeyKind.STREAM_TOGGLE:
        ui.show_stderr = not ui.show_stderr
        ui.tab = Tab.OUTPUT
        ui.output_offset = 0
    return None


def apply_input_event(event: KeyEvent, prompt: InlinePrompt) -> str | None:
    """Edit an inline prompt; return the captured value once it resolves."""
    kind = event.kind
    if kind is KeyKind.CHARACTER:
        prompt.value += event.char
    elif kind is KeyKind.BACKSPACE:
        prompt.value = prompt.value[:-1]
    elif kind is KeyKind.CONFIRM:
        return prompt.value
    elif kind in (KeyKind.CANCEL, KeyKind.INTERRUPT):
        prompt.cancelled = True
        return ""
    return None


def resolve_menu_choice(text: str, actions: tuple[Action, ...] = ACTIONS) -> Resolution | None:
    """Match one typed menu line: a position, a key or alias, or a palette query."""
    choice = text.strip().lower()
    if choice in _QUIT_WORDS:
        return Sentinel.QUIT
    if choice.isdigit():
        position = int(choice)
        if 1 <= position <= len(actions):
            return actions[position - 1].key
        return None
    key = normalize(choice, actions)
    if key:
        return key
    match = best_match(choice, actions)
    return match.key if match else None


class InputController:
    """Sole owner of keystrokes for one dashboard session.

    Menu navigation and inline capture never overlap; raw mode is entered
    once and restored on every exit path by :meth:`raw_mode`.
    """

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        interactive: bool | None = None,
        actions: tuple[Action, ...] = ACTIONS,
        scroll_step: int = DEFAULT_SCROLL_STEP,
    ) -> None:
        self.stdin = stdin or sys.stdin
        if interactive is None:
            interactive = _is_tty(self.stdin)
        self.interactive = interactive
        self.actions = actions
        self.scroll_step = scroll_step
        self._queue: asyncio.Queue[KeyEvent] = asyncio.Queue()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._saved_attrs: list | None = None
        self._fd: int | None = None
        self._owner: str | None = None
        self._pending = ""
        self._closed = False

    @property
    def raw_active(self) -> bool:
        return self._fd is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, events: Iterable[KeyEvent]) -> None:
        for event in events:
            self._queue.put_nowait(event)

    def feed_text(self, data: str) -> None:
        """Decode terminal input; an unfinished escape sequence waits for the next read."""
        complete, self._pending = split_pending(self._pending + data)
        self.feed(decode_keys(complete))

    def flush_pending(self) -> None:
        pending, self._pending = self._pending, ""
        if pending:
            self.feed(decode_keys(pending))

    async def next_event(self) -> KeyEvent:
        """Next key event; a held-back ESC becomes Cancel if nothing follows it."""
        if self._queue.empty():
            if self._closed:
                return INTERRUPT
            if self._pending:
                try:
                    return await asyncio.wait_for(self._queue.get(), ESCAPE_TIMEOUT)
                except TimeoutError:
                    self.flush_pending()
        return await self._queue.get()

    def enter_raw_mode(self) -> None:
        if self._fd is not None:
            raise TerminalStateError("raw mode is already active")
        fd = self.stdin.fileno()
        self._saved_attrs = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            attrs = termios.tcgetattr(fd)
            attrs[3] &= ~termios.ISIG
            termios.tcsetattr(fd, termios.TCSANOW, attrs)
            asyncio.get_running_loop().add_reader(fd, self._on_readable, fd)
        except BaseException:
            termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
            raise
        self._fd = fd
        logger.debug("Raw keyboard mode entered on fd %s.", fd)

    def restore(self) -> None:
        if self._fd is None:
            raise TerminalStateError("raw mode is not active")
        fd, self._fd = self._fd, None
        try:
            asyncio.get_running_loop().remove_reader(fd)
        finally:
            if self._saved_attrs is not None:
                termios.tcsetattr(fd, termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        logger.debug("Terminal mode restored on fd %s.", fd)

    @contextlib.contextmanager
    def raw_mode(self) -> Iterator[InputController]:
        self.enter_raw_mode()
        try:
            yield self
        finally:
            self.restore()

    def _on_readable(self, fd: int) -> None:
        try:
            data = os.read(fd, 1024)
        except BlockingIOError:
            return
        except OSError as exc:
            logger.warning("Keyboard input failed: %s", exc)
            data = b""
        if not data:
            self._close_input(fd)
            return
        self.feed_text(self._decoder.decode(data))

    def _close_input(self, fd: int) -> None:
        """Stop reading ``fd``; every later :meth:`next_event` yields Interrupt."""
        asyncio.get_running_loop().remove_reader(fd)
        self.flush_pending()
        self._closed = True
        self.feed([INTERRUPT])
        logger.debug("Keyboard input closed on fd %s.", fd)

    @contextlib.contextmanager
    def claim(self, owner: str) -> Iterator[None]:
        if self._owner is not None:
            raise TerminalStateError(f"keyboard already owned by {self._owner}")
        self._owner = owner
        try:
            yield
        finally:
            self._owner = None

    async def select(self, ui: UiState, on_change: Callable[[], None]) -> Resolution:
        """Run menu navigation until a selection or sentinel resolves."""
        with self.claim("menu"):
            while True:
                event = to_menu_event(await self.next_event())
                resolution = apply_menu_event(
                    event, ui, self.actions, scroll_step=self.scroll_step
                )
                on_change()
                if resolution is not None:
                    return resolution

    async def capture(
        self,
        label: str,
        ui: UiState,
        on_change: Callable[[], None],
        *,
        initial: str = "",
        abortable: bool = False,
    ) -> str:
        """Collect one inline text value; escape or interrupt yields ''.

        With ``abortable`` set, escape or interrupt raises
        :class:`InputCancelledError` instead.
        """
        with self.claim("input"):
            prompt = InlinePrompt(label=label, value=initial)
            ui.inline_prompt = prompt
            on_change()
            try:
                while True:
                    value = apply_input_event(await self.next_event(), prompt)
                    if value is not None:
                        if prompt.cancelled and abortable:
                            raise InputCancelledError(label.split(" (", 1)[0])
                        return value
                    on_change()
            finally:
                ui.inline_prompt = None
                on_change()

    async def read_line(self, prompt: str, write: Callable[[str], None]) -> str | None:
        """Line-based fallback read; None at end of input."""
        write(prompt)
        line = await asyncio.get_running_loop().run_in_executor(None, self.stdin.readline)
        if not line:
            return None
        return line.rstrip("\r\n")


def _is_tty(stream: TextIO) -> bool:
    try:
        return stream.isatty() and os.isatty(stream.fileno())
    except (AttributeError, OSError, ValueError):
        return False
