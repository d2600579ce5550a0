"""Closed key-event type and the decoder from raw terminal input."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class KeyKind(Enum):
    UP = "up"
    DOWN = "down"
    TAB = "tab"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    HELP_TOGGLE = "help_toggle"
    DIGIT_JUMP = "digit_jump"
    FILTER_REQUEST = "filter_request"
    PALETTE_REQUEST = "palette_request"
    STREAM_TOGGLE = "stream_toggle"
    CHARACTER = "character"
    BACKSPACE = "backspace"
    INTERRUPT = "interrupt"


@dataclass(frozen=True, slots=True)
class KeyEvent:
    kind: KeyKind
    char: str = ""
    digit: int = 0


UP = KeyEvent(KeyKind.UP)
DOWN = KeyEvent(KeyKind.DOWN)
TAB = KeyEvent(KeyKind.TAB)
PAGE_UP = KeyEvent(KeyKind.PAGE_UP)
PAGE_DOWN = KeyEvent(KeyKind.PAGE_DOWN)
CONFIRM = KeyEvent(KeyKind.CONFIRM)
CANCEL = KeyEvent(KeyKind.CANCEL)
BACKSPACE = KeyEvent(KeyKind.BACKSPACE)
INTERRUPT = KeyEvent(KeyKind.INTERRUPT)


MAX_PENDING_LENGTH = 16


def char(value: str) -> KeyEvent:
    return KeyEvent(KeyKind.CHARACTER, char=value)


_ESCAPE_SEQUENCES: dict[str, KeyEvent] = {
    "\x1b[A": UP,
    "\x1bOA": UP,
    "\x1b[B": DOWN,
    "\x1bOB": DOWN,
    "\x1b[5~": PAGE_UP,
    "\x1b[6~": PAGE_DOWN,
    "\x1b[Z": TAB,
}

_SINGLE_KEYS: dict[str, KeyEvent] = {
    "\r": CONFIRM,
    "\n": CONFIRM,
    "\t": TAB,
    "\x7f": BACKSPACE,
    "\x08": BACKSPACE,
    "\x03": INTERRUPT,
    "\x04": INTERRUPT,
}

# Menu-only meaning of plain characters; inline capture keeps them as text.
_MENU_CHARACTERS: dict[str, KeyEvent] = {
    "k": UP,
    "j": DOWN,
    "q": CANCEL,
    "?": KeyEvent(KeyKind.HELP_TOGGLE),
    "/": KeyEvent(KeyKind.FILTER_REQUEST),
    ":": KeyEvent(KeyKind.PALETTE_REQUEST),
    "p": KeyEvent(KeyKind.PALETTE_REQUEST),
    "e": KeyEvent(KeyKind.STREAM_TOGGLE),
    "1": KeyEvent(KeyKind.DIGIT_JUMP, digit=1),
    "2": KeyEvent(KeyKind.DIGIT_JUMP, digit=2),
    "3": KeyEvent(KeyKind.DIGIT_JUMP, digit=3),
}


def decode_keys(data: str) -> list[KeyEvent]:
    """Split one read from the terminal into key events.

    An ESC that does not open a CSI/SS3 sequence is CANCEL; unknown
    sequences are dropped whole.
    """
    events: list[KeyEvent] = []
    index = 0
    while index < len(data):
        ch = data[index]
        if ch == "\x1b":
            for sequence, event in _ESCAPE_SEQUENCES.items():
                if data.startswith(sequence, index):
                    events.append(event)
                    index += len(sequence)
                    break
            else:
                skipped = _unknown_sequence_length(data, index + 1)
                if skipped == 0:
                    events.append(CANCEL)
                index += 1 + skipped
            continue
        if ch == "\r" and data.startswith("\r\n", index):
            events.append(CONFIRM)
            index += 2
            continue
        if ch in _SINGLE_KEYS:
            events.append(_SINGLE_KEYS[ch])
        elif ch.isprintable():
            events.append(char(ch))
        index += 1
    return events


def split_pending(data: str) -> tuple[str, str]:
    """Split off a trailing escape sequence that may continue in the next read.

    Returns ``(complete, pending)``. ``pending`` is a lone ESC or a CSI/SS3
    prefix still waiting for its final byte.
    """
    start = data.rfind("\x1b")
    if start == -1:
        return data, ""
    tail = data[start:]
    if len(tail) > MAX_PENDING_LENGTH:
        return data, ""
    if tail == "\x1b":
        return data[:start], tail
    if tail[1] in "[O" and not any("@" <= ch <= "~" for ch in tail[2:]):
        return data[:start], tail
    return data, ""


def _unknown_sequence_length(data: str, start: int) -> int:
    if start >= len(data) or data[start] not in "[O":
        return 0
    index = start + 1
    while index < len(data) and not ("@" <= data[index] <= "~"):
        index += 1
    return index - start + 1 if index < len(data) else len(data) - start


def to_menu_event(event: KeyEvent) -> KeyEvent:
    """Promote plain characters to their menu commands."""
    if event.kind is KeyKind.CHARACTER:
        return _MENU_CHARACTERS.get(event.char, event)
    return event
