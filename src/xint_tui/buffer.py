"""Bounded output buffer plus the filter/scroll viewport over it."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Literal

DEFAULT_CAPACITY = 1200
STDERR_TAG = "[stderr] "

Stream = Literal["stdout", "stderr"]


class OutputBuffer:
    """Ordered lines from the last run; the oldest line is evicted when full.

    Standard-error lines carry ``STDERR_TAG`` so views can separate the two
    streams after they were interleaved on arrival.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        self.capacity = capacity
        self._lines: deque[str] = deque(maxlen=capacity)

    def append(self, line: str, *, stream: Stream = "stdout") -> None:
        self._lines.append(f"{STDERR_TAG}{line}" if stream == "stderr" else line)

    def reset(self) -> None:
        self._lines.clear()

    def snapshot(self) -> list[str]:
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)


def is_stderr(line: str) -> bool:
    return line.startswith(STDERR_TAG)


def stream_lines(lines: list[str], *, show_stderr: bool) -> list[str]:
    """Partition buffered lines by tag; the two views are disjoint."""
    return [line for line in lines if is_stderr(line) == show_stderr]


def filter_lines(lines: list[str], query: str) -> list[str]:
    """Case-insensitive substring filter; an empty query keeps everything."""
    if not query:
        return list(lines)
    needle = query.lower()
    return [line for line in lines if needle in line.lower()]


@dataclass(slots=True)
class Viewport:
    lines: list[str]
    offset: int
    start: int
    end: int
    total: int

    def describe(self) -> str:
        first = self.start + 1 if self.total else 0
        return f"view {first}-{self.end} of {self.total} | offset {self.offset}"


def clamp_offset(offset: int, total: int, height: int) -> int:
    max_offset = max(0, total - max(height, 0))
    return min(max(offset, 0), max_offset)


def visible_lines(lines: list[str], query: str, offset: int, height: int) -> Viewport:
    """Window the filtered lines, anchored at the newest line when offset is 0."""
    matched = filter_lines(lines, query)
    total = len(matched)
    offset = clamp_offset(offset, total, height)
    end = total - offset
    start = max(0, end - max(height, 0))
    return Viewport(lines=matched[start:end], offset=offset, start=start, end=end, total=total)
