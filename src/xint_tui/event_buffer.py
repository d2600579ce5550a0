"""Bounded dashboard event feed that collapses repeated warnings."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Literal

Severity = Literal["INFO", "WARN", "ERROR", "CRITICAL"]


@dataclass(slots=True)
class DashboardEvent:
    """One feed entry; repeats within the dedupe window bump ``count``."""

    ts: datetime
    severity: Severity
    message: str
    count: int = 1
    last_seen: datetime | None = None

    def __post_init__(self) -> None:
        self.ts = self.ts.replace(tzinfo=UTC) if self.ts.tzinfo is None else self.ts.astimezone(UTC)
        if self.last_seen is None:
            self.last_seen = self.ts

    def describe(self) -> str:
        text = f"{self.ts.strftime('%H:%M:%S')} {self.severity:<5} {self.message}"
        if self.count > 1:
            text += f" (x{self.count})"
        return text


class EventBuffer:
    """Keep the most recent events; WARN/ERROR repeats fold into one entry."""

    def __init__(self, *, max_events: int = 50, dedupe_window_seconds: int = 30) -> None:
        self.max_events = max_events
        self.dedupe_window_seconds = dedupe_window_seconds
        self._events: deque[DashboardEvent] = deque(maxlen=max_events)

    def add(
        self,
        *,
        severity: Severity,
        message: str,
        ts: datetime | None = None,
    ) -> DashboardEvent:
        now = ts or datetime.now(UTC)
        now = now.replace(tzinfo=UTC) if now.tzinfo is None else now.astimezone(UTC)

        if severity in {"WARN", "ERROR"} and self._events:
            latest = self._events[-1]
            if (
                latest.severity == severity
                and latest.message == message
                and latest.last_seen is not None
                and (now - latest.last_seen).total_seconds() <= self.dedupe_window_seconds
            ):
                latest.count += 1
                latest.last_seen = now
                return latest

        event = DashboardEvent(ts=now, severity=severity, message=message)
        self._events.append(event)
        return event

    def snapshot(self, *, newest_first: bool = False) -> list[DashboardEvent]:
        """Return a copy of tracked events in display order."""
        items = list(self._events)
        if newest_first:
            items.reverse()
        return items

    def __len__(self) -> int:
        return len(self._events)
