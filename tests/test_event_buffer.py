"""Tests for the dashboard event feed."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from xint_tui.event_buffer import EventBuffer


def test_repeated_warnings_collapse_within_window() -> None:
    buffer = EventBuffer(max_events=10, dedupe_window_seconds=30)
    start = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
    buffer.add(severity="WARN", message="Command still running", ts=start)
    buffer.add(severity="WARN", message="Command still running", ts=start + timedelta(seconds=5))
    events = buffer.snapshot()
    assert len(events) == 1
    assert events[0].count == 2
    assert events[0].describe().endswith("(x2)")


def test_repeats_after_window_start_new_entry() -> None:
    buffer = EventBuffer(max_events=10, dedupe_window_seconds=5)
    start = datetime(2026, 10, 18, 12, 0, tzinfo=UTC)
    buffer.add(severity="ERROR", message="boom", ts=start)
    buffer.add(severity="ERROR", message="boom", ts=start + timedelta(seconds=6))
    assert [event.count for event in buffer.snapshot()] == [1, 1]


def test_info_events_are_never_collapsed_and_feed_is_bounded() -> None:
    buffer = EventBuffer(max_events=3)
    for index in range(5):
        buffer.add(severity="INFO", message="tick")
        buffer.add(severity="INFO", message=f"event {index}")
    assert len(buffer) == 3
    assert buffer.snapshot(newest_first=True)[0].message == "event 4"


def test_naive_timestamps_are_treated_as_utc() -> None:
    buffer = EventBuffer()
    event = buffer.add(severity="INFO", message="x", ts=datetime(2026, 10, 18, 9, 30))
    assert event.ts.tzinfo is UTC
    assert event.describe().startswith("09:30:00 INFO")
