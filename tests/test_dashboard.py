"""End-to-end tests for the dashboard loop in interactive and fallback modes."""

from __future__ import annotations

import asyncio
import io
import logging
import shlex
import sys
from pathlib import Path
from typing import Any

from rich.console import Console

from xint_tui.buffer import STDERR_TAG
from xint_tui.config import Settings
from xint_tui.controller import InputController
from xint_tui.dashboard import Dashboard
from xint_tui.models import Tab
from xint_tui.render import frame_text

_FAKE_XINT = """\
import sys
import time

args = sys.argv[1:]
if args and args[0] == "slow":
    time.sleep(0.3)
print("ran " + " ".join(args), flush=True)
print("second line", flush=True)
print("quota: 3 reads left", file=sys.stderr, flush=True)
sys.exit(4 if args and args[0] == "article" else 0)
"""


def _settings(monkeypatch: Any, tmp_path: Path) -> Settings:
    monkeypatch.chdir(tmp_path)
    script = tmp_path / "fake_xint.py"
    script.write_text(_FAKE_XINT, encoding="utf-8")
    return Settings(command=shlex.join([sys.executable, str(script)]), theme="mono")


def _dashboard(settings: Settings, stdin: io.StringIO | None = None, *, interactive: bool = True) -> Dashboard:
    controller = InputController(stdin=stdin or io.StringIO(), interactive=interactive)
    console = Console(file=io.StringIO(), width=120)
    return Dashboard(settings=settings, console=console, controller=controller, size=(120, 32))


async def _wait_for_status(dashboard: Dashboard, prefix: str) -> None:
    for _ in range(500):
        if dashboard.session.last_status.startswith(prefix):
            return
        await asyncio.sleep(0.01)
    raise AssertionError(f"status never reached {prefix!r}: {dashboard.session.last_status}")


def test_search_scenario_runs_and_shows_stdout_by_default(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))

    async def scenario() -> None:
        dashboard.controller.feed_text("\rAI agents\r")
        loop_task = asyncio.create_task(dashboard.run_interactive())
        await _wait_for_status(dashboard, "success")
        dashboard.controller.feed_text("q")
        await asyncio.wait_for(loop_task, timeout=5)

    asyncio.run(scenario())
    session = dashboard.session
    assert session.last_status == "success"
    assert sorted(session.output_lines) == sorted(
        ["ran search AI agents", "second line", f"{STDERR_TAG}quota: 3 reads left"]
    )
    assert session.last_values == {"search.query": "AI agents"}
    assert "'AI agents'" in session.last_command
    assert dashboard.ui.tab is Tab.OUTPUT

    frame = "\n".join(frame_text(dashboard.ui, session, 120, 32))
    assert "ran search AI agents" in frame
    assert "second line" in frame
    assert "quota: 3 reads left" not in frame


def test_stream_toggle_after_run_shows_only_stderr(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))

    async def scenario() -> None:
        dashboard.controller.feed_text("\rAI\r")
        loop_task = asyncio.create_task(dashboard.run_interactive())
        await _wait_for_status(dashboard, "success")
        dashboard.controller.feed_text("eq")
        await asyncio.wait_for(loop_task, timeout=5)

    asyncio.run(scenario())
    assert dashboard.ui.show_stderr is True
    assert dashboard.ui.output_offset == 0
    frame = "\n".join(frame_text(dashboard.ui, dashboard.session, 120, 32))
    assert "stream: stderr (1)" in frame
    assert "quota: 3 reads left" in frame
    assert "second line" not in frame


def test_blank_required_prompt_sets_error_status(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))
    dashboard.controller.feed_text("\r\rq")
    asyncio.run(asyncio.wait_for(dashboard.run_interactive(), timeout=5))
    assert dashboard.session.last_status == "error: Search query is required."
    assert dashboard.session.output_lines == []


def test_escape_on_optional_prompt_cancels_without_running(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))
    dashboard.controller.feed_text("j\ruk\x1bq")
    asyncio.run(asyncio.wait_for(dashboard.run_interactive(), timeout=5))
    assert dashboard.session.last_status == "cancelled"
    assert dashboard.session.last_command == ""
    assert dashboard.session.output_lines == []
    assert dashboard.session.last_values == {}


def test_non_zero_exit_is_reported_not_raised(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))

    async def scenario() -> None:
        dashboard.controller.feed_text("jjjj\rhttps://example.com/a\r")
        loop_task = asyncio.create_task(dashboard.run_interactive())
        await _wait_for_status(dashboard, "failed")
        dashboard.controller.feed_text("q")
        await asyncio.wait_for(loop_task, timeout=5)

    asyncio.run(scenario())
    assert dashboard.session.last_status == "failed (exit 4)"
    assert dashboard.session.output_lines[-1] == f"{STDERR_TAG}[tui] command failed with exit code 4"


def test_interrupt_during_run_lets_command_finish(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(monkeypatch, tmp_path)
    settings.command = shlex.join([*settings.command_argv, "slow"])
    dashboard = _dashboard(settings)
    target = logging.getLogger("xint_tui")
    dashboard.attach_logger(target)

    async def scenario() -> None:
        dashboard.controller.feed_text("jj\r@jack\r\x03")
        loop_task = asyncio.create_task(dashboard.run_interactive())
        await _wait_for_status(dashboard, "success")
        dashboard.controller.feed_text("q")
        await asyncio.wait_for(loop_task, timeout=5)

    try:
        asyncio.run(scenario())
    finally:
        dashboard.detach_logger()
    assert dashboard.session.last_status == "success"
    assert "ran slow profile jack" in dashboard.session.output_lines
    messages = [event.message for event in dashboard.session.events.snapshot()]
    assert any("still running" in message for message in messages)


def test_palette_jumps_to_best_match(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))
    dashboard.controller.feed_text("pthr\rq")
    asyncio.run(asyncio.wait_for(dashboard.run_interactive(), timeout=5))
    assert dashboard.ui.active_index == 3
    assert dashboard.ui.tab is Tab.COMMANDS
    assert dashboard.session.last_status == "palette: Thread"


def test_filter_request_sets_search_and_resets_offset(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))
    dashboard.ui.output_offset = 7
    dashboard.controller.feed_text("/agent\rq")
    asyncio.run(asyncio.wait_for(dashboard.run_interactive(), timeout=5))
    assert dashboard.ui.output_search == "agent"
    assert dashboard.ui.output_offset == 0
    assert dashboard.ui.tab is Tab.OUTPUT


def test_log_handler_routes_into_event_feed_and_detaches(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path))
    target = logging.getLogger("xint_tui.test_feed")
    original = list(target.handlers)
    dashboard.attach_logger(target)
    target.warning("Upstream said token=abc123")
    target.warning("Upstream said token=abc123")
    dashboard.detach_logger()
    events = dashboard.session.events.snapshot()
    assert len(events) == 1
    assert events[0].count == 2
    assert "abc123" not in events[0].message
    assert target.handlers == original


def test_plain_mode_runs_numbered_choice(monkeypatch: Any, tmp_path: Path) -> None:
    settings = _settings(monkeypatch, tmp_path)
    dashboard = _dashboard(settings, io.StringIO("9\n1\nAI agents\n4\n\n0\n"), interactive=False)
    exit_code = asyncio.run(dashboard.run())
    output = dashboard.console.file.getvalue()
    assert exit_code == 0
    assert "=== xint tui ===" in output
    assert "Unknown option." in output
    assert "ran search AI agents" in output
    assert f"{STDERR_TAG}quota: 3 reads left" in output
    assert "[tui] success" in output
    assert "[tui] Tweet ID or URL is required." in output
    assert "Exiting xint tui." in output


def test_plain_mode_stops_at_end_of_input(monkeypatch: Any, tmp_path: Path) -> None:
    dashboard = _dashboard(_settings(monkeypatch, tmp_path), io.StringIO(""), interactive=False)
    assert asyncio.run(dashboard.run()) == 0
    assert "Exiting xint tui." in dashboard.console.file.getvalue()
