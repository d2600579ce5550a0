"""Dashboard loop: select an action, collect its argument, run it, show output."""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console

from .actions import ACTIONS, Action, best_match, index_of
from .buffer import OutputBuffer
from .config import Settings
from .controller import InputController, Sentinel, apply_menu_event, resolve_menu_choice
from .event_buffer import Severity
from .exceptions import DashboardError, InputCancelledError
from .keys import KeyEvent, KeyKind, to_menu_event
from .models import SessionState, Tab, UiState
from .plans import ExecutionPlan, build_execution_plan
from .render import render
from .runner import RunResult, run_command
from .sanitize import redact_text
from .theme import resolve_theme

logger = logging.getLogger("xint_tui")

_IGNORED_WHILE_RUNNING = {KeyKind.CONFIRM, KeyKind.FILTER_REQUEST, KeyKind.PALETTE_REQUEST}


def _severity_from_level(level_no: int) -> Severity:
    if level_no >= logging.CRITICAL:
        return "CRITICAL"
    if level_no >= logging.ERROR:
        return "ERROR"
    if level_no >= logging.WARNING:
        return "WARN"
    return "INFO"


class _DashboardLogHandler(logging.Handler):
    """Route logger output into the event feed while the dashboard owns the screen."""

    def __init__(self, dashboard: Dashboard) -> None:
        super().__init__()
        self.dashboard = dashboard

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.dashboard.session.events.add(
                severity=_severity_from_level(record.levelno),
                message=redact_text(record.getMessage()),
            )
        except Exception:
            self.handleError(record)


class Dashboard:
    """Owns UI and session state for one process lifetime."""

    def __init__(
        self,
        *,
        settings: Settings,
        console: Console,
        controller: InputController,
        actions: tuple[Action, ...] = ACTIONS,
        size: tuple[int, int] | None = None,
    ) -> None:
        self.settings = settings
        self.console = console
        self.controller = controller
        self.actions = actions
        self.size = size
        self.theme = resolve_theme(settings.theme)
        self.ui = UiState()
        self.session = SessionState(output=OutputBuffer(settings.output_capacity))
        self._logger: logging.Logger | None = None
        self._original_handlers: list[logging.Handler] = []

    def attach_logger(self, target: logging.Logger) -> None:
        """Replace console handlers with the event-feed handler."""
        self._logger = target
        self._original_handlers = list(target.handlers)
        target.handlers = [_DashboardLogHandler(self)]

    def detach_logger(self) -> None:
        """Restore original logger handlers."""
        if self._logger is None:
            return
        self._logger.handlers = self._original_handlers
        self._logger = None
        self._original_handlers = []

    def refresh(self) -> None:
        render(
            self.console,
            self.ui,
            self.session,
            theme=self.theme,
            actions=self.actions,
            wide_min_columns=self.settings.wide_layout_min_columns,
            size=self.size,
        )

    async def run(self) -> int:
        if not self.controller.interactive:
            return await self.run_plain()

        self.attach_logger(logger)
        logger.info("Dashboard started (theme=%s).", self.theme.name)
        try:
            with self.console.screen(hide_cursor=True), self.controller.raw_mode():
                await self.run_interactive()
        finally:
            self.detach_logger()
        return 0

    async def run_interactive(self) -> None:
        self.refresh()
        while True:
            resolution = await self.controller.select(self.ui, self.refresh)
            if resolution is Sentinel.QUIT:
                return
            if resolution is Sentinel.FILTER:
                await self.edit_filter()
            elif resolution is Sentinel.PALETTE:
                await self.open_palette()
            else:
                await self.execute(resolution)

    async def edit_filter(self) -> None:
        value = await self.controller.capture(
            "Filter", self.ui, self.refresh, initial=self.ui.output_search
        )
        self.ui.output_search = value.strip()
        self.ui.output_offset = 0
        self.ui.tab = Tab.OUTPUT
        self.refresh()

    async def open_palette(self) -> None:
        query = (await self.controller.capture("Palette", self.ui, self.refresh)).strip()
        if query:
            match = best_match(query, self.actions)
            if match is None:
                self.session.last_status = f"palette: no action matches '{query}'"
            else:
                self.ui.active_index = index_of(match.key, self.actions)
                self.ui.tab = Tab.COMMANDS
                self.session.last_status = f"palette: {match.label}"
        self.refresh()

    async def collect_argument(self, action: Action) -> str:
        if action.prompt is None:
            return ""
        field_key = f"{action.key}.{action.prompt.name}"
        value = await self.controller.capture(
            action.prompt.label,
            self.ui,
            self.refresh,
            initial=self.session.last_values.get(field_key, ""),
            abortable=True,
        )
        if value.strip():
            self.session.last_values[field_key] = value.strip()
        return value

    async def execute(self, action_key: str) -> RunResult | None:
        """Prompt, plan and run one action; recoverable failures land in the status line."""
        action = self.actions[index_of(action_key, self.actions)]
        try:
            argument = await self.collect_argument(action)
            plan = build_execution_plan(
                action.key,
                argument,
                base_command=self.settings.command_argv,
                actions=self.actions,
            )
            return await self.run_plan(plan)
        except InputCancelledError:
            self.session.last_status = "cancelled"
            logger.info("%s cancelled before running.", action.label)
            self.refresh()
            return None
        except DashboardError as exc:
            self.session.last_status = f"error: {exc}"
            logger.warning("%s aborted: %s", action.label, exc)
            self.refresh()
            return None

    async def run_plan(self, plan: ExecutionPlan) -> RunResult:
        """Run a plan while still serving navigation keys; the run always completes."""
        self.ui.tab = Tab.OUTPUT
        self.ui.output_offset = 0
        run_task = asyncio.create_task(
            run_command(
                plan.argv,
                self.session,
                self.refresh,
                command_line=plan.command_line,
                spinner_interval=self.settings.spinner_interval_seconds,
            )
        )
        key_task: asyncio.Task[KeyEvent] | None = None
        with self.controller.claim("run"):
            try:
                while not run_task.done():
                    key_task = asyncio.create_task(self.controller.next_event())
                    done, _ = await asyncio.wait(
                        {run_task, key_task}, return_when=asyncio.FIRST_COMPLETED
                    )
                    if key_task in done:
                        self.handle_key_while_running(key_task.result())
                    else:
                        key_task.cancel()
                    key_task = None
            finally:
                if key_task is not None:
                    key_task.cancel()
        return run_task.result()

    def handle_key_while_running(self, event: KeyEvent) -> None:
        event = to_menu_event(event)
        if event.kind in _IGNORED_WHILE_RUNNING:
            return
        if event.kind in (KeyKind.CANCEL, KeyKind.INTERRUPT):
            logger.warning("Command still running; it will finish before input resumes.")
            self.refresh()
            return
        apply_menu_event(event, self.ui, self.actions, scroll_step=self.settings.scroll_step)
        self.refresh()

    async def run_plain(self) -> int:
        """Line-based fallback for stdin that is not an interactive terminal."""
        while True:
            self.print_menu()
            line = await self.controller.read_line("Select option: ", self._write)
            if line is None:
                break
            resolution = resolve_menu_choice(line, self.actions)
            if resolution is Sentinel.QUIT:
                break
            if not isinstance(resolution, str):
                self.console.print("Unknown option.", markup=False)
                continue
            action = self.actions[index_of(resolution, self.actions)]
            try:
                raw = ""
                if action.prompt is not None:
                    raw = await self.controller.read_line(f"{action.prompt.label}: ", self._write) or ""
                plan = build_execution_plan(
                    action.key,
                    raw,
                    base_command=self.settings.command_argv,
                    actions=self.actions,
                )
                result = await run_command(
                    plan.argv,
                    self.session,
                    lambda: None,
                    command_line=plan.command_line,
                    spinner_interval=self.settings.spinner_interval_seconds,
                )
            except DashboardError as exc:
                self.session.last_status = f"error: {exc}"
                logger.warning("%s aborted: %s", action.label, exc)
                self.console.print(f"[tui] {exc}", markup=False, highlight=False)
                continue
            for output_line in result.lines:
                self.console.print(output_line, markup=False, highlight=False)
            self.console.print(f"[tui] {result.status}", markup=False, highlight=False)
        self.console.print("Exiting xint tui.", markup=False)
        return 0

    def print_menu(self) -> None:
        self.console.print("\n=== xint tui ===", markup=False)
        for position, action in enumerate(self.actions, start=1):
            self.console.print(f"{position}) {action.label:<8} {action.hint}", markup=False)
        self.console.print("0) Exit", markup=False)

    def _write(self, text: str) -> None:
        self.console.print(text, end="", markup=False, highlight=False)
