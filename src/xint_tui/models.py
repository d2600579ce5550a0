"""Typed state models shared by the controller, runner and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .buffer import OutputBuffer
from .event_buffer import EventBuffer


class Tab(str, Enum):
    COMMANDS = "commands"
    OUTPUT = "output"
    HELP = "help"

    def next(self) -> Tab:
        order = list(Tab)
        return order[(order.index(self) + 1) % len(order)]


class RunPhase(str, Enum):
    IDLE = "idle"
    INPUT = "input"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


@dataclass(slots=True)
class InlinePrompt:
    """Transient text capture shown with a cursor in the status line."""

    label: str
    value: str = ""
    cancelled: bool = False


@dataclass(slots=True)
class UiState:
    """Navigation and view state mutated only by the input controller."""

    active_index: int = 0
    tab: Tab = Tab.COMMANDS
    output_offset: int = 0
    output_search: str = ""
    show_stderr: bool = False
    inline_prompt: InlinePrompt | None = None


@dataclass(slots=True)
class SessionState:
    """Per-session run history: last values, last command, status and output."""

    output: OutputBuffer = field(default_factory=OutputBuffer)
    events: EventBuffer = field(default_factory=EventBuffer)
    last_values: dict[str, str] = field(default_factory=dict)
    last_command: str = ""
    last_status: str = "idle"

    @property
    def output_lines(self) -> list[str]:
        return self.output.snapshot()


def derive_phase(ui: UiState, session: SessionState) -> RunPhase:
    """Compute the status badge from prompt presence and the status prefix."""
    if ui.inline_prompt is not None:
        return RunPhase.INPUT
    status = session.last_status
    if status.startswith("running"):
        return RunPhase.RUNNING
    if status.startswith("success"):
        return RunPhase.DONE
    if status.startswith(("error", "failed")):
        return RunPhase.ERROR
    return RunPhase.IDLE

