"""Full-frame layout engine: state plus terminal size in, fixed-width lines out."""

from __future__ import annotations

import os

from rich.cells import cell_len, set_cell_size
from rich.console import Console
from rich.control import Control
from rich.style import Style
from rich.text import Text

from .actions import ACTIONS, Action
from .buffer import stream_lines, visible_lines
from .models import RunPhase, SessionState, Tab, UiState, derive_phase
from .theme import Theme, resolve_theme

DEFAULT_SIZE = (120, 32)
WIDE_LAYOUT_MIN_COLUMNS = 110
MIN_COLUMNS = 24
MIN_ROWS = 8
CHROME_ROWS = 7
CURSOR = "▌"
ELLIPSIS = "…"

Segment = tuple[str, Style | None]

_TAB_TITLES = ((Tab.COMMANDS, "1 Commands"), (Tab.OUTPUT, "2 Output"), (Tab.HELP, "3 Help"))

MENU_LEGEND = (
    "↑/↓ move  ⏎ run  tab switch  1-3 tabs  pgup/pgdn scroll  "
    "/ filter  p palette  e stderr  ? help  q quit"
)
INPUT_LEGEND = "type to edit  ⏎ confirm  esc cancel  ⌫ delete"


def fit(text: str, width: int) -> str:
    """Exactly ``width`` cells: truncate with an ellipsis or pad with spaces."""
    if width <= 0:
        return ""
    if cell_len(text) > width:
        return set_cell_size(text, width - 1) + ELLIPSIS
    return set_cell_size(text, width)


def _compose(segments: list[Segment], width: int) -> Text:
    text = Text(fit("".join(part for part, _ in segments), width))
    position = 0
    for part, style in segments:
        if style is not None and part:
            text.stylize(style, position, position + len(part))
        position += len(part)
    return text


def terminal_size(console: Console | None = None) -> tuple[int, int]:
    """Current (columns, rows), or 120x32 when no terminal is attached."""
    try:
        stream = console.file if console is not None else None
        fd = stream.fileno() if stream is not None else 1
        size = os.get_terminal_size(fd)
    except (AttributeError, OSError, ValueError):
        return DEFAULT_SIZE
    if size.columns <= 0 or size.lines <= 0:
        return DEFAULT_SIZE
    return size.columns, size.lines


def commands_pane(ui: UiState, actions: tuple[Action, ...], theme: Theme) -> list[list[Segment]]:
    rows: list[list[Segment]] = []
    for index, action in enumerate(actions):
        active = index == ui.active_index
        marker = "›" if active else " "
        label = f"{marker} {index + 1}. {action.label:<8}"
        if active:
            rows.append([(label, theme.accent), (f" {action.hint}", None)])
        else:
            rows.append([(label, None), (f" {action.hint}", theme.muted)])

    current = actions[ui.active_index]
    rows.append([("", None)])
    rows.append([(current.label, theme.accent)])
    rows.append([(current.summary, None)])
    rows.append([("usage: ", theme.muted), (current.example, None)])
    rows.append([("cost:  ", theme.muted), (current.cost_hint or "-", None)])
    if current.aliases:
        rows.append([("alias: ", theme.muted), (", ".join(sorted(current.aliases)), None)])
    return rows


def output_pane(
    ui: UiState,
    session: SessionState,
    height: int,
    theme: Theme,
) -> tuple[list[list[Segment]], str]:
    """Output tab rows plus the view descriptor; clamps ``ui.output_offset``."""
    stream = "stderr" if ui.show_stderr else "stdout"
    selected = stream_lines(session.output_lines, show_stderr=ui.show_stderr)
    header: list[list[Segment]] = [
        [("$ ", theme.muted), (session.last_command or "-", None)],
        [
            (f"stream: {stream} ({len(selected)})", theme.accent),
            (f"  filter: {ui.output_search}" if ui.output_search else "", theme.muted),
        ],
    ]
    viewport = visible_lines(
        selected,
        ui.output_search,
        ui.output_offset,
        max(0, height - len(header)),
    )
    ui.output_offset = viewport.offset
    rows = header + [[(line, None)] for line in viewport.lines]
    if not viewport.total:
        rows.append([("(no output)" if not ui.output_search else "(no matches)", theme.muted)])
    return rows, viewport.describe()


def help_pane(session: SessionState, theme: Theme) -> list[list[Segment]]:
    rows: list[list[Segment]] = [
        [("Keys", theme.accent)],
        [("up/down or k/j   move through actions", None)],
        [("enter            run the selected action", None)],
        [("tab / 1 2 3      switch tabs", None)],
        [("pgup / pgdn      scroll output history", None)],
        [("/                filter output (case-insensitive)", None)],
        [("p or :           palette: jump to an action by name", None)],
        [("e                toggle stdout / stderr view", None)],
        [("q / esc          quit", None)],
        [("", None)],
        [(f"theme: {theme.name}", theme.muted)],
        [("", None)],
        [("Recent events", theme.accent)],
    ]
    events = session.events.snapshot(newest_first=True)
    if not events:
        rows.append([("none yet", theme.muted)])
    for event in events:
        style = theme.accent if event.severity in {"ERROR", "CRITICAL"} else None
        rows.append([(event.describe(), style)])
    return rows


def status_segments(
    ui: UiState,
    session: SessionState,
    theme: Theme,
    view: str | None,
) -> list[Segment]:
    phase = derive_phase(ui, session)
    badge = (f"[{phase.name}] ", theme.accent if phase is not RunPhase.IDLE else theme.muted)
    if ui.inline_prompt is not None:
        return [badge, (f"{ui.inline_prompt.label}: {ui.inline_prompt.value}{CURSOR}", None)]
    segments: list[Segment] = [badge, (session.last_status, None)]
    if view:
        segments.append((f"  {view}", theme.muted))
    if session.last_command:
        segments.append((f"  {session.last_command}", theme.muted))
    return segments


def header_segments(ui: UiState, theme: Theme) -> list[Segment]:
    segments: list[Segment] = [("xint dashboard", theme.accent), ("  ", None)]
    for tab, title in _TAB_TITLES:
        if tab is ui.tab:
            segments.append((f"[{title}]", theme.accent))
        else:
            segments.append((f" {title} ", theme.muted))
        segments.append((" ", None))
    return segments


def build_frame(
    ui: UiState,
    session: SessionState,
    columns: int,
    rows: int,
    *,
    theme: Theme | None = None,
    actions: tuple[Action, ...] = ACTIONS,
    wide_min_columns: int = WIDE_LAYOUT_MIN_COLUMNS,
) -> list[Text]:
    """Lay out one frame of exactly ``rows`` lines, each ``columns`` cells wide."""
    theme = theme or resolve_theme(None)
    columns = max(columns, MIN_COLUMNS)
    rows = max(rows, MIN_ROWS)
    inner = columns - 4
    body_height = rows - CHROME_ROWS

    def border(left: str, right: str) -> Text:
        return Text(left + "─" * (columns - 2) + right, style=theme.border)

    def framed(*cells: Text) -> Text:
        line = Text("│ ", style=theme.border)
        for position, cell in enumerate(cells):
            if position:
                line.append(" │ ", style=theme.border)
            line.append_text(cell)
        line.append(" │", style=theme.border)
        return line

    view: str | None = None
    body: list[Text] = []
    if columns >= wide_min_columns:
        left_width = max(32, inner * 2 // 5)
        right_width = inner - left_width - 3
        left = commands_pane(ui, actions, theme)
        if ui.tab is Tab.HELP:
            right = help_pane(session, theme)
        else:
            right, view = output_pane(ui, session, body_height, theme)
        for index in range(body_height):
            body.append(
                framed(
                    _compose(left[index] if index < len(left) else [], left_width),
                    _compose(right[index] if index < len(right) else [], right_width),
                )
            )
    else:
        if ui.tab is Tab.OUTPUT:
            content, view = output_pane(ui, session, body_height, theme)
        elif ui.tab is Tab.HELP:
            content = help_pane(session, theme)
        else:
            content = commands_pane(ui, actions, theme)
        for index in range(body_height):
            body.append(framed(_compose(content[index] if index < len(content) else [], inner)))

    legend = INPUT_LEGEND if ui.inline_prompt is not None else MENU_LEGEND
    return [
        border("╭", "╮"),
        framed(_compose(header_segments(ui, theme), inner)),
        border("├", "┤"),
        *body,
        border("├", "┤"),
        framed(_compose(status_segments(ui, session, theme, view), inner)),
        framed(_compose([(legend, theme.muted)], inner)),
        border("╰", "╯"),
    ]


def frame_text(ui: UiState, session: SessionState, columns: int, rows: int, **kwargs) -> list[str]:
    """Plain-text form of :func:`build_frame`."""
    return [line.plain for line in build_frame(ui, session, columns, rows, **kwargs)]


def render(
    console: Console,
    ui: UiState,
    session: SessionState,
    *,
    theme: Theme,
    actions: tuple[Action, ...] = ACTIONS,
    wide_min_columns: int = WIDE_LAYOUT_MIN_COLUMNS,
    size: tuple[int, int] | None = None,
) -> None:
    """Clear the screen and write a full frame."""
    columns, rows = size or terminal_size(console)
    lines = build_frame(
        ui,
        session,
        columns,
        rows,
        theme=theme,
        actions=actions,
        wide_min_columns=wide_min_columns,
    )
    console.control(Control.home(), Control.clear())
    console.print(
        Text("\n").join(lines),
        width=max(columns, MIN_COLUMNS),
        no_wrap=True,
        overflow="crop",
        crop=True,
        end="",
        highlight=False,
    )
