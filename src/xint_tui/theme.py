"""Color themes: four style tokens mapped onto rich styles."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rich.style import Style

logger = logging.getLogger("xint_tui")

DEFAULT_THEME = "classic"


@dataclass(frozen=True, slots=True)
class Theme:
    name: str
    accent: Style
    border: Style
    muted: Style
    reset: Style


THEMES: dict[str, Theme] = {
    "classic": Theme(
        name="classic",
        accent=Style(color="cyan", bold=True),
        border=Style(color="blue"),
        muted=Style(color="bright_black"),
        reset=Style.null(),
    ),
    "ocean": Theme(
        name="ocean",
        accent=Style(color="bright_cyan", bold=True),
        border=Style(color="dark_cyan"),
        muted=Style(color="steel_blue"),
        reset=Style.null(),
    ),
    "amber": Theme(
        name="amber",
        accent=Style(color="yellow", bold=True),
        border=Style(color="dark_orange"),
        muted=Style(color="grey50"),
        reset=Style.null(),
    ),
    "mono": Theme(
        name="mono",
        accent=Style(bold=True, reverse=True),
        border=Style(),
        muted=Style(dim=True),
        reset=Style.null(),
    ),
}


def resolve_theme(name: str | None) -> Theme:
    """Look up a theme by name; unknown or empty names fall back to the default."""
    key = (name or "").strip().lower()
    if not key:
        return THEMES[DEFAULT_THEME]
    theme = THEMES.get(key)
    if theme is None:
        logger.warning("Unknown theme %r; using %s.", name, DEFAULT_THEME)
        return THEMES[DEFAULT_THEME]
    return theme
