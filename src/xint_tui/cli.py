"""Command-line entry point for the interactive xint dashboard."""

from __future__ import annotations

import argparse
import asyncio
import sys

from rich.console import Console

from .config import load_settings
from .controller import InputController
from .dashboard import Dashboard
from .exceptions import ConfigError
from .log_setup import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Drive the xint command line from a live terminal dashboard."
    )
    parser.add_argument(
        "--plain",
        action="store_true",
        help="Use line-based prompts even when stdin is a terminal.",
    )
    parser.add_argument(
        "--command",
        default=None,
        help="Override XINT_COMMAND, the command that actions are appended to.",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help="Override XINT_TUI_THEME (classic, ocean, amber, mono).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Run the dashboard until the operator quits."""
    args = parse_args(argv)
    logger = setup_logger()

    overrides: dict[str, str] = {}
    if args.command:
        overrides["command"] = args.command
    if args.theme:
        overrides["theme"] = args.theme
    try:
        settings = load_settings(**overrides)
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    logger.setLevel(settings.log_level)
    logger.debug("Settings: %s", settings.safe_summary())

    controller = InputController(
        interactive=False if args.plain else None,
        scroll_step=settings.scroll_step,
    )
    dashboard = Dashboard(
        settings=settings,
        console=Console(highlight=False),
        controller=controller,
    )
    try:
        return asyncio.run(dashboard.run())
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
