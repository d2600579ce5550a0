"""Typed settings loader for the xint dashboard."""

from __future__ import annotations

import shlex
from typing import Any, Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Dashboard settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    theme: str = Field(default="classic", alias="XINT_TUI_THEME")
    command: str = Field(default="xint", alias="XINT_COMMAND")
    output_capacity: int = Field(default=1200, alias="XINT_TUI_OUTPUT_CAPACITY")
    spinner_interval_ms: int = Field(default=90, alias="XINT_TUI_SPINNER_INTERVAL_MS")
    scroll_step: int = Field(default=10, alias="XINT_TUI_SCROLL_STEP")
    wide_layout_min_columns: int = Field(
        default=110,
        alias="XINT_TUI_WIDE_LAYOUT_MIN_COLUMNS",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="XINT_TUI_LOG_LEVEL",
    )

    @model_validator(mode="after")
    def validate_limits(self) -> Settings:
        """Reject non-positive sizes and an empty command."""
        if not self.command_argv:
            raise ValueError("XINT_COMMAND must not be empty.")
        if self.output_capacity <= 0:
            raise ValueError("XINT_TUI_OUTPUT_CAPACITY must be > 0.")
        if self.spinner_interval_ms <= 0:
            raise ValueError("XINT_TUI_SPINNER_INTERVAL_MS must be > 0.")
        if self.scroll_step <= 0:
            raise ValueError("XINT_TUI_SCROLL_STEP must be > 0.")
        if self.wide_layout_min_columns < 40:
            raise ValueError("XINT_TUI_WIDE_LAYOUT_MIN_COLUMNS must be >= 40.")
        return self

    @property
    def command_argv(self) -> list[str]:
        return shlex.split(self.command)

    @property
    def spinner_interval_seconds(self) -> float:
        return self.spinner_interval_ms / 1000.0

    def safe_summary(self) -> dict[str, Any]:
        """Return settings summary safe for logging."""
        return {
            "theme": self.theme,
            "command": self.command_argv[:1],
            "output_capacity": self.output_capacity,
            "spinner_interval_ms": self.spinner_interval_ms,
            "scroll_step": self.scroll_step,
            "wide_layout_min_columns": self.wide_layout_min_columns,
            "log_level": self.log_level,
        }


def load_settings(**overrides: Any) -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc
