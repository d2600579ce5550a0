"""Helpers for cleaning subprocess output and redacting secrets from display text."""

from __future__ import annotations

import re

REDACTED = "[REDACTED]"

# CSI (colors, cursor moves), OSC (window titles, hyperlinks) and lone ESC pairs.
_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_OSC_RE = re.compile(r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\|$)")
_ESC_PAIR_RE = re.compile(r"\x1b[@-Z\\-_]")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f-\x9f]")

_AUTH_TOKEN_INLINE_RE = re.compile(
    r"(?i)\b(bearer)\s+[A-Za-z0-9\-._~+/]+=*",
)
_KEY_VALUE_SECRET_RE = re.compile(
    r"""(?ix)
    (--?)?
    \b
    (
      authorization|
      access[_-]?token|
      token|
      secret|
      password|
      api[_-]?key|
      bearer
    )
    (\s*[:=]\s*)
    ([^\s,;]+)
    """
)


def sanitize_output_line(line: str) -> str:
    """Strip terminal escape sequences, control characters and carriage returns."""
    cleaned = _OSC_RE.sub("", line)
    cleaned = _CSI_RE.sub("", cleaned)
    cleaned = _ESC_PAIR_RE.sub("", cleaned)
    cleaned = cleaned.replace("\t", "    ")
    return _CONTROL_RE.sub("", cleaned)


def redact_text(text: str) -> str:
    """Redact credentials embedded in command lines and log messages."""
    redacted = _AUTH_TOKEN_INLINE_RE.sub(r"\1 " + REDACTED, text)
    return _KEY_VALUE_SECRET_RE.sub(
        lambda m: f"{m.group(1) or ''}{m.group(2)}{m.group(3)}{REDACTED}",
        redacted,
    )
