"""Spawn a command and stream both of its pipes into the session buffer."""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import shlex
import time
from collections.abc import Callable
from dataclasses import dataclass

from .buffer import OutputBuffer, Stream
from .exceptions import RunnerError
from .models import SessionState
from .sanitize import redact_text, sanitize_output_line

logger = logging.getLogger("xint_tui")

SPINNER_FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"
DEFAULT_SPINNER_INTERVAL = 0.09
READ_CHUNK_BYTES = 4096


@dataclass(slots=True)
class RunResult:
    status: str
    exit_code: int
    lines: list[str]

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def spinner_status(elapsed: float, interval: float = DEFAULT_SPINNER_INTERVAL) -> str:
    """Status text for a run in progress; the glyph is derived from elapsed time."""
    frame = SPINNER_FRAMES[int(elapsed / interval) % len(SPINNER_FRAMES)]
    return f"running {frame} {elapsed:.1f}s"


def final_status(exit_code: int) -> str:
    return "success" if exit_code == 0 else f"failed (exit {exit_code})"


async def run_command(
    argv: list[str],
    session: SessionState,
    on_update: Callable[[], None],
    *,
    command_line: str | None = None,
    spinner_interval: float = DEFAULT_SPINNER_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
) -> RunResult:
    """Run ``argv`` to completion, streaming output into ``session.output``.

    ``on_update`` is called after every appended line and every spinner tick.
    There is no cancellation path: the child always runs until it exits.
    """
    if not argv:
        raise RunnerError("empty command")

    session.output.reset()
    session.last_command = redact_text(command_line or shlex.join(argv))
    started = clock()
    session.last_status = spinner_status(0.0, spinner_interval)
    on_update()

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise RunnerError(f"could not start {argv[0]}: {exc.strerror or exc}") from exc

    assert process.stdout is not None and process.stderr is not None
    logger.info("Started %s (pid %s).", session.last_command, process.pid)
    spinner = asyncio.create_task(
        _spin(session, on_update, started=started, interval=spinner_interval, clock=clock)
    )
    try:
        await asyncio.gather(
            _drain(process.stdout, "stdout", session.output, on_update),
            _drain(process.stderr, "stderr", session.output, on_update),
        )
        exit_code = await process.wait()
    finally:
        spinner.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await spinner

    if exit_code != 0:
        session.output.append(f"[tui] command failed with exit code {exit_code}", stream="stderr")
    session.last_status = final_status(exit_code)
    logger.info(
        "Finished %s: %s after %.1fs.",
        session.last_command,
        session.last_status,
        clock() - started,
    )
    on_update()
    return RunResult(status=session.last_status, exit_code=exit_code, lines=session.output.snapshot())


async def _spin(
    session: SessionState,
    on_update: Callable[[], None],
    *,
    started: float,
    interval: float,
    clock: Callable[[], float],
) -> None:
    while True:
        await asyncio.sleep(interval)
        session.last_status = spinner_status(clock() - started, interval)
        on_update()


async def _drain(
    stream: asyncio.StreamReader,
    kind: Stream,
    buffer: OutputBuffer,
    on_update: Callable[[], None],
) -> None:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    pending = ""
    while True:
        chunk = await stream.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        pending += decoder.decode(chunk)
        *complete, pending = pending.split("\n")
        for line in complete:
            buffer.append(sanitize_output_line(line), stream=kind)
        if complete:
            on_update()
    pending += decoder.decode(b"", final=True)
    if pending:
        buffer.append(sanitize_output_line(pending), stream=kind)
        on_update()
