"""Turn a catalog action plus its argument into a spawnable command."""

from __future__ import annotations

import shlex
from dataclasses import dataclass

from .actions import ACTIONS, Action
from .exceptions import InputRequiredError, PlanBuildError


@dataclass(frozen=True, slots=True)
class ExecutionPlan:
    command_line: str
    argv: list[str]


def resolve_argument(action: Action, raw: str) -> str:
    """Clean a prompt value and enforce the field's required flag."""
    if action.prompt is None:
        return ""
    value = action.prompt.clean(raw)
    if action.prompt.required and not value:
        raise InputRequiredError(action.prompt.label.split(" (")[0])
    return value


def build_execution_plan(
    action_key: str,
    argument: str,
    *,
    base_command: list[str],
    actions: tuple[Action, ...] = ACTIONS,
) -> ExecutionPlan:
    if not base_command:
        raise PlanBuildError("no base command configured")
    action = next((item for item in actions if item.key == action_key), None)
    if action is None:
        raise PlanBuildError(f"unknown action '{action_key}'")

    value = resolve_argument(action, argument)
    if action.key == "help":
        tail = ["--help"]
    elif value:
        tail = [action.key, value]
    else:
        tail = [action.key]

    argv = [*base_command, *tail]
    return ExecutionPlan(command_line=shlex.join(argv), argv=argv)
