"""Tests for building command lines from actions."""

from __future__ import annotations

import pytest

from xint_tui.exceptions import InputRequiredError, PlanBuildError
from xint_tui.plans import build_execution_plan

BASE = ["xint"]


def test_search_plan_appends_query_as_single_argument() -> None:
    plan = build_execution_plan("search", "  AI agents ", base_command=BASE)
    assert plan.argv == ["xint", "search", "AI agents"]
    assert plan.command_line == "xint search 'AI agents'"


def test_optional_location_may_be_blank() -> None:
    assert build_execution_plan("trends", "", base_command=BASE).argv == ["xint", "trends"]
    assert build_execution_plan("trends", "Berlin", base_command=BASE).argv == [
        "xint",
        "trends",
        "Berlin",
    ]


def test_profile_strips_leading_at_sign() -> None:
    plan = build_execution_plan("profile", "@jack", base_command=BASE)
    assert plan.argv == ["xint", "profile", "jack"]


def test_help_runs_usage_without_prompt() -> None:
    plan = build_execution_plan("help", "ignored", base_command=["bun", "xint.ts"])
    assert plan.argv == ["bun", "xint.ts", "--help"]


def test_required_fields_raise_labeled_error() -> None:
    with pytest.raises(InputRequiredError, match="Tweet ID or URL is required."):
        build_execution_plan("thread", "   ", base_command=BASE)
    with pytest.raises(InputRequiredError, match="Username is required."):
        build_execution_plan("profile", "@", base_command=BASE)


def test_unknown_action_and_empty_base_command_fail() -> None:
    with pytest.raises(PlanBuildError):
        build_execution_plan("bookmarks", "x", base_command=BASE)
    with pytest.raises(PlanBuildError):
        build_execution_plan("search", "x", base_command=[])
