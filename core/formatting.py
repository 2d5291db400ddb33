"""Formatting helpers for PayCycle summaries."""

from __future__ import annotations

from datetime import date
from typing import Optional

from core.models import GoalProjection

__all__ = ["format_currency", "format_date", "describe_goal"]


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_date(value: date) -> str:
    return f"{value:%b} {value.day}, {value.year}"


def _describe_track(label: str, value: Optional[date]) -> str:
    if value is None:
        return f"{label}: Not achievable"
    return f"{label}: {format_date(value)}"


def describe_goal(savings_goal: float, goal: GoalProjection) -> list[str]:
    """Return goal-timeline lines for the three spending scenarios."""

    if savings_goal <= 0:
        return []

    lines = [
        f"Goal: {format_currency(savings_goal)}",
        _describe_track("Before expenses", goal.date_before_expenses),
        _describe_track("After expenses", goal.date_after_expenses),
        _describe_track("After all spending", goal.date_after_baseline),
    ]

    if goal.date_after_baseline is None:
        lines.append("Expenses exceed income")
    elif goal.days_to_goal > 0:
        lines.append(f"{goal.days_to_goal} days ({goal.periods_to_goal} pay periods)")
    else:
        lines.append("Goal already reached!")
    return lines
