"""Fail-fast invariant checks used at validating boundaries."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any

import numpy as np

__all__ = [
    "InvariantError",
    "assert_valid_date",
    "assert_finite_number",
    "assert_non_negative",
    "assert_period_dates_valid",
    "warn_if",
]

logger = logging.getLogger(__name__)


class InvariantError(ValueError):
    """Raised when input violates an engine invariant."""


def assert_valid_date(value: date | str, context: str) -> date:
    """Return ``value`` as a calendar date, parsing ISO ``YYYY-MM-DD`` strings."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvariantError(f"Invalid date in {context}: {value!r}") from exc
    raise InvariantError(f"Invalid date in {context}: {value!r}")


def assert_finite_number(value: Any, context: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.number)):
        raise InvariantError(f"Expected a number in {context}, got: {value!r}")
    if not np.isfinite(value):
        raise InvariantError(f"Expected a finite number in {context}, got: {value!r}")
    return float(value)


def assert_non_negative(value: Any, context: str) -> float:
    number = assert_finite_number(value, context)
    if number < 0:
        raise InvariantError(f"Expected non-negative number in {context}, got: {value!r}")
    return number


def assert_period_dates_valid(start: date, end: date, context: str) -> None:
    if start > end:
        raise InvariantError(
            f"Period start is after end in {context}: start={start.isoformat()}, end={end.isoformat()}"
        )


def warn_if(condition: bool, message: str, *args: Any) -> bool:
    """Log a budget warning when ``condition`` holds; returns the condition."""

    if condition:
        logger.warning("[Budget Warning] " + message, *args)
    return condition
