"""Calendar and recurrence primitives shared by the schedule generators.

All arithmetic is done on whole calendar days (``datetime.date``); there is
no time-of-day component anywhere in period boundary calculations.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Final

from core.models import ExpenseFrequency, PayFrequency, WeekendHandling

__all__ = [
    "FREQ_TO_MONTHLY",
    "adjust_for_weekend",
    "last_day_of_month",
    "clamp_day_to_month",
    "add_months",
    "advance_by_frequency",
    "first_occurrence_on_or_after",
]

Frequency = PayFrequency | ExpenseFrequency

# Occurrences per month for each frequency.
FREQ_TO_MONTHLY: Final[dict[str, float]] = {
    "weekly": 52 / 12,
    "biweekly": 26 / 12,
    "semimonthly": 2.0,
    "monthly": 1.0,
    "quarterly": 1 / 3,
    "yearly": 1 / 12,
}

_DAY_STEPS: Final[dict[str, int]] = {"weekly": 7, "biweekly": 14}
_MONTH_STEPS: Final[dict[str, int]] = {"monthly": 1, "quarterly": 3, "yearly": 12}

_SATURDAY: Final[int] = 5
_SUNDAY: Final[int] = 6


def _key(frequency: Frequency | str) -> str:
    return frequency.value if isinstance(frequency, (PayFrequency, ExpenseFrequency)) else str(frequency)


def adjust_for_weekend(day: date, handling: WeekendHandling | str) -> date:
    """Shift a Saturday/Sunday date to Friday (``before``) or Monday (``after``)."""

    handling = WeekendHandling(handling)
    if handling is WeekendHandling.NONE:
        return day

    weekday = day.weekday()
    if weekday == _SUNDAY:
        return day - timedelta(days=2) if handling is WeekendHandling.BEFORE else day + timedelta(days=1)
    if weekday == _SATURDAY:
        return day - timedelta(days=1) if handling is WeekendHandling.BEFORE else day + timedelta(days=2)
    return day


def last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def clamp_day_to_month(year: int, month: int, day: int) -> date:
    """Return ``day`` in the given month, clamped to the month's last day."""

    return date(year, month, max(1, min(day, last_day_of_month(year, month))))


def add_months(day: date, months: int, day_of_month: int | None = None) -> date:
    """Move ``months`` calendar months forward and re-clamp to ``day_of_month``."""

    total = day.year * 12 + (day.month - 1) + months
    year, month = divmod(total, 12)
    return clamp_day_to_month(year, month + 1, day_of_month if day_of_month is not None else day.day)


def advance_by_frequency(day: date, frequency: Frequency | str, original_day_of_month: int) -> date:
    """Return the next occurrence after ``day``.

    Month-based frequencies re-clamp to ``original_day_of_month`` rather than to
    the day of the (possibly clamped) previous occurrence, so a schedule on the
    31st returns to the 31st after passing through a 30-day month or February.
    """

    key = _key(frequency)
    if key in _DAY_STEPS:
        return day + timedelta(days=_DAY_STEPS[key])
    if key in _MONTH_STEPS:
        return add_months(day, _MONTH_STEPS[key], original_day_of_month)
    raise ValueError(f"Unsupported recurrence frequency: {frequency!r}")


def first_occurrence_on_or_after(
    anchor: date,
    frequency: Frequency | str,
    original_day_of_month: int,
    target: date,
) -> date:
    """Step forward from ``anchor`` until the occurrence is on or after ``target``."""

    current = anchor
    while current < target:
        current = advance_by_frequency(current, frequency, original_day_of_month)
    return current
