"""Paycheck calendar generation for the four supported pay frequencies."""

from __future__ import annotations

from datetime import date, timedelta

from analytics.dates import adjust_for_weekend, advance_by_frequency, clamp_day_to_month
from core.models import BudgetConfig, MonthlyConfig, PayFrequency, SemiMonthlyConfig, WeekendHandling

__all__ = [
    "semimonthly_pay_days",
    "monthly_pay_day",
    "generate_pay_dates",
    "next_pay_date_on_or_after",
]


def semimonthly_pay_days(
    year: int,
    month: int,
    config: SemiMonthlyConfig,
    weekend_handling: WeekendHandling | str,
) -> list[date]:
    """Return both weekend-adjusted pay days of a month, earliest first."""

    days = [
        adjust_for_weekend(clamp_day_to_month(year, month, config.first_pay_day), weekend_handling),
        adjust_for_weekend(clamp_day_to_month(year, month, config.second_pay_day), weekend_handling),
    ]
    return sorted(days)


def monthly_pay_day(
    year: int,
    month: int,
    config: MonthlyConfig,
    weekend_handling: WeekendHandling | str,
) -> date:
    return adjust_for_weekend(clamp_day_to_month(year, month, config.pay_day), weekend_handling)


def _month_pay_days(config: BudgetConfig, year: int, month: int) -> list[date]:
    if config.paycheck_frequency is PayFrequency.SEMIMONTHLY:
        return semimonthly_pay_days(year, month, config.semi_monthly_config, config.weekend_handling)
    return [monthly_pay_day(year, month, config.monthly_config, config.weekend_handling)]


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def generate_pay_dates(config: BudgetConfig, max_count: int) -> list[date]:
    """Return the next ``max_count`` pay dates, all on or after ``next_pay_date``.

    Weekly and biweekly schedules step a fixed interval from ``next_pay_date``;
    only the emitted dates are weekend-adjusted, never the stepping anchor.
    Semi-monthly and monthly schedules walk calendar months using the
    configured days of month.
    """

    if max_count <= 0:
        return []

    start = config.next_pay_date
    frequency = config.paycheck_frequency

    if frequency in (PayFrequency.WEEKLY, PayFrequency.BIWEEKLY):
        dates: list[date] = []
        current = start
        while len(dates) < max_count:
            adjusted = adjust_for_weekend(current, config.weekend_handling)
            # A Saturday anchor with "before" handling would land ahead of the anchor.
            if adjusted >= start:
                dates.append(adjusted)
            current = advance_by_frequency(current, frequency, current.day)
        return dates

    candidates: list[date] = []
    year, month = start.year, start.month
    while len(candidates) < max_count:
        candidates.extend(day for day in _month_pay_days(config, year, month) if day >= start)
        year, month = _next_month(year, month)
    # One month of lookahead: an "after" shift can push a month's last pay day
    # past the first pay day of the following month.
    candidates.extend(day for day in _month_pay_days(config, year, month) if day >= start)
    return sorted(candidates)[:max_count]


def next_pay_date_on_or_after(config: BudgetConfig, target: date, months_ahead: int = 3) -> date | None:
    """Return the first scheduled pay date on or after ``target``.

    Fixed-interval schedules step from ``next_pay_date``; calendar schedules
    scan up to ``months_ahead`` months starting with ``target``'s month.
    """

    if config.paycheck_frequency in (PayFrequency.WEEKLY, PayFrequency.BIWEEKLY):
        interval = timedelta(days=7 if config.paycheck_frequency is PayFrequency.WEEKLY else 14)
        current = config.next_pay_date
        while current < target:
            current += interval
        return current

    year, month = target.year, target.month
    for _ in range(months_ahead):
        for day in _month_pay_days(config, year, month):
            if day >= target:
                return day
        year, month = _next_month(year, month)
    return None
