"""Pay-period balance projection and savings-goal analytics."""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Final, Iterable, Sequence

import pandas as pd

from analytics.dates import FREQ_TO_MONTHLY, add_months
from analytics.paydates import generate_pay_dates
from analytics.recurring import expenses_between, generate_expense_occurrences
from core.models import AdHocTransaction, BudgetConfig, GoalProjection, ProjectionEntry

__all__ = [
    "MAX_PROJECTION_PERIODS",
    "GOAL_EXTENSION_MONTHS",
    "resolve_period_zero_start",
    "generate_projection",
    "calculate_goal_dates",
    "build_projection_frame",
    "build_balance_series_frame",
]

# About five years of weekly pay; the only bound when the goal is unreachable.
MAX_PROJECTION_PERIODS: Final[int] = 260
GOAL_EXTENSION_MONTHS: Final[int] = 3

SERIES_LABELS: Final[dict[str, str]] = {
    "balance_after_income": "Before expenses",
    "balance_after_expenses": "After expenses",
    "balance_after_baseline": "After all spending",
}


def resolve_period_zero_start(config: BudgetConfig, today: date) -> date:
    """Return the authoritative start of the partial period 0."""

    return config.budget_start_date or config.current_balance_as_of or today


def _ad_hoc_totals(
    transactions: Iterable[AdHocTransaction],
    period_number: int,
) -> tuple[tuple[AdHocTransaction, ...], float, float]:
    matching = tuple(txn for txn in transactions if txn.period_number == period_number)
    income = sum(txn.amount for txn in matching if txn.is_income)
    expense = sum(txn.amount for txn in matching if not txn.is_income)
    return matching, income, expense


def _extension_periods(config: BudgetConfig) -> int:
    return math.ceil(FREQ_TO_MONTHLY[config.paycheck_frequency.value] * GOAL_EXTENSION_MONTHS)


def generate_projection(
    config: BudgetConfig,
    baseline_override: float | None = None,
    today: date | None = None,
) -> list[ProjectionEntry]:
    """Project running balances across future pay periods.

    Emits a partial period 0 (from the balance anchor up to the day before the
    next paycheck) followed by one entry per future pay date. Generation stops
    once the after-baseline balance has been at or above the savings goal for
    three months' worth of periods, or after ``MAX_PROJECTION_PERIODS``.
    """

    today = today or date.today()
    baseline = config.baseline_spend_per_period if baseline_override is None else baseline_override
    entries: list[ProjectionEntry] = []

    pay_dates = [day for day in generate_pay_dates(config, MAX_PROJECTION_PERIODS) if day >= today]
    if not pay_dates:
        return entries

    period0_start = resolve_period_zero_start(config, today)
    projection_end = add_months(pay_dates[-1], 1)
    occurrences = generate_expense_occurrences(config.recurring_expenses, period0_start, projection_end)

    balance_after_baseline = config.current_balance
    goal_reached_period: int | None = None
    extension = _extension_periods(config)

    first_pay_date = pay_dates[0]
    if (first_pay_date - period0_start).days > 0:
        period_end = first_pay_date - timedelta(days=1)
        details = tuple(expenses_between(occurrences, period0_start, period_end))
        expense_total = sum(occ.amount for occ in details)
        ad_hocs, ad_hoc_income, ad_hoc_expense = _ad_hoc_totals(config.ad_hoc_transactions, 0)

        balance_after_income = config.current_balance + ad_hoc_income
        balance_after_expenses = balance_after_income - expense_total - ad_hoc_expense
        balance_after_baseline = balance_after_expenses - baseline

        entries.append(
            ProjectionEntry(
                date=today,
                period_number=0,
                start_date=period0_start,
                end_date=period_end,
                income=0.0,
                expenses=expense_total,
                baseline_spend=baseline,
                balance_after_income=balance_after_income,
                balance_after_expenses=balance_after_expenses,
                balance_after_baseline=balance_after_baseline,
                ad_hoc_income=ad_hoc_income,
                ad_hoc_expenses=ad_hoc_expense,
                expense_details=details,
                ad_hoc_details=ad_hocs,
            )
        )
        if balance_after_baseline >= config.savings_goal:
            goal_reached_period = 0

    for index, pay_date in enumerate(pay_dates):
        period_number = index + 1
        if index < len(pay_dates) - 1:
            period_end = pay_dates[index + 1] - timedelta(days=1)
        else:
            period_end = add_months(pay_date, 1)

        details = tuple(expenses_between(occurrences, pay_date, period_end))
        expense_total = sum(occ.amount for occ in details)
        ad_hocs, ad_hoc_income, ad_hoc_expense = _ad_hoc_totals(config.ad_hoc_transactions, period_number)

        balance_after_income = balance_after_baseline + config.paycheck_amount + ad_hoc_income
        balance_after_expenses = balance_after_income - expense_total - ad_hoc_expense
        balance_after_baseline = balance_after_expenses - baseline

        entries.append(
            ProjectionEntry(
                date=pay_date,
                period_number=period_number,
                start_date=pay_date,
                end_date=period_end,
                income=config.paycheck_amount,
                expenses=expense_total,
                baseline_spend=baseline,
                balance_after_income=balance_after_income,
                balance_after_expenses=balance_after_expenses,
                balance_after_baseline=balance_after_baseline,
                ad_hoc_income=ad_hoc_income,
                ad_hoc_expenses=ad_hoc_expense,
                expense_details=details,
                ad_hoc_details=ad_hocs,
            )
        )

        if goal_reached_period is None and balance_after_baseline >= config.savings_goal:
            goal_reached_period = period_number
        if goal_reached_period is not None and period_number >= goal_reached_period + extension:
            break

    return entries


def calculate_goal_dates(
    config: BudgetConfig,
    projection: Sequence[ProjectionEntry],
    today: date | None = None,
) -> GoalProjection:
    """Find when each balance track first reaches the savings goal.

    Period 0 is partial and is never reported as the goal period.
    ``days_to_goal`` is ``-1`` when the goal is not reached within the horizon.
    """

    if config.savings_goal <= 0:
        return GoalProjection(None, None, None, 0, 0)

    goal = config.savings_goal
    before_expenses: date | None = None
    after_expenses: date | None = None
    after_baseline: date | None = None
    periods_to_goal = 0

    for entry in projection:
        if entry.period_number == 0:
            continue
        if before_expenses is None and entry.balance_after_income >= goal:
            before_expenses = entry.date
        if after_expenses is None and entry.balance_after_expenses >= goal:
            after_expenses = entry.date
        if after_baseline is None and entry.balance_after_baseline >= goal:
            after_baseline = entry.date
            periods_to_goal = entry.period_number

    today = today or date.today()
    days_to_goal = (after_baseline - today).days if after_baseline is not None else -1

    return GoalProjection(
        date_before_expenses=before_expenses,
        date_after_expenses=after_expenses,
        date_after_baseline=after_baseline,
        periods_to_goal=periods_to_goal,
        days_to_goal=days_to_goal,
    )


def build_projection_frame(projection: Sequence[ProjectionEntry]) -> pd.DataFrame:
    """Return one row per period for table views."""

    records: list[dict[str, object]] = [
        {
            "Period": entry.period_number,
            "Date": pd.Timestamp(entry.date),
            "Start": pd.Timestamp(entry.start_date),
            "End": pd.Timestamp(entry.end_date),
            "Income": float(entry.income),
            "Expenses": float(entry.expenses),
            "AdHocIncome": float(entry.ad_hoc_income),
            "AdHocExpenses": float(entry.ad_hoc_expenses),
            "Baseline": float(entry.baseline_spend),
            "AfterIncome": float(entry.balance_after_income),
            "AfterExpenses": float(entry.balance_after_expenses),
            "AfterBaseline": float(entry.balance_after_baseline),
        }
        for entry in projection
    ]
    frame = pd.DataFrame(records)
    if not frame.empty:
        frame = frame.sort_values("Period").reset_index(drop=True)
    return frame


def build_balance_series_frame(
    projection: Sequence[ProjectionEntry],
    savings_goal: float | None = None,
) -> pd.DataFrame:
    """Return balances in long format (``Date``, ``Balance``, ``Series``) for charts."""

    records: list[dict[str, object]] = []
    for entry in projection:
        for attribute, label in SERIES_LABELS.items():
            records.append(
                {
                    "Date": pd.Timestamp(entry.date),
                    "Period": entry.period_number,
                    "Balance": float(getattr(entry, attribute)),
                    "Series": label,
                }
            )
        if savings_goal is not None and savings_goal > 0:
            records.append(
                {
                    "Date": pd.Timestamp(entry.date),
                    "Period": entry.period_number,
                    "Balance": float(savings_goal),
                    "Series": "Goal",
                }
            )

    frame = pd.DataFrame(records)
    if not frame.empty:
        frame = frame.sort_values(["Period", "Series"]).reset_index(drop=True)
    return frame
