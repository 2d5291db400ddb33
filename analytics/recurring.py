"""Recurring expense occurrence generation and per-period expense helpers."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Sequence

from analytics.dates import FREQ_TO_MONTHLY, advance_by_frequency, first_occurrence_on_or_after
from core.models import BudgetConfig, ExpenseOccurrence, PayFrequency, RecurringExpense

__all__ = [
    "generate_expense_occurrences",
    "expenses_between",
    "monthly_expense_total",
    "expenses_per_period",
    "net_per_period",
]


def generate_expense_occurrences(
    expenses: Iterable[RecurringExpense],
    range_start: date,
    range_end: date,
) -> list[ExpenseOccurrence]:
    """Expand recurring expenses into dated occurrences within a range.

    Parameters
    ----------
    expenses:
        Recurring expenses; entries without ``next_due_date`` are skipped.
    range_start, range_end:
        Inclusive date bounds.

    Returns
    -------
    list[ExpenseOccurrence]
        Occurrences sorted by date, then by expense name.
    """

    occurrences: list[ExpenseOccurrence] = []

    for expense in expenses:
        if expense.next_due_date is None:
            continue

        original_day = expense.anchor_day or expense.next_due_date.day
        current = first_occurrence_on_or_after(
            expense.next_due_date, expense.frequency, original_day, range_start
        )
        while current <= range_end:
            occurrences.append(
                ExpenseOccurrence(
                    expense_id=expense.id,
                    name=expense.name,
                    amount=expense.amount,
                    date=current,
                )
            )
            current = advance_by_frequency(current, expense.frequency, original_day)

    return sorted(occurrences, key=lambda occ: (occ.date, occ.name))


def expenses_between(
    occurrences: Sequence[ExpenseOccurrence],
    period_start: date,
    period_end: date,
) -> list[ExpenseOccurrence]:
    return [occ for occ in occurrences if period_start <= occ.date <= period_end]


def monthly_expense_total(expenses: Iterable[RecurringExpense]) -> float:
    """Average monthly cost of all recurring expenses."""

    return sum(expense.amount * FREQ_TO_MONTHLY[expense.frequency.value] for expense in expenses)


def expenses_per_period(expenses: Iterable[RecurringExpense], pay_frequency: PayFrequency | str) -> float:
    return monthly_expense_total(expenses) / FREQ_TO_MONTHLY[PayFrequency(pay_frequency).value]


def net_per_period(config: BudgetConfig) -> float:
    """Average savings per pay period: paycheck minus expenses and baseline."""

    per_period = expenses_per_period(config.recurring_expenses, config.paycheck_frequency)
    return config.paycheck_amount - per_period - config.baseline_spend_per_period
