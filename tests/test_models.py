"""Validation rules of the persisted budget models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from core.models import (
    BudgetConfig,
    HistoricalPeriod,
    PeriodStatus,
    RecurringExpense,
    VarianceExplanation,
    VarianceReason,
)


def _period(number: int, status: PeriodStatus) -> HistoricalPeriod:
    return HistoricalPeriod(
        period_number=number,
        start_date=date(2024, 1, 1),
        end_date=date(2024, 1, 14),
        starting_balance=100,
        ending_balance=90,
        projected_ending_balance=95,
        status=status,
    )


def test_document_uses_camel_case_keys(budget: BudgetConfig) -> None:
    document = budget.to_document()

    assert document["currentBalance"] == 2000.0
    assert document["nextPayDate"] == "2024-01-05"
    assert document["weekendHandling"] == "none"
    assert document["recurringExpenses"][0]["nextDueDate"] == "2024-01-01"
    assert "budgetStartDate" not in document


def test_document_round_trip_accepts_aliases(budget: BudgetConfig) -> None:
    restored = BudgetConfig.model_validate(budget.to_document())

    assert restored == budget


def test_amounts_must_be_finite_and_non_negative() -> None:
    with pytest.raises(ValidationError):
        RecurringExpense(name="Rent", amount=-1, frequency="monthly")
    with pytest.raises(ValidationError):
        BudgetConfig(current_balance=float("inf"))
    with pytest.raises(ValidationError):
        BudgetConfig(paycheck_amount=-5)


def test_assignment_is_validated(budget: BudgetConfig) -> None:
    with pytest.raises(ValidationError):
        budget.baseline_spend_per_period = float("nan")


def test_historical_period_rejects_inverted_range() -> None:
    with pytest.raises(ValidationError):
        HistoricalPeriod(
            period_number=0,
            start_date=date(2024, 1, 10),
            end_date=date(2024, 1, 1),
            starting_balance=0,
            ending_balance=0,
            projected_ending_balance=0,
        )


def test_variance_explanation_baseline_flag_follows_reason() -> None:
    miss = VarianceExplanation.for_reason("baseline_miss", 25)
    one_off = VarianceExplanation.for_reason(VarianceReason.PLANNED_COST_HIGHER, 40, "Power bill")

    assert miss.affects_baseline
    assert not one_off.affects_baseline
    with pytest.raises(ValidationError):
        VarianceExplanation(reason=VarianceReason.ADHOC_EXPENSE, amount=10, affects_baseline=True)


def test_config_rejects_duplicate_expense_ids() -> None:
    expense = RecurringExpense(id="dup", name="Rent", amount=10, frequency="monthly")

    with pytest.raises(ValidationError):
        BudgetConfig(recurring_expenses=[expense, expense])


def test_config_allows_one_pending_period_at_most() -> None:
    BudgetConfig(periods=[_period(0, PeriodStatus.COMPLETED), _period(1, PeriodStatus.PENDING_CONFIRMATION)])

    with pytest.raises(ValidationError):
        BudgetConfig(
            periods=[_period(0, PeriodStatus.PENDING_CONFIRMATION), _period(1, PeriodStatus.PENDING_CONFIRMATION)]
        )
    with pytest.raises(ValidationError):
        BudgetConfig(periods=[_period(1, PeriodStatus.COMPLETED), _period(0, PeriodStatus.COMPLETED)])


def test_anchor_day_prefers_stored_day_of_month() -> None:
    clamped = RecurringExpense(name="Loan", amount=1, frequency="monthly", next_due_date=date(2024, 2, 29), day_of_month=31)
    derived = RecurringExpense(name="Loan", amount=1, frequency="monthly", next_due_date=date(2024, 2, 29))

    assert clamped.anchor_day == 31
    assert derived.anchor_day == 29
