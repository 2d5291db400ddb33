"""Shared fixtures for the PayCycle test-suite."""

from __future__ import annotations

from datetime import date

import pytest

from core.models import (
    BudgetConfig,
    ExpenseFrequency,
    PayFrequency,
    PeriodStartSnapshot,
    RecurringExpense,
    WeekendHandling,
)


@pytest.fixture()
def rent() -> RecurringExpense:
    return RecurringExpense(
        id="rent",
        name="Rent",
        amount=950.0,
        frequency=ExpenseFrequency.MONTHLY,
        next_due_date=date(2024, 1, 1),
    )


@pytest.fixture()
def budget(rent: RecurringExpense) -> BudgetConfig:
    """Biweekly earner paid 1800 from Fri 2024-01-05, balance 2000 on Mon 2024-01-01."""

    return BudgetConfig(
        current_balance=2000.0,
        current_balance_as_of=date(2024, 1, 1),
        paycheck_amount=1800.0,
        paycheck_frequency=PayFrequency.BIWEEKLY,
        next_pay_date=date(2024, 1, 5),
        weekend_handling=WeekendHandling.NONE,
        recurring_expenses=[rent],
        baseline_spend_per_period=300.0,
        savings_goal=5000.0,
    )


@pytest.fixture()
def budget_with_snapshot(budget: BudgetConfig) -> BudgetConfig:
    return budget.model_copy(
        update={"period_start_snapshot": PeriodStartSnapshot(period_start_date=date(2024, 1, 1), balance=2000.0)}
    )
