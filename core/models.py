"""Shared data model definitions for the PayCycle projection engine.

Persisted state is modelled with pydantic so that a ``BudgetConfig`` JSON
document is validated the moment it is constructed or assigned to. Derived
values (projection entries, goal dates) are frozen dataclasses that are
rebuilt on every call and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, TypedDict
from uuid import uuid4

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


def new_id() -> str:
    return str(uuid4())


class PayFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    SEMIMONTHLY = "semimonthly"
    MONTHLY = "monthly"


class ExpenseFrequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class WeekendHandling(str, Enum):
    """How a date landing on Saturday or Sunday is shifted."""

    BEFORE = "before"
    AFTER = "after"
    NONE = "none"


class VarianceReason(str, Enum):
    ADHOC_EXPENSE = "adhoc_expense"
    PLANNED_COST_HIGHER = "planned_cost_higher"
    BASELINE_MISS = "baseline_miss"


class PeriodStatus(str, Enum):
    ACTIVE = "active"
    PENDING_CONFIRMATION = "pending-confirmation"
    COMPLETED = "completed"


class _Document(BaseModel):
    """Base for persisted models: camelCase JSON keys, finite numbers only."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        allow_inf_nan=False,
        validate_assignment=True,
    )


class SemiMonthlyConfig(_Document):
    first_pay_day: int = Field(1, ge=1, le=31)
    # 31 means "last day of the month"
    second_pay_day: int = Field(15, ge=1, le=31)


class MonthlyConfig(_Document):
    # 29-31 clamp to the month's last day
    pay_day: int = Field(1, ge=1, le=31)


class RecurringExpense(_Document):
    """A recurring bill anchored on ``next_due_date``.

    ``day_of_month`` keeps the originally requested day so that an expense
    due on the 31st is not truncated after passing through a short month.
    """

    id: str = Field(default_factory=new_id)
    name: str
    amount: float = Field(ge=0)
    frequency: ExpenseFrequency
    next_due_date: Optional[date] = None
    day_of_month: Optional[int] = Field(None, ge=1, le=31)

    @property
    def anchor_day(self) -> Optional[int]:
        if self.day_of_month is not None:
            return self.day_of_month
        if self.next_due_date is not None:
            return self.next_due_date.day
        return None


class AdHocTransaction(_Document):
    id: str = Field(default_factory=new_id)
    period_number: int = Field(ge=0)
    name: str
    amount: float = Field(ge=0)
    is_income: bool = False


class PeriodStartSnapshot(_Document):
    period_start_date: date
    balance: float


class PeriodSpendEntry(_Document):
    """Legacy history record, superseded by :class:`HistoricalPeriod`."""

    period_end_date: date
    starting_balance: float = 0.0
    expected_ending: float = 0.0
    actual_ending: float = 0.0
    true_spend: float = 0.0


class VarianceExplanation(_Document):
    reason: VarianceReason
    amount: float = Field(ge=0)
    description: Optional[str] = None
    affects_baseline: bool = False

    @model_validator(mode="after")
    def _baseline_flag_matches_reason(self) -> "VarianceExplanation":
        # Only discretionary misses feed the rolling baseline.
        if self.affects_baseline != (self.reason is VarianceReason.BASELINE_MISS):
            raise ValueError(
                f"affectsBaseline must be {self.reason is VarianceReason.BASELINE_MISS} "
                f"for reason '{self.reason.value}'"
            )
        return self

    @classmethod
    def for_reason(
        cls,
        reason: VarianceReason | str,
        amount: float,
        description: Optional[str] = None,
    ) -> "VarianceExplanation":
        reason = VarianceReason(reason)
        return cls(
            reason=reason,
            amount=amount,
            description=description,
            affects_baseline=reason is VarianceReason.BASELINE_MISS,
        )


class HistoricalPeriod(_Document):
    id: str = Field(default_factory=new_id)
    period_number: int = Field(ge=0)
    start_date: date
    end_date: date
    starting_balance: float
    ending_balance: float
    projected_ending_balance: float
    income: float = 0.0
    recurring_expenses: float = 0.0
    ad_hoc_income: float = 0.0
    ad_hoc_expenses: float = 0.0
    baseline_spend: float = 0.0
    variance: float = 0.0
    variance_explanations: list[VarianceExplanation] = Field(default_factory=list)
    status: PeriodStatus = PeriodStatus.ACTIVE
    confirmed_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_range(self) -> "HistoricalPeriod":
        if self.start_date > self.end_date:
            raise ValueError(
                f"Period start is after end: start={self.start_date.isoformat()}, "
                f"end={self.end_date.isoformat()}"
            )
        return self


class BudgetConfig(_Document):
    """Root state object, persisted as a single JSON document."""

    current_balance: float = 0.0
    paycheck_amount: float = Field(0.0, ge=0)
    paycheck_frequency: PayFrequency = PayFrequency.BIWEEKLY
    next_pay_date: date = Field(default_factory=date.today)
    weekend_handling: WeekendHandling = WeekendHandling.BEFORE
    semi_monthly_config: SemiMonthlyConfig = Field(default_factory=SemiMonthlyConfig)
    monthly_config: MonthlyConfig = Field(default_factory=MonthlyConfig)
    recurring_expenses: list[RecurringExpense] = Field(default_factory=list)
    baseline_spend_per_period: float = Field(0.0, ge=0)
    savings_goal: float = 0.0
    ad_hoc_transactions: list[AdHocTransaction] = Field(default_factory=list)
    current_balance_as_of: Optional[date] = None
    budget_start_date: Optional[date] = None
    period_start_snapshot: Optional[PeriodStartSnapshot] = None
    period_spend_history: list[PeriodSpendEntry] = Field(default_factory=list)
    periods: list[HistoricalPeriod] = Field(default_factory=list)
    periods_for_baseline_calc: int = Field(8, ge=1)
    use_calculated_baseline: bool = False
    period_confirmation_grace_days: int = Field(3, ge=0)

    @model_validator(mode="after")
    def _check_collections(self) -> "BudgetConfig":
        expense_ids = [expense.id for expense in self.recurring_expenses]
        if len(expense_ids) != len(set(expense_ids)):
            raise ValueError("Recurring expense ids must be unique")

        numbers = [period.period_number for period in self.periods]
        if numbers != sorted(numbers) or len(numbers) != len(set(numbers)):
            raise ValueError("Historical periods must be ordered by ascending period number")

        pending = [p for p in self.periods if p.status is PeriodStatus.PENDING_CONFIRMATION]
        if len(pending) > 1:
            raise ValueError("At most one period may be pending confirmation")
        return self

    def to_document(self) -> dict:
        """Return the JSON-ready camelCase representation."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class ExpenseOccurrence:
    expense_id: str
    name: str
    amount: float
    date: date


@dataclass(frozen=True)
class ProjectionEntry:
    """One projected pay period; period 0 is the partial current period."""

    date: date
    period_number: int
    start_date: date
    end_date: date
    income: float
    expenses: float
    baseline_spend: float
    balance_after_income: float
    balance_after_expenses: float
    balance_after_baseline: float
    ad_hoc_income: float = 0.0
    ad_hoc_expenses: float = 0.0
    expense_details: tuple[ExpenseOccurrence, ...] = field(default_factory=tuple)
    ad_hoc_details: tuple[AdHocTransaction, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class GoalProjection:
    date_before_expenses: Optional[date]
    date_after_expenses: Optional[date]
    date_after_baseline: Optional[date]
    periods_to_goal: int
    days_to_goal: int

    @property
    def reachable(self) -> bool:
        return self.date_after_baseline is not None


@dataclass(frozen=True)
class TrueSpend:
    true_spend: float
    expected_ending: float


@dataclass(frozen=True)
class PeriodTransition:
    transitioned: bool
    passed_pay_date: Optional[date]


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of applying a detected pay-period transition."""

    config: BudgetConfig
    new_balance: float
    true_spend: float
    recorded_period: Optional[HistoricalPeriod] = None
    transitioned: bool = True


class ProjectionSummary(TypedDict):
    """Everything a chart, table or timeline view needs for one render."""

    today: date
    baseline: float
    calculated_baseline: Optional[float]
    recorded_periods: int
    projection: list[ProjectionEntry]
    goal: GoalProjection
    goal_lines: list[str]
    pending_period: Optional[HistoricalPeriod]
    projection_df: pd.DataFrame
    balance_df: pd.DataFrame


__all__ = [
    "PayFrequency",
    "ExpenseFrequency",
    "WeekendHandling",
    "VarianceReason",
    "PeriodStatus",
    "SemiMonthlyConfig",
    "MonthlyConfig",
    "RecurringExpense",
    "AdHocTransaction",
    "PeriodStartSnapshot",
    "PeriodSpendEntry",
    "VarianceExplanation",
    "HistoricalPeriod",
    "BudgetConfig",
    "ExpenseOccurrence",
    "ProjectionEntry",
    "GoalProjection",
    "TrueSpend",
    "PeriodTransition",
    "TransitionResult",
    "ProjectionSummary",
    "new_id",
]
