"""Core domain package for the PayCycle projection engine."""

from .invariants import InvariantError
from .migration import load_config_document, migrate_to_historical_periods, needs_migration
from .models import (
    AdHocTransaction,
    BudgetConfig,
    ExpenseFrequency,
    ExpenseOccurrence,
    GoalProjection,
    HistoricalPeriod,
    MonthlyConfig,
    PayFrequency,
    PeriodStartSnapshot,
    PeriodStatus,
    ProjectionEntry,
    ProjectionSummary,
    RecurringExpense,
    SemiMonthlyConfig,
    VarianceExplanation,
    VarianceReason,
    WeekendHandling,
)
from .storage import JsonConfigStore

__all__ = [
    "AdHocTransaction",
    "BudgetConfig",
    "ExpenseFrequency",
    "ExpenseOccurrence",
    "GoalProjection",
    "HistoricalPeriod",
    "InvariantError",
    "JsonConfigStore",
    "MonthlyConfig",
    "PayFrequency",
    "PeriodStartSnapshot",
    "PeriodStatus",
    "ProjectionEntry",
    "ProjectionSummary",
    "RecurringExpense",
    "SemiMonthlyConfig",
    "VarianceExplanation",
    "VarianceReason",
    "WeekendHandling",
    "load_config_document",
    "migrate_to_historical_periods",
    "needs_migration",
]
