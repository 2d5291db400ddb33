"""Projection and reconciliation helpers shared across PayCycle services."""

from analytics.dates import (
    FREQ_TO_MONTHLY,
    add_months,
    adjust_for_weekend,
    advance_by_frequency,
    clamp_day_to_month,
    first_occurrence_on_or_after,
)
from analytics.forecasting import (
    GOAL_EXTENSION_MONTHS,
    MAX_PROJECTION_PERIODS,
    build_balance_series_frame,
    build_projection_frame,
    calculate_goal_dates,
    generate_projection,
)
from analytics.paydates import generate_pay_dates, next_pay_date_on_or_after
from analytics.reconciliation import (
    advance_passed_dates,
    build_variance_explanations,
    calculate_average_baseline,
    calculate_true_spend,
    confirm_period,
    detect_period_transition,
    dismiss_period,
    handle_period_transition,
    is_new_period,
    pending_period,
    record_balance_update,
    resolve_baseline,
)
from analytics.recurring import (
    expenses_per_period,
    generate_expense_occurrences,
    monthly_expense_total,
    net_per_period,
)

__all__ = [
    "FREQ_TO_MONTHLY",
    "add_months",
    "adjust_for_weekend",
    "advance_by_frequency",
    "clamp_day_to_month",
    "first_occurrence_on_or_after",
    "GOAL_EXTENSION_MONTHS",
    "MAX_PROJECTION_PERIODS",
    "build_balance_series_frame",
    "build_projection_frame",
    "calculate_goal_dates",
    "generate_projection",
    "generate_pay_dates",
    "next_pay_date_on_or_after",
    "advance_passed_dates",
    "build_variance_explanations",
    "calculate_average_baseline",
    "calculate_true_spend",
    "confirm_period",
    "detect_period_transition",
    "dismiss_period",
    "handle_period_transition",
    "is_new_period",
    "pending_period",
    "record_balance_update",
    "resolve_baseline",
    "expenses_per_period",
    "generate_expense_occurrences",
    "monthly_expense_total",
    "net_per_period",
]
