"""One-way migration from legacy ``periodSpendHistory`` to ``periods``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from core.models import (
    BudgetConfig,
    HistoricalPeriod,
    PeriodStatus,
    VarianceExplanation,
    VarianceReason,
)

__all__ = ["needs_migration", "migrate_to_historical_periods", "load_config_document"]


def needs_migration(config: BudgetConfig) -> bool:
    return bool(config.period_spend_history) and not config.periods


def migrate_to_historical_periods(config: BudgetConfig, now: datetime | None = None) -> BudgetConfig:
    """Convert legacy history entries into completed historical periods.

    A positive legacy variance (expected minus actual ending) means more was
    spent than expected and is recorded as a ``baseline_miss``. Configs that
    already carry ``periods`` are returned unchanged; ``budget_start_date`` is
    only filled in when it is unset.
    """

    if config.periods:
        return config

    legacy = config.period_spend_history
    if not legacy:
        return config.model_copy(
            update={"budget_start_date": config.budget_start_date or config.current_balance_as_of}
        )

    now = now or datetime.now(timezone.utc)
    periods: list[HistoricalPeriod] = []
    for index, entry in enumerate(legacy):
        if index == 0:
            start = config.current_balance_as_of or entry.period_end_date
        else:
            start = legacy[index - 1].period_end_date + timedelta(days=1)
        start = min(start, entry.period_end_date)

        variance = float(round(entry.expected_ending - entry.actual_ending, 2))
        explanations = (
            [VarianceExplanation.for_reason(VarianceReason.BASELINE_MISS, abs(variance))]
            if variance > 0
            else []
        )
        periods.append(
            HistoricalPeriod(
                period_number=index,
                start_date=start,
                end_date=entry.period_end_date,
                starting_balance=entry.starting_balance,
                ending_balance=entry.actual_ending,
                projected_ending_balance=entry.expected_ending,
                baseline_spend=entry.true_spend,
                variance=variance,
                variance_explanations=explanations,
                status=PeriodStatus.COMPLETED,
                confirmed_at=now,
            )
        )

    return config.model_copy(
        update={
            "periods": periods,
            "period_spend_history": [],
            "budget_start_date": config.budget_start_date or periods[0].start_date,
        }
    )


def load_config_document(document: Mapping[str, Any], now: datetime | None = None) -> BudgetConfig:
    """Validate a persisted JSON document and bring it to the current shape."""

    config = BudgetConfig.model_validate(dict(document))
    if needs_migration(config) or config.budget_start_date is None:
        config = migrate_to_historical_periods(config, now=now)
    return config
