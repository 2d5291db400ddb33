"""Host-facing orchestration of the projection engine.

``BudgetSession`` owns the single ``BudgetConfig`` instance for a host shell:
it loads and migrates saved state, re-evaluates pay-period transitions when
the day changes, exposes the CRUD handlers, and autosaves after every
change. All calculation is delegated to the pure functions in ``analytics``.

The day-change monitor refreshes from a timer thread, so every
read-modify-commit of the config runs under the session lock.
"""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime
from typing import Callable, Iterable, Optional

from analytics.forecasting import (
    build_balance_series_frame,
    build_projection_frame,
    calculate_goal_dates,
    generate_projection,
)
from analytics.reconciliation import (
    advance_passed_dates,
    calculated_baseline,
    baseline_samples,
    confirm_period,
    dismiss_period,
    handle_period_transition,
    pending_period,
    record_balance_update,
    resolve_baseline,
)
from config.settings import Settings, configure_logging, get_settings
from core import ledger
from core.formatting import describe_goal
from core.models import (
    AdHocTransaction,
    BudgetConfig,
    GoalProjection,
    HistoricalPeriod,
    ProjectionEntry,
    ProjectionSummary,
    TransitionResult,
    VarianceExplanation,
)
from core.scheduler import DayChangeMonitor
from core.storage import JsonConfigStore

__all__ = ["BudgetSession"]

logger = logging.getLogger(__name__)


class BudgetSession:
    def __init__(
        self,
        config: Optional[BudgetConfig] = None,
        store: Optional[JsonConfigStore] = None,
        *,
        autosave: bool = True,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._config = config if config is not None else BudgetConfig()
        self.store = store
        self.autosave = autosave
        self._today = today
        self._lock = threading.RLock()
        self._monitor: Optional[DayChangeMonitor] = None
        self.last_transition: Optional[TransitionResult] = None

    @classmethod
    def open(
        cls,
        settings: Optional[Settings] = None,
        store: Optional[JsonConfigStore] = None,
        today: Callable[[], date] = date.today,
    ) -> "BudgetSession":
        """Configure logging, load saved state (or defaults) and bring it up to date."""

        settings = settings or get_settings()
        configure_logging(settings)
        store = store or JsonConfigStore(settings.storage_path)
        session = cls(store.load(), store, autosave=settings.autosave, today=today)
        session.refresh()
        return session

    @property
    def config(self) -> BudgetConfig:
        return self._config

    def replace_config(self, config: BudgetConfig) -> BudgetConfig:
        """Full-state replace from the settings form."""

        validated = BudgetConfig.model_validate(config.model_dump())
        with self._lock:
            self._commit(validated)
        return validated

    def save(self) -> bool:
        if self.store is None:
            return False
        return self.store.save(self._config)

    def _commit(self, config: BudgetConfig) -> None:
        self._config = config
        if self.autosave:
            self.save()

    def refresh(self, today: Optional[date] = None) -> Optional[TransitionResult]:
        """Apply any pay-period transition, then advance passed schedule dates."""

        today = today or self._today()
        with self._lock:
            result = handle_period_transition(self._config, today, resolve_baseline(self._config))
            base = result.config if result is not None else self._config
            advanced = advance_passed_dates(base, today)

            if result is not None or advanced is not None:
                self._commit(advanced or base)
            self.last_transition = result
        return result

    @property
    def baseline(self) -> float:
        return resolve_baseline(self._config)

    def projection(self, today: Optional[date] = None) -> list[ProjectionEntry]:
        return generate_projection(self._config, self.baseline, today or self._today())

    def goal(self, today: Optional[date] = None) -> GoalProjection:
        today = today or self._today()
        return calculate_goal_dates(self._config, self.projection(today), today)

    def summary(self, today: Optional[date] = None) -> ProjectionSummary:
        today = today or self._today()
        config = self._config
        projection = generate_projection(config, resolve_baseline(config), today)
        goal = calculate_goal_dates(config, projection, today)
        return {
            "today": today,
            "baseline": resolve_baseline(config),
            "calculated_baseline": calculated_baseline(config),
            "recorded_periods": len(baseline_samples(config.periods)),
            "projection": projection,
            "goal": goal,
            "goal_lines": describe_goal(config.savings_goal, goal),
            "pending_period": pending_period(config),
            "projection_df": build_projection_frame(projection),
            "balance_df": build_balance_series_frame(projection, config.savings_goal),
        }

    def update_balance(self, new_balance: float, today: Optional[date] = None) -> BudgetConfig:
        today = today or self._today()
        with self._lock:
            updated = record_balance_update(self._config, new_balance, today, self.projection(today))
            self._commit(updated)
        return updated

    def pending_period(self) -> Optional[HistoricalPeriod]:
        return pending_period(self._config)

    def confirm_period(
        self,
        period_id: str,
        actual_ending: float,
        explanations: Iterable[VarianceExplanation] = (),
        now: Optional[datetime] = None,
    ) -> BudgetConfig:
        with self._lock:
            updated = confirm_period(self._config, period_id, actual_ending, explanations, now=now)
            self._commit(updated)
        return updated

    def dismiss_period(self, period_id: str, now: Optional[datetime] = None) -> BudgetConfig:
        with self._lock:
            updated = dismiss_period(self._config, period_id, now=now)
            self._commit(updated)
        return updated

    def add_transaction(
        self,
        period_number: int,
        name: str,
        amount: float,
        is_income: bool = False,
    ) -> AdHocTransaction:
        with self._lock:
            updated, transaction = ledger.add_ad_hoc_transaction(
                self._config, period_number=period_number, name=name, amount=amount, is_income=is_income
            )
            self._commit(updated)
        return transaction

    def update_transaction(self, transaction: AdHocTransaction) -> BudgetConfig:
        with self._lock:
            updated = ledger.update_ad_hoc_transaction(self._config, transaction)
            self._commit(updated)
        return updated

    def delete_transaction(self, transaction_id: str) -> BudgetConfig:
        with self._lock:
            updated = ledger.delete_ad_hoc_transaction(self._config, transaction_id)
            self._commit(updated)
        return updated

    def start_new_cycle(self, start_date: date | str, starting_balance: float) -> BudgetConfig:
        with self._lock:
            updated = ledger.start_new_cycle(self._config, start_date, starting_balance)
            self._commit(updated)
        logger.info("Started new budget cycle on %s", updated.budget_start_date)
        return updated

    def watch_day_changes(self, poll_interval: Optional[float] = None) -> DayChangeMonitor:
        """Start refreshing automatically whenever the calendar day changes."""

        if self._monitor is None:
            interval = poll_interval if poll_interval is not None else get_settings().day_check_interval_seconds
            self._monitor = DayChangeMonitor(lambda day: self.refresh(day), poll_interval=interval)
        self._monitor.start()
        return self._monitor

    def close(self) -> None:
        if self._monitor is not None:
            self._monitor.stop()
            self._monitor = None
