"""Period transition handling and reconciliation of actual balances.

These helpers detect that real time has moved past a scheduled payday,
snapshot balances, record closed periods, advance stale schedule anchors,
and derive the rolling baseline estimate from confirmed history. Every
function returns a new ``BudgetConfig`` rather than mutating its input.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional, Sequence

import pandas as pd

from analytics.dates import first_occurrence_on_or_after
from analytics.forecasting import generate_projection
from analytics.paydates import next_pay_date_on_or_after
from core.invariants import (
    InvariantError,
    assert_finite_number,
    assert_non_negative,
    assert_period_dates_valid,
    warn_if,
)
from core.models import (
    AdHocTransaction,
    BudgetConfig,
    HistoricalPeriod,
    PeriodSpendEntry,
    PeriodStartSnapshot,
    PeriodStatus,
    PeriodTransition,
    ProjectionEntry,
    TransitionResult,
    TrueSpend,
    VarianceExplanation,
    VarianceReason,
)

__all__ = [
    "UNEXPLAINED_TOLERANCE",
    "detect_period_transition",
    "calculate_true_spend",
    "build_variance_explanations",
    "handle_period_transition",
    "record_balance_update",
    "is_new_period",
    "advance_passed_dates",
    "confirm_period",
    "dismiss_period",
    "pending_period",
    "baseline_samples",
    "calculate_average_baseline",
    "calculated_baseline",
    "resolve_baseline",
]

logger = logging.getLogger(__name__)

# Variance below one cent is treated as fully explained.
UNEXPLAINED_TOLERANCE = 0.01


def _round_currency(value: float) -> float:
    return float(round(value, 2))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def detect_period_transition(config: BudgetConfig, today: date) -> PeriodTransition:
    """A transition has happened when ``next_pay_date`` is strictly before today."""

    if config.next_pay_date < today:
        return PeriodTransition(transitioned=True, passed_pay_date=config.next_pay_date)
    return PeriodTransition(transitioned=False, passed_pay_date=None)


def calculate_true_spend(
    starting_balance: float,
    income: float,
    expenses: float,
    ad_hoc_income: float,
    ad_hoc_expenses: float,
    new_balance: float,
) -> TrueSpend:
    """Return realized discretionary spend for a closed period.

    ``expected_ending`` is where the balance would be with zero discretionary
    spending; ``true_spend`` is how far the actual balance fell short of it.
    """

    expected_ending = starting_balance + income - expenses + ad_hoc_income - ad_hoc_expenses
    return TrueSpend(
        true_spend=_round_currency(expected_ending - new_balance),
        expected_ending=_round_currency(expected_ending),
    )


def build_variance_explanations(
    variance: float,
    explanations: Iterable[VarianceExplanation] = (),
) -> list[VarianceExplanation]:
    """Keep positive explanations and classify any unexplained overspend.

    ``variance`` is projected minus actual ending balance, so a positive value
    means more was spent than projected. Whatever the supplied explanations do
    not cover is recorded as a ``baseline_miss``.
    """

    kept = [exp for exp in explanations if exp.amount > 0]
    unexplained = variance - sum(exp.amount for exp in kept)
    if unexplained > UNEXPLAINED_TOLERANCE:
        kept.append(
            VarianceExplanation.for_reason(VarianceReason.BASELINE_MISS, _round_currency(unexplained))
        )
    return kept


def _discretionary_spend(true_spend: float, explanations: Sequence[VarianceExplanation]) -> float:
    one_off = sum(exp.amount for exp in explanations if not exp.affects_baseline)
    return _round_currency(true_spend - one_off)


def _next_period_number(periods: Sequence[HistoricalPeriod]) -> int:
    return periods[-1].period_number + 1 if periods else 0


def _confirmation_status(end_date: date, today: date, grace_days: int) -> PeriodStatus:
    if (today - end_date).days <= grace_days:
        return PeriodStatus.PENDING_CONFIRMATION
    return PeriodStatus.COMPLETED


def _append_period(
    periods: Sequence[HistoricalPeriod],
    period: HistoricalPeriod,
    now: datetime,
) -> list[HistoricalPeriod]:
    updated: list[HistoricalPeriod] = []
    for existing in periods:
        if period.status is PeriodStatus.PENDING_CONFIRMATION and existing.status is PeriodStatus.PENDING_CONFIRMATION:
            logger.info("Auto-completing unconfirmed period %s", existing.period_number)
            existing = existing.model_copy(update={"status": PeriodStatus.COMPLETED, "confirmed_at": now})
        updated.append(existing)
    updated.append(period)
    return updated


def _close_period(
    config: BudgetConfig,
    *,
    start_date: date,
    end_date: date,
    starting_balance: float,
    entry: ProjectionEntry,
    actual_ending: float,
    status: PeriodStatus,
    now: datetime,
) -> HistoricalPeriod:
    assert_period_dates_valid(start_date, end_date, "closed period")
    result = calculate_true_spend(
        starting_balance,
        entry.income,
        entry.expenses,
        entry.ad_hoc_income,
        entry.ad_hoc_expenses,
        actual_ending,
    )
    projected_ending = _round_currency(result.expected_ending - entry.baseline_spend)
    variance = _round_currency(projected_ending - actual_ending)
    explanations = build_variance_explanations(variance)

    return HistoricalPeriod(
        period_number=_next_period_number(config.periods),
        start_date=start_date,
        end_date=end_date,
        starting_balance=_round_currency(starting_balance),
        ending_balance=_round_currency(actual_ending),
        projected_ending_balance=projected_ending,
        income=_round_currency(entry.income),
        recurring_expenses=_round_currency(entry.expenses),
        ad_hoc_income=_round_currency(entry.ad_hoc_income),
        ad_hoc_expenses=_round_currency(entry.ad_hoc_expenses),
        baseline_spend=_discretionary_spend(result.true_spend, explanations),
        variance=variance,
        variance_explanations=explanations,
        status=status,
        confirmed_at=now if status is PeriodStatus.COMPLETED else None,
    )


def _current_entry(projection: Sequence[ProjectionEntry]) -> Optional[ProjectionEntry]:
    for entry in projection:
        if entry.period_number == 0:
            return entry
    return projection[0] if projection else None


def _roll_forward(
    balance: float,
    entries: Sequence[ProjectionEntry],
    today: date,
) -> tuple[float, int]:
    """Carry a balance across the pay periods that started before ``today``.

    Returns the rolled balance and the last period number folded into it.
    """

    consumed = 0
    for entry in entries:
        if entry.start_date >= today:
            break
        balance += entry.income + entry.ad_hoc_income - entry.ad_hoc_expenses
        balance -= sum(occ.amount for occ in entry.expense_details if occ.date < today)
        if entry.end_date < today:
            balance -= entry.baseline_spend
        consumed = entry.period_number
    return balance, consumed


def _renumber_ad_hoc(transactions: Sequence[AdHocTransaction], consumed: int) -> list[AdHocTransaction]:
    """Drop transactions folded into the balance and shift the rest to the new numbering."""

    return [
        txn.model_copy(update={"period_number": txn.period_number - consumed})
        for txn in transactions
        if txn.period_number > consumed
    ]


def handle_period_transition(
    config: BudgetConfig,
    today: date,
    baseline: Optional[float] = None,
    now: datetime | None = None,
) -> Optional[TransitionResult]:
    """Apply a detected transition; call before :func:`advance_passed_dates`.

    If the user already entered a balance on or after the passed payday only
    the period-start snapshot is refreshed. Otherwise the period that closed
    the day before the passed payday is projected as it stood on that payday.
    Its after-baseline balance is recorded as the period's ending balance
    (when a snapshot exists) and then rolled forward to ``today`` with the
    paychecks, ad-hoc amounts and bills dated since. Ad-hoc transactions
    folded into the new balance are removed and the remaining ones are
    renumbered from the new period 0. When the balance anchor is the passed
    payday itself there is no closed period and the current balance is
    rolled forward directly. Returns ``None`` when no transition applies.
    """

    transition = detect_period_transition(config, today)
    if not transition.transitioned or transition.passed_pay_date is None:
        return None

    now = now or _utcnow()
    passed = transition.passed_pay_date
    as_of = config.current_balance_as_of

    if as_of is not None and as_of >= passed:
        snapshot = PeriodStartSnapshot(period_start_date=as_of, balance=config.current_balance)
        return TransitionResult(
            config=config.model_copy(update={"period_start_snapshot": snapshot}),
            new_balance=config.current_balance,
            true_spend=0.0,
        )

    closing = generate_projection(config, baseline, today=passed)
    if not closing:
        return None

    closed = closing[0] if closing[0].period_number == 0 else None
    if closed is not None:
        opening = closed.balance_after_baseline
    else:
        untracked = [txn for txn in config.ad_hoc_transactions if txn.period_number == 0]
        opening = config.current_balance + sum(
            txn.amount if txn.is_income else -txn.amount for txn in untracked
        )

    later = [entry for entry in closing if entry.period_number > 0]
    rolled, consumed = _roll_forward(opening, later, today)
    new_balance = _round_currency(rolled)
    true_spend = 0.0
    periods = list(config.periods)
    recorded: Optional[HistoricalPeriod] = None

    snapshot = config.period_start_snapshot
    if snapshot is not None and closed is not None:
        end_date = passed - timedelta(days=1)
        recorded = _close_period(
            config,
            start_date=snapshot.period_start_date,
            end_date=end_date,
            starting_balance=snapshot.balance,
            entry=closed,
            actual_ending=_round_currency(closed.balance_after_baseline),
            status=_confirmation_status(end_date, today, config.period_confirmation_grace_days),
            now=now,
        )
        true_spend = recorded.baseline_spend
        periods = _append_period(periods, recorded, now)

    logger.info(
        "Pay date %s passed; balance auto-updated to %.2f", passed.isoformat(), new_balance
    )
    updated = config.model_copy(
        update={
            "current_balance": new_balance,
            "current_balance_as_of": today,
            "period_start_snapshot": PeriodStartSnapshot(period_start_date=today, balance=new_balance),
            "periods": periods,
            "ad_hoc_transactions": _renumber_ad_hoc(config.ad_hoc_transactions, consumed),
        }
    )
    return TransitionResult(
        config=updated,
        new_balance=new_balance,
        true_spend=true_spend,
        recorded_period=recorded,
    )


def is_new_period(config: BudgetConfig, current_pay_date: date) -> bool:
    snapshot = config.period_start_snapshot
    if snapshot is None:
        return True
    return snapshot.period_start_date != current_pay_date


def record_balance_update(
    config: BudgetConfig,
    new_balance: float,
    today: date,
    projection: Sequence[ProjectionEntry],
    now: datetime | None = None,
) -> BudgetConfig:
    """Apply a user-entered current balance.

    When the period-start snapshot dates from an earlier day, the span it
    opened is closed as a completed period using the entered balance as its
    actual ending; the snapshot then restarts from today.
    """

    new_balance = assert_finite_number(new_balance, "balance update")
    now = now or _utcnow()
    snapshot = config.period_start_snapshot
    update: dict[str, object] = {"current_balance": new_balance, "current_balance_as_of": today}

    entry = _current_entry(projection)
    if snapshot is not None and snapshot.period_start_date != today and entry is not None:
        closed = _close_period(
            config,
            start_date=snapshot.period_start_date,
            end_date=today - timedelta(days=1),
            starting_balance=snapshot.balance,
            entry=entry,
            actual_ending=new_balance,
            status=PeriodStatus.COMPLETED,
            now=now,
        )
        update["periods"] = _append_period(config.periods, closed, now)
        update["period_start_snapshot"] = PeriodStartSnapshot(period_start_date=today, balance=new_balance)
    elif snapshot is None:
        update["period_start_snapshot"] = PeriodStartSnapshot(period_start_date=today, balance=new_balance)

    return config.model_copy(update=update)


def advance_passed_dates(config: BudgetConfig, today: date) -> Optional[BudgetConfig]:
    """Move past schedule anchors forward; ``None`` when nothing changed.

    ``next_pay_date`` advances while it is before today. An expense's
    ``next_due_date`` advances only when it is before today and on or before
    ``current_balance_as_of``; a due date after the balance date has not yet
    been reflected in the balance and must stay visible to the projection.
    """

    update: dict[str, object] = {}

    if config.next_pay_date < today:
        advanced = next_pay_date_on_or_after(config, today)
        if not warn_if(advanced is None, "No pay date found within 3 months of %s", today.isoformat()):
            logger.debug("Advancing next pay date %s -> %s", config.next_pay_date, advanced)
            update["next_pay_date"] = advanced

    as_of = config.current_balance_as_of
    expenses = []
    expenses_changed = False
    for expense in config.recurring_expenses:
        due = expense.next_due_date
        if due is not None and due < today and (as_of is None or due <= as_of):
            anchor_day = expense.anchor_day or due.day
            next_due = first_occurrence_on_or_after(due, expense.frequency, anchor_day, today)
            logger.debug("Advancing %s due date %s -> %s", expense.name, due, next_due)
            expense = expense.model_copy(update={"next_due_date": next_due, "day_of_month": anchor_day})
            expenses_changed = True
        expenses.append(expense)

    if expenses_changed:
        update["recurring_expenses"] = expenses
    if not update:
        return None
    return config.model_copy(update=update)


def _find_period(config: BudgetConfig, period_id: str) -> tuple[int, HistoricalPeriod]:
    for index, period in enumerate(config.periods):
        if period.id == period_id:
            return index, period
    raise InvariantError(f"Unknown historical period: {period_id}")


def confirm_period(
    config: BudgetConfig,
    period_id: str,
    actual_ending: float,
    explanations: Iterable[VarianceExplanation] = (),
    now: datetime | None = None,
) -> BudgetConfig:
    """Record the user's actual ending balance for an open period.

    Explained amounts that are not ``baseline_miss`` are excluded from the
    period's discretionary spend; anything left unexplained counts toward it.
    """

    actual_ending = assert_finite_number(actual_ending, "period confirmation")
    index, period = _find_period(config, period_id)
    if period.status is PeriodStatus.COMPLETED:
        raise InvariantError(f"Period {period.period_number} is already completed")

    now = now or _utcnow()
    variance = _round_currency(period.projected_ending_balance - actual_ending)
    kept = build_variance_explanations(variance, explanations)
    result = calculate_true_spend(
        period.starting_balance,
        period.income,
        period.recurring_expenses,
        period.ad_hoc_income,
        period.ad_hoc_expenses,
        actual_ending,
    )

    confirmed = period.model_copy(
        update={
            "ending_balance": _round_currency(actual_ending),
            "variance": variance,
            "variance_explanations": kept,
            "baseline_spend": _discretionary_spend(result.true_spend, kept),
            "status": PeriodStatus.COMPLETED,
            "confirmed_at": now,
        }
    )
    periods = list(config.periods)
    periods[index] = confirmed
    update: dict[str, object] = {"periods": periods}

    # Shift an auto-derived balance by the correction while the user has not replaced it.
    snapshot = config.period_start_snapshot
    if (
        snapshot is not None
        and snapshot.period_start_date > period.end_date
        and abs(config.current_balance - snapshot.balance) < 0.005
    ):
        corrected = _round_currency(config.current_balance + confirmed.ending_balance - period.ending_balance)
        update["current_balance"] = corrected
        update["period_start_snapshot"] = snapshot.model_copy(update={"balance": corrected})

    return config.model_copy(update=update)


def dismiss_period(config: BudgetConfig, period_id: str, now: datetime | None = None) -> BudgetConfig:
    """Complete a period without confirmation, keeping its projected figures."""

    index, period = _find_period(config, period_id)
    if period.status is PeriodStatus.COMPLETED:
        raise InvariantError(f"Period {period.period_number} is already completed")

    periods = list(config.periods)
    periods[index] = period.model_copy(
        update={"status": PeriodStatus.COMPLETED, "confirmed_at": now or _utcnow()}
    )
    return config.model_copy(update={"periods": periods})


def pending_period(config: BudgetConfig) -> Optional[HistoricalPeriod]:
    for period in config.periods:
        if period.status is PeriodStatus.PENDING_CONFIRMATION:
            return period
    return None


def baseline_samples(periods: Iterable[HistoricalPeriod]) -> list[float]:
    """Realized discretionary spend of each completed period, oldest first."""

    return [p.baseline_spend for p in periods if p.status is PeriodStatus.COMPLETED]


def calculate_average_baseline(
    history: Sequence[float | HistoricalPeriod | PeriodSpendEntry],
    periods_to_use: int,
) -> Optional[float]:
    """Average the most recent ``periods_to_use`` true-spend values.

    Negative values (the user saved more than expected) are floored at zero so
    they cannot pull the baseline estimate down. Returns ``None`` when there is
    no usable sample.
    """

    if not history or periods_to_use <= 0:
        return None

    values: list[float] = []
    for item in list(history)[-periods_to_use:]:
        if isinstance(item, HistoricalPeriod):
            values.append(item.baseline_spend)
        elif isinstance(item, PeriodSpendEntry):
            values.append(item.true_spend)
        else:
            values.append(float(item))

    spends = pd.Series(values, dtype=float).dropna().clip(lower=0)
    if spends.empty:
        return None
    return _round_currency(float(spends.mean()))


def calculated_baseline(config: BudgetConfig) -> Optional[float]:
    """Rolling baseline from history, once enough periods are completed."""

    samples = baseline_samples(config.periods)
    if len(samples) < config.periods_for_baseline_calc:
        return None
    return calculate_average_baseline(samples, config.periods_for_baseline_calc)


def resolve_baseline(config: BudgetConfig) -> float:
    """Baseline used for projection: calculated when opted in and available."""

    if config.use_calculated_baseline:
        calculated = calculated_baseline(config)
        if calculated is not None:
            return calculated
    return assert_non_negative(config.baseline_spend_per_period, "baseline spend")
