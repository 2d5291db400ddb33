"""End-to-end tests for the host-facing session."""

from __future__ import annotations

import threading
from datetime import date

import pytest

from config.settings import Settings
from core.models import BudgetConfig, PeriodStatus
from core.session import BudgetSession
from core.storage import JsonConfigStore

JAN_6 = date(2024, 1, 6)


@pytest.fixture()
def store(tmp_path) -> JsonConfigStore:
    return JsonConfigStore(tmp_path / "budget.json")


def test_refresh_applies_transition_and_advances_schedule(
    budget_with_snapshot: BudgetConfig, store: JsonConfigStore
) -> None:
    session = BudgetSession(budget_with_snapshot, store, today=lambda: JAN_6)

    result = session.refresh()

    assert result is not None
    config = session.config
    assert config.current_balance == pytest.approx(2550.0)
    assert config.next_pay_date == date(2024, 1, 19)
    assert config.recurring_expenses[0].next_due_date == date(2024, 2, 1)
    assert session.pending_period().status is PeriodStatus.PENDING_CONFIRMATION
    assert store.load().current_balance == pytest.approx(2550.0)

    assert session.refresh() is None
    assert len(session.config.periods) == 1


def test_projection_is_continuous_across_a_transition(budget_with_snapshot: BudgetConfig) -> None:
    before = BudgetSession(budget_with_snapshot, autosave=False).projection(date(2024, 1, 1))

    session = BudgetSession(budget_with_snapshot, autosave=False, today=lambda: JAN_6)
    session.refresh()
    after = session.projection()

    assert after[0].period_number == 0
    assert (after[0].start_date, after[0].end_date) == (JAN_6, date(2024, 1, 18))
    assert after[0].balance_after_baseline == pytest.approx(before[1].balance_after_baseline)
    assert after[1].balance_after_baseline == pytest.approx(before[2].balance_after_baseline)


def test_open_loads_and_migrates_saved_state(budget: BudgetConfig, tmp_path) -> None:
    settings = Settings(storage_path=tmp_path / "saved.json", autosave=True)
    JsonConfigStore(settings.storage_path).save(budget)

    session = BudgetSession.open(settings, today=lambda: date(2024, 1, 3))

    assert session.config.budget_start_date == date(2024, 1, 1)
    assert session.config.current_balance == pytest.approx(2000.0)
    assert session.baseline == pytest.approx(300.0)


def test_open_without_saved_state_uses_defaults(tmp_path) -> None:
    settings = Settings(storage_path=tmp_path / "none.json")

    session = BudgetSession.open(settings, today=lambda: date(2024, 1, 3))

    assert session.config.current_balance == 0
    assert session.config.recurring_expenses == []


def test_summary_bundles_projection_views(budget: BudgetConfig) -> None:
    session = BudgetSession(budget, autosave=False, today=lambda: date(2024, 1, 1))

    summary = session.summary()

    assert summary["baseline"] == pytest.approx(300.0)
    assert summary["calculated_baseline"] is None
    assert summary["recorded_periods"] == 0
    assert summary["goal"].periods_to_goal == 4
    assert summary["goal_lines"][-1] == "46 days (4 pay periods)"
    assert summary["pending_period"] is None
    assert len(summary["projection_df"]) == len(summary["projection"])
    assert not summary["balance_df"].empty


def test_handlers_autosave(budget: BudgetConfig, store: JsonConfigStore) -> None:
    session = BudgetSession(budget, store, today=lambda: date(2024, 1, 3))

    txn = session.add_transaction(1, "Concert", 80)
    assert store.load().ad_hoc_transactions[0].name == "Concert"

    session.update_transaction(txn.model_copy(update={"name": "Concert tickets"}))
    assert store.load().ad_hoc_transactions[0].name == "Concert tickets"

    session.delete_transaction(txn.id)
    assert store.load().ad_hoc_transactions == []

    session.update_balance(1700.0)
    assert store.load().current_balance == pytest.approx(1700.0)

    session.start_new_cycle(date(2024, 1, 3), 1650.0)
    assert store.load().budget_start_date == date(2024, 1, 3)


def test_confirm_and_dismiss_through_session(budget_with_snapshot: BudgetConfig) -> None:
    session = BudgetSession(budget_with_snapshot, autosave=False, today=lambda: JAN_6)
    session.refresh()
    period = session.pending_period()

    session.confirm_period(period.id, 740.0)

    assert session.pending_period() is None
    assert session.config.periods[-1].ending_balance == pytest.approx(740.0)
    assert session.config.current_balance == pytest.approx(2540.0)


def test_replace_config_revalidates(budget: BudgetConfig) -> None:
    session = BudgetSession(autosave=False)

    replaced = session.replace_config(budget)

    assert replaced == budget
    assert session.config is replaced


def test_watch_day_changes_starts_and_stops_monitor(budget: BudgetConfig) -> None:
    session = BudgetSession(budget, autosave=False)

    monitor = session.watch_day_changes(poll_interval=3600)
    try:
        assert monitor.is_running
    finally:
        session.close()

    assert not monitor.is_running


def test_refresh_waits_for_in_flight_handler(budget_with_snapshot: BudgetConfig) -> None:
    session = BudgetSession(budget_with_snapshot, autosave=False, today=lambda: date(2024, 1, 3))
    worker = threading.Thread(target=session.refresh, args=(JAN_6,))

    with session._lock:
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()
        session.add_transaction(2, "Concert", 80)
    worker.join(timeout=5)

    assert not worker.is_alive()
    assert session.config.current_balance == pytest.approx(2550.0)
    assert [txn.name for txn in session.config.ad_hoc_transactions] == ["Concert"]
