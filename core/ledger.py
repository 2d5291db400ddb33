"""Config-editing handlers invoked by the host shell.

Each handler validates its input and returns a new ``BudgetConfig``; the
caller replaces its copy wholesale.
"""

from __future__ import annotations

from datetime import date

from core.invariants import InvariantError, assert_finite_number, assert_non_negative, assert_valid_date
from core.models import AdHocTransaction, BudgetConfig, PeriodStartSnapshot

__all__ = [
    "add_ad_hoc_transaction",
    "update_ad_hoc_transaction",
    "delete_ad_hoc_transaction",
    "ad_hoc_for_period",
    "start_new_cycle",
]


def add_ad_hoc_transaction(
    config: BudgetConfig,
    *,
    period_number: int,
    name: str,
    amount: float,
    is_income: bool = False,
) -> tuple[BudgetConfig, AdHocTransaction]:
    transaction = AdHocTransaction(
        period_number=period_number,
        name=name,
        amount=assert_non_negative(amount, f"ad-hoc transaction '{name}'"),
        is_income=is_income,
    )
    updated = config.model_copy(
        update={"ad_hoc_transactions": [*config.ad_hoc_transactions, transaction]}
    )
    return updated, transaction


def update_ad_hoc_transaction(config: BudgetConfig, transaction: AdHocTransaction) -> BudgetConfig:
    # Round-trip through validation: the caller may have mutated a copy.
    transaction = AdHocTransaction.model_validate(transaction.model_dump())
    if not any(txn.id == transaction.id for txn in config.ad_hoc_transactions):
        raise InvariantError(f"Unknown ad-hoc transaction: {transaction.id}")
    transactions = [transaction if txn.id == transaction.id else txn for txn in config.ad_hoc_transactions]
    return config.model_copy(update={"ad_hoc_transactions": transactions})


def delete_ad_hoc_transaction(config: BudgetConfig, transaction_id: str) -> BudgetConfig:
    transactions = [txn for txn in config.ad_hoc_transactions if txn.id != transaction_id]
    if len(transactions) == len(config.ad_hoc_transactions):
        raise InvariantError(f"Unknown ad-hoc transaction: {transaction_id}")
    return config.model_copy(update={"ad_hoc_transactions": transactions})


def ad_hoc_for_period(config: BudgetConfig, period_number: int) -> list[AdHocTransaction]:
    return [txn for txn in config.ad_hoc_transactions if txn.period_number == period_number]


def start_new_cycle(config: BudgetConfig, start_date: date | str, starting_balance: float) -> BudgetConfig:
    """Reset tracking history and re-anchor the budget start.

    This is the only operation allowed to overwrite ``budget_start_date``.
    """

    start = assert_valid_date(start_date, "new cycle start")
    balance = assert_finite_number(starting_balance, "new cycle balance")
    return config.model_copy(
        update={
            "budget_start_date": start,
            "current_balance": balance,
            "current_balance_as_of": start,
            "period_start_snapshot": PeriodStartSnapshot(period_start_date=start, balance=balance),
            "periods": [],
            "period_spend_history": [],
        }
    )
