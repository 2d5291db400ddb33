"""Tests for pay-date calendar generation."""

from __future__ import annotations

from datetime import date

import pytest

from analytics.paydates import generate_pay_dates, next_pay_date_on_or_after, semimonthly_pay_days
from core.models import BudgetConfig, MonthlyConfig, PayFrequency, SemiMonthlyConfig, WeekendHandling


def _config(frequency: PayFrequency, next_pay: date, handling: WeekendHandling = WeekendHandling.NONE, **extra) -> BudgetConfig:
    return BudgetConfig(
        paycheck_amount=1000,
        paycheck_frequency=frequency,
        next_pay_date=next_pay,
        weekend_handling=handling,
        **extra,
    )


def test_biweekly_steps_fourteen_days() -> None:
    config = _config(PayFrequency.BIWEEKLY, date(2024, 1, 5))

    assert generate_pay_dates(config, 4) == [
        date(2024, 1, 5),
        date(2024, 1, 19),
        date(2024, 2, 2),
        date(2024, 2, 16),
    ]


def test_weekly_adjusts_emitted_dates_but_steps_from_the_raw_anchor() -> None:
    config = _config(PayFrequency.WEEKLY, date(2024, 1, 6), WeekendHandling.AFTER)

    assert generate_pay_dates(config, 3) == [date(2024, 1, 8), date(2024, 1, 15), date(2024, 1, 22)]


def test_weekly_skips_adjusted_dates_before_the_anchor() -> None:
    config = _config(PayFrequency.WEEKLY, date(2024, 1, 6), WeekendHandling.BEFORE)

    assert generate_pay_dates(config, 3) == [date(2024, 1, 12), date(2024, 1, 19), date(2024, 1, 26)]


def test_semimonthly_uses_last_day_for_31() -> None:
    config = _config(
        PayFrequency.SEMIMONTHLY,
        date(2024, 2, 1),
        semi_monthly_config=SemiMonthlyConfig(first_pay_day=15, second_pay_day=31),
    )

    assert generate_pay_dates(config, 4) == [
        date(2024, 2, 15),
        date(2024, 2, 29),
        date(2024, 3, 15),
        date(2024, 3, 31),
    ]


def test_semimonthly_starting_mid_month_truncates_to_count() -> None:
    config = _config(
        PayFrequency.SEMIMONTHLY,
        date(2024, 1, 10),
        semi_monthly_config=SemiMonthlyConfig(first_pay_day=1, second_pay_day=15),
    )

    assert generate_pay_dates(config, 2) == [date(2024, 1, 15), date(2024, 2, 1)]


def test_semimonthly_pay_days_are_sorted_when_configured_out_of_order() -> None:
    days = semimonthly_pay_days(2024, 5, SemiMonthlyConfig(first_pay_day=20, second_pay_day=5), "none")

    assert days == [date(2024, 5, 5), date(2024, 5, 20)]


def test_monthly_clamps_and_adjusts_for_weekends() -> None:
    config = _config(
        PayFrequency.MONTHLY,
        date(2024, 1, 1),
        WeekendHandling.BEFORE,
        monthly_config=MonthlyConfig(pay_day=31),
    )

    # 2024-03-31 is a Sunday.
    assert generate_pay_dates(config, 4) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 29),
        date(2024, 4, 30),
    ]


@pytest.mark.parametrize("frequency", list(PayFrequency))
@pytest.mark.parametrize("handling", list(WeekendHandling))
def test_generated_dates_are_ordered_and_never_before_anchor(frequency: PayFrequency, handling: WeekendHandling) -> None:
    anchor = date(2024, 3, 30)
    config = _config(
        frequency,
        anchor,
        handling,
        semi_monthly_config=SemiMonthlyConfig(first_pay_day=1, second_pay_day=31),
        monthly_config=MonthlyConfig(pay_day=31),
    )

    dates = generate_pay_dates(config, 30)

    assert len(dates) == 30
    assert dates == sorted(dates)
    assert all(day >= anchor for day in dates)


def test_non_positive_count_returns_empty_list() -> None:
    config = _config(PayFrequency.WEEKLY, date(2024, 1, 5))

    assert generate_pay_dates(config, 0) == []
    assert generate_pay_dates(config, -3) == []


def test_next_pay_date_on_or_after() -> None:
    biweekly = _config(PayFrequency.BIWEEKLY, date(2024, 1, 5))
    monthly = _config(PayFrequency.MONTHLY, date(2024, 1, 15), monthly_config=MonthlyConfig(pay_day=15))
    semimonthly = _config(
        PayFrequency.SEMIMONTHLY,
        date(2024, 3, 1),
        WeekendHandling.BEFORE,
        semi_monthly_config=SemiMonthlyConfig(first_pay_day=1, second_pay_day=15),
    )

    assert next_pay_date_on_or_after(biweekly, date(2024, 1, 20)) == date(2024, 2, 2)
    assert next_pay_date_on_or_after(biweekly, date(2024, 1, 19)) == date(2024, 1, 19)
    assert next_pay_date_on_or_after(monthly, date(2024, 3, 16)) == date(2024, 4, 15)
    assert next_pay_date_on_or_after(semimonthly, date(2024, 3, 16)) == date(2024, 4, 1)
