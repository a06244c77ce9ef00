from datetime import datetime

import pytest

from timeclock.attendance.duration import DurationCalculator
from timeclock.attendance.policy import WorkdayPolicy
from timeclock.core.exceptions import ValidationError


@pytest.fixture
def calculator():
    return DurationCalculator(WorkdayPolicy())


def test_same_day_checkout_is_manual_at_now(calculator):
    decision = calculator.compute_checkout(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 17, 30))

    assert decision.check_out_time == datetime(2024, 1, 1, 17, 30)
    assert decision.is_auto_checkout is False
    assert decision.days_since_check_in == 0


def test_next_day_checkout_uses_workday_end(calculator):
    decision = calculator.compute_checkout(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 2, 10, 0))

    assert decision.check_out_time == datetime(2024, 1, 1, 17, 0)
    assert decision.is_auto_checkout is True
    assert decision.days_since_check_in == 1


def test_late_night_check_in_is_clamped_to_end_of_its_day(calculator):
    decision = calculator.compute_checkout(datetime(2024, 1, 1, 22, 0), datetime(2024, 1, 2, 8, 0))

    assert decision.check_out_time == datetime(2024, 1, 1, 23, 59, 59, 999999)
    assert decision.is_auto_checkout is True


def test_evening_check_in_adds_default_hours_when_it_fits_the_day(calculator):
    policy = WorkdayPolicy(default_checkout_hours=4)
    decision = DurationCalculator(policy).compute_checkout(datetime(2024, 1, 1, 18, 0), datetime(2024, 1, 2, 8, 0))

    assert decision.check_out_time == datetime(2024, 1, 1, 22, 0)


def test_stale_session_closes_at_its_workday_end(calculator):
    decision = calculator.compute_checkout(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 3, 10, 0))

    assert decision.check_out_time == datetime(2024, 1, 1, 17, 0)
    assert decision.is_auto_checkout is True
    assert decision.days_since_check_in == 2


def test_stale_session_after_workday_end_never_precedes_check_in(calculator):
    decision = calculator.compute_checkout(datetime(2024, 1, 1, 20, 0), datetime(2024, 1, 5, 10, 0))

    assert decision.check_out_time == datetime(2024, 1, 1, 23, 59, 59, 999999)
    assert decision.check_out_time >= datetime(2024, 1, 1, 20, 0)


def test_explicit_time_on_check_in_day_is_used_verbatim(calculator):
    decision = calculator.compute_checkout(
        datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 2, 9, 0), datetime(2024, 1, 1, 16, 45)
    )

    assert decision.check_out_time == datetime(2024, 1, 1, 16, 45)
    assert decision.is_auto_checkout is False


def test_total_hours_rounds_to_two_decimals(calculator):
    assert calculator.total_hours(datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 17, 20)) == 8.33


def test_total_hours_is_capped_at_daily_maximum(calculator):
    assert calculator.total_hours(datetime(2024, 1, 1, 6, 0), datetime(2024, 1, 1, 23, 0)) == 12.0
    assert calculator.total_hours(datetime(2024, 1, 1, 6, 0), datetime(2024, 1, 1, 23, 0), max_hours_per_day=8) == 8.0


def test_total_hours_of_zero_length_session(calculator):
    instant = datetime(2024, 1, 1, 9, 0)

    assert calculator.total_hours(instant, instant) == 0.0


def test_total_hours_rejects_reversed_interval(calculator):
    with pytest.raises(ValidationError):
        calculator.total_hours(datetime(2024, 1, 1, 17, 0), datetime(2024, 1, 1, 9, 0))
