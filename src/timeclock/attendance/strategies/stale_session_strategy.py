from __future__ import annotations

from datetime import datetime

from ..policy import WorkdayPolicy
from .base import CheckoutDecision, CheckoutStrategy, calendar_days_between
from .next_day_strategy import bounded_checkout


class StaleSessionStrategy(CheckoutStrategy):
    """Session forgotten for two or more days: close it at the end of its own workday.

    A check-in made after that workday end would get a checkout before it, so
    such sessions fall back to the next-day rule.
    """

    def decide(self, *, check_in_time: datetime, now: datetime, policy: WorkdayPolicy) -> CheckoutDecision:
        workday_end = policy.workday_end(check_in_time.date())
        check_out_time = workday_end if check_in_time <= workday_end else bounded_checkout(check_in_time, policy)
        return CheckoutDecision(
            check_out_time=check_out_time,
            is_auto_checkout=True,
            days_since_check_in=calendar_days_between(check_in_time, now),
        )
