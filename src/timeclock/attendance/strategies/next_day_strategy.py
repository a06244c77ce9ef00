from __future__ import annotations

from datetime import datetime, timedelta

from ..policy import WorkdayPolicy
from .base import CheckoutDecision, CheckoutStrategy, calendar_days_between


def bounded_checkout(check_in_time: datetime, policy: WorkdayPolicy) -> datetime:
    """Workday end if the session began by then, else default hours capped at the end of that day."""
    day = check_in_time.date()
    workday_end = policy.workday_end(day)
    if check_in_time <= workday_end:
        return workday_end
    default_checkout = check_in_time + timedelta(hours=policy.default_checkout_hours)
    return min(default_checkout, policy.end_of_day(day))


class NextDayStrategy(CheckoutStrategy):
    """Session left open since yesterday."""

    def decide(self, *, check_in_time: datetime, now: datetime, policy: WorkdayPolicy) -> CheckoutDecision:
        return CheckoutDecision(
            check_out_time=bounded_checkout(check_in_time, policy),
            is_auto_checkout=True,
            days_since_check_in=calendar_days_between(check_in_time, now),
        )
