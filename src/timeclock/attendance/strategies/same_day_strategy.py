from __future__ import annotations

from datetime import datetime

from ..policy import WorkdayPolicy
from .base import CheckoutDecision, CheckoutStrategy, calendar_days_between


class SameDayStrategy(CheckoutStrategy):
    """Session opened today: close it now, as the user asked."""

    def decide(self, *, check_in_time: datetime, now: datetime, policy: WorkdayPolicy) -> CheckoutDecision:
        return CheckoutDecision(
            check_out_time=now,
            is_auto_checkout=False,
            days_since_check_in=max(calendar_days_between(check_in_time, now), 0),
        )


class ExplicitTimeStrategy(CheckoutStrategy):
    """Caller supplied a checkout instant on the check-in's own day."""

    def __init__(self, explicit_checkout_time: datetime):
        self._explicit = explicit_checkout_time

    def decide(self, *, check_in_time: datetime, now: datetime, policy: WorkdayPolicy) -> CheckoutDecision:
        return CheckoutDecision(
            check_out_time=self._explicit,
            is_auto_checkout=False,
            days_since_check_in=max(calendar_days_between(check_in_time, now), 0),
        )
