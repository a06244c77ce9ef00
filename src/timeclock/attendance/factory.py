from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .strategies.base import CheckoutStrategy, calendar_days_between
from .strategies.next_day_strategy import NextDayStrategy
from .strategies.same_day_strategy import ExplicitTimeStrategy, SameDayStrategy
from .strategies.stale_session_strategy import StaleSessionStrategy


@dataclass
class CheckoutStrategyFactory:
    """Factory Pattern: choose the checkout strategy from how old the open session is."""

    def for_checkout(
        self,
        *,
        check_in_time: datetime,
        now: datetime,
        explicit_checkout_time: Optional[datetime] = None,
    ) -> CheckoutStrategy:
        if explicit_checkout_time is not None and explicit_checkout_time.date() == check_in_time.date():
            return ExplicitTimeStrategy(explicit_checkout_time)

        days = calendar_days_between(check_in_time, now)
        if days <= 0:
            return SameDayStrategy()
        if days == 1:
            return NextDayStrategy()
        return StaleSessionStrategy()
