from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import hours_between
from ..core.exceptions import ValidationError
from .factory import CheckoutStrategyFactory
from .policy import WorkdayPolicy
from .strategies.base import CheckoutDecision


class DurationCalculator:
    """Turns a session's instants into a checkout decision and capped hours."""

    def __init__(self, policy: WorkdayPolicy, *, strategy_factory: CheckoutStrategyFactory | None = None):
        self._policy = policy
        self._factory = strategy_factory or CheckoutStrategyFactory()

    @property
    def policy(self) -> WorkdayPolicy:
        return self._policy

    def compute_checkout(
        self,
        check_in_time: datetime,
        now: datetime,
        explicit_checkout_time: Optional[datetime] = None,
    ) -> CheckoutDecision:
        strategy = self._factory.for_checkout(
            check_in_time=check_in_time,
            now=now,
            explicit_checkout_time=explicit_checkout_time,
        )
        return strategy.decide(check_in_time=check_in_time, now=now, policy=self._policy)

    def total_hours(
        self,
        check_in_time: datetime,
        check_out_time: datetime,
        *,
        max_hours_per_day: Optional[float] = None,
    ) -> float:
        """Elapsed hours capped at the daily maximum, rounded to 2 decimals.

        The cap is the same for manual, automatic and corrected checkouts.
        """
        if check_out_time < check_in_time:
            raise ValidationError("Check-out time cannot be earlier than check-in time")

        cap = self._policy.max_hours_per_day if max_hours_per_day is None else max_hours_per_day
        raw = hours_between(check_in_time, check_out_time)
        return round(min(raw, cap), 2)
