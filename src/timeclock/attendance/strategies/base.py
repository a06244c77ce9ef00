from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ..policy import WorkdayPolicy


@dataclass(frozen=True)
class CheckoutDecision:
    check_out_time: datetime
    is_auto_checkout: bool
    days_since_check_in: int = 0


def calendar_days_between(check_in_time: datetime, now: datetime) -> int:
    return (now.date() - check_in_time.date()).days


class CheckoutStrategy(ABC):
    """Strategy Pattern: encapsulate how the checkout instant of a session is chosen."""

    @abstractmethod
    def decide(self, *, check_in_time: datetime, now: datetime, policy: WorkdayPolicy) -> CheckoutDecision:
        raise NotImplementedError
