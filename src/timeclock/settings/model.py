from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time
from typing import Optional

from ..core import constants


@dataclass(frozen=True)
class AttendanceSettings:
    """Per-user attendance preferences. ``work_days`` uses 0 = Sunday ... 6 = Saturday."""

    user_id: str
    work_hours_per_day: float = constants.DEFAULT_WORK_HOURS_PER_DAY
    work_days: str = constants.DEFAULT_WORK_DAYS
    reminder_enabled: bool = constants.DEFAULT_REMINDER_ENABLED
    reminder_time: Optional[str] = None
    auto_checkout_enabled: bool = constants.DEFAULT_AUTO_CHECKOUT_ENABLED
    auto_checkout_time: Optional[str] = None
    settings_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def work_day_set(self) -> frozenset:
        return frozenset(int(part) for part in self.work_days.split(",") if part.strip())

    def auto_checkout_at(self) -> Optional[time]:
        if not self.auto_checkout_time:
            return None
        return datetime.strptime(self.auto_checkout_time, "%H:%M").time()


@dataclass(frozen=True)
class SettingsUpdate:
    work_hours_per_day: float
    work_days: str
    reminder_enabled: bool
    auto_checkout_enabled: bool
    reminder_time: Optional[str] = None
    auto_checkout_time: Optional[str] = None
