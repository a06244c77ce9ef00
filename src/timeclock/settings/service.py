from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import parse_hhmm
from ..common.validators import require_range
from ..core.exceptions import ValidationError
from .model import AttendanceSettings, SettingsUpdate
from .repository import SettingsRepository

logger = logging.getLogger(__name__)


def _normalize_work_days(value: str) -> str:
    parts = [p.strip() for p in (value or "").split(",") if p.strip()]
    if not parts:
        raise ValidationError("At least one work day is required")
    try:
        days = sorted({int(p) for p in parts})
    except ValueError:
        raise ValidationError("Work days must be a comma separated list of day numbers")
    if days[0] < 0 or days[-1] > 6:
        raise ValidationError("Work days must be between 0 (Sunday) and 6 (Saturday)")
    return ",".join(str(d) for d in days)


def _normalize_time(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    if not v:
        return None
    return parse_hhmm(v).strftime("%H:%M")


class SettingsService:
    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get_for_user(self, user_id: str) -> AttendanceSettings:
        """Return the user's settings, creating the documented defaults on first read."""
        existing = self._settings.get_for_user(user_id)
        if existing:
            return existing

        logger.info("Creating default attendance settings for user %s", user_id)
        return self._settings.create_default(AttendanceSettings(user_id=user_id))

    def update_for_user(self, user_id: str, update: SettingsUpdate) -> AttendanceSettings:
        try:
            hours = float(update.work_hours_per_day)
        except (TypeError, ValueError):
            raise ValidationError("Work hours per day must be a number")
        require_range(hours, "Work hours per day", 1, 24)

        settings = AttendanceSettings(
            user_id=user_id,
            work_hours_per_day=hours,
            work_days=_normalize_work_days(update.work_days),
            reminder_enabled=bool(update.reminder_enabled),
            reminder_time=_normalize_time(update.reminder_time),
            auto_checkout_enabled=bool(update.auto_checkout_enabled),
            auto_checkout_time=_normalize_time(update.auto_checkout_time),
        )
        return self._settings.upsert(settings)
