from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Mapping, Optional

from ..core import constants


@dataclass(frozen=True)
class DayBounds:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class WorkdayPolicy:
    """Calendar math for one configured workday. Pure: no clock, no I/O."""

    work_start: time = time(constants.WORK_START_HOUR, constants.WORK_START_MINUTE)
    work_end: time = time(constants.WORK_END_HOUR, constants.WORK_END_MINUTE)
    late_grace_minutes: int = constants.DEFAULT_LATE_GRACE_MINUTES
    hours_per_day: float = constants.HOURS_PER_DAY
    max_hours_per_day: float = constants.MAX_HOURS_PER_DAY
    default_checkout_hours: float = constants.DEFAULT_CHECKOUT_HOURS
    weekend_weekdays: tuple[int, ...] = constants.WEEKEND_WEEKDAYS

    @classmethod
    def from_settings(cls, values: Optional[Mapping[str, object]]) -> "WorkdayPolicy":
        """Build from the ``WORKDAY`` settings dict; missing keys keep the defaults."""
        values = values or {}
        kwargs: dict = {}
        if values.get("WORK_START"):
            kwargs["work_start"] = datetime.strptime(str(values["WORK_START"]), "%H:%M").time()
        if values.get("WORK_END"):
            kwargs["work_end"] = datetime.strptime(str(values["WORK_END"]), "%H:%M").time()
        if values.get("LATE_GRACE_MINUTES") is not None:
            kwargs["late_grace_minutes"] = int(values["LATE_GRACE_MINUTES"])
        if values.get("HOURS_PER_DAY") is not None:
            kwargs["hours_per_day"] = float(values["HOURS_PER_DAY"])
        if values.get("MAX_HOURS_PER_DAY") is not None:
            kwargs["max_hours_per_day"] = float(values["MAX_HOURS_PER_DAY"])
        if values.get("DEFAULT_CHECKOUT_HOURS") is not None:
            kwargs["default_checkout_hours"] = float(values["DEFAULT_CHECKOUT_HOURS"])
        return cls(**kwargs)

    def day_boundaries(self, day: date) -> DayBounds:
        return DayBounds(start=datetime.combine(day, time.min), end=datetime.combine(day, time.max))

    def end_of_day(self, day: date) -> datetime:
        return datetime.combine(day, time.max)

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in self.weekend_weekdays

    def is_work_day(self, day: date) -> bool:
        return not self.is_weekend(day)

    def workday_start(self, day: date) -> datetime:
        return datetime.combine(day, self.work_start)

    def workday_end(self, day: date) -> datetime:
        return datetime.combine(day, self.work_end)

    def late_threshold(self, day: date) -> datetime:
        return self.workday_start(day) + timedelta(minutes=self.late_grace_minutes)

    def is_late(self, check_in_time: datetime) -> bool:
        return check_in_time > self.late_threshold(check_in_time.date())

    def is_within_work_hours(self, instant: datetime) -> bool:
        moment = instant.time().replace(second=0, microsecond=0)
        return self.work_start <= moment < self.work_end
