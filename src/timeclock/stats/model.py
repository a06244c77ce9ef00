from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from ..core.enums import StatsPeriod


@dataclass(frozen=True)
class AttendanceStatistics:
    period: StatsPeriod
    start_date: date
    end_date: date
    total_hours: float
    average_hours: float
    attendance_days: int
    total_working_days: int
    days_on_time: int
    days_late: int
    attendance_rate: float
    on_time_rate: float


@dataclass(frozen=True)
class AttendanceGroup:
    period: str
    display_label: str
    total_hours: float
    check_in_count: int
    unique_days_count: int
    average_hours_per_day: float
    records: list = field(default_factory=list)


@dataclass(frozen=True)
class TodayCounts:
    day: date
    present: int
    late: int
    absent: int
