from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord, Page
from ..attendance.policy import WorkdayPolicy
from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import business_days_between, start_of_week
from ..core import constants
from ..core.enums import GroupBy, StatsPeriod
from ..core.exceptions import ValidationError
from ..permissions.model import Action
from ..permissions.policy import AccessPolicy
from ..permissions.repository import PermissionRepository
from .model import AttendanceGroup, AttendanceStatistics, TodayCounts

logger = logging.getLogger(__name__)


def _period_start(period: StatsPeriod, now: datetime) -> datetime:
    today = now.date()
    if period == StatsPeriod.DAY:
        first = today
    elif period == StatsPeriod.WEEK:
        first = start_of_week(today)
    elif period == StatsPeriod.YEAR:
        first = date(today.year, 1, 1)
    else:
        first = today.replace(day=1)
    return datetime.combine(first, time.min)


def _parse_period(value) -> StatsPeriod:
    try:
        return StatsPeriod(value)
    except ValueError:
        return StatsPeriod.MONTH


def _group_key(day: date, group_by: GroupBy) -> tuple[str, str]:
    if group_by == GroupBy.WEEK:
        first = start_of_week(day)
        last = first + timedelta(days=6)
        label = f"Week of {first:%b} {first.day} - {last:%b} {last.day}, {last.year}"
        return first.isoformat(), label
    if group_by == GroupBy.MONTH:
        return f"{day:%Y-%m}", f"{day:%B %Y}"
    return day.isoformat(), f"{day:%A, %B} {day.day}, {day.year}"


class StatsService:
    """Read-only aggregates over attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        staff: PermissionRepository,
        policy: WorkdayPolicy,
        access: AccessPolicy,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._staff = staff
        self._policy = policy
        self._access = access
        self._clock = clock or SystemClock()

    def _capped(self, record: AttendanceRecord) -> float:
        if not record.total_hours:
            return 0.0
        return min(float(record.total_hours), self._policy.max_hours_per_day)

    def user_statistics(self, user_id: str, period=StatsPeriod.MONTH) -> AttendanceStatistics:
        period = _parse_period(period)
        now = self._clock.now()
        start = _period_start(period, now)
        records = self._attendance.list_records(user_id=user_id, start=start, end=now)

        daily_hours: dict[date, float] = {}
        on_time: set[date] = set()
        late: set[date] = set()
        present: set[date] = set()

        # Newest first, so the first record seen for a day decides its punctuality.
        for record in records:
            day = record.check_in_time.date()
            present.add(day)
            if day not in on_time and day not in late:
                (late if self._policy.is_late(record.check_in_time) else on_time).add(day)
            if record.total_hours:
                daily_hours[day] = daily_hours.get(day, 0.0) + self._capped(record)

        cap = self._policy.max_hours_per_day
        total_hours = sum(min(hours, cap) for hours in daily_hours.values())
        working_days = business_days_between(start.date(), now.date())
        attended = len(present)
        marked = len(on_time) + len(late)

        return AttendanceStatistics(
            period=period,
            start_date=start.date(),
            end_date=now.date(),
            total_hours=round(total_hours, 2),
            average_hours=round(total_hours / attended, 2) if attended else 0.0,
            attendance_days=attended,
            total_working_days=working_days,
            days_on_time=len(on_time),
            days_late=len(late),
            attendance_rate=round(attended / working_days * 100, 2) if working_days else 0.0,
            on_time_rate=round(len(on_time) / marked * 100, 2) if marked else 0.0,
        )

    def grouped_history(
        self,
        user_id: str,
        group_by,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 1,
        limit: int = constants.DEFAULT_HISTORY_LIMIT,
    ) -> Page:
        """Records of ``user_id`` bucketed by day, ISO week or month, newest bucket first."""
        try:
            group_by = GroupBy(group_by)
        except ValueError:
            raise ValidationError(f"Unknown grouping: {group_by!r}")

        groups = self._group(self._attendance.list_records(user_id=user_id, start=start, end=end), group_by)
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        offset = (page - 1) * limit
        return Page(items=groups[offset : offset + limit], total=len(groups), page=page, limit=limit)

    def _group(self, records: Iterable[AttendanceRecord], group_by: GroupBy) -> list[AttendanceGroup]:
        buckets: "OrderedDict[str, dict]" = OrderedDict()
        for record in records:
            day = record.check_in_time.date()
            key, label = _group_key(day, group_by)
            bucket = buckets.setdefault(
                key, {"label": label, "records": [], "hours": 0.0, "count": 0, "days": set()}
            )
            bucket["records"].append(record)
            bucket["hours"] += self._capped(record)
            bucket["count"] += 1
            bucket["days"].add(day)

        groups = []
        for key, bucket in buckets.items():
            unique_days = len(bucket["days"])
            groups.append(
                AttendanceGroup(
                    period=key,
                    display_label=bucket["label"],
                    total_hours=round(bucket["hours"], 2),
                    check_in_count=bucket["count"],
                    unique_days_count=unique_days,
                    average_hours_per_day=round(bucket["hours"] / unique_days, 2) if unique_days else 0.0,
                    records=bucket["records"],
                )
            )
        groups.sort(key=lambda g: g.period, reverse=True)
        return groups

    def today_counts(self, principal_id: str) -> TodayCounts:
        """Users present and late today, plus tracked staff who have not checked in."""
        self._access.require(
            principal_id, Action.LIST, message="You do not have permission to access attendance statistics"
        )
        now = self._clock.now()
        bounds = self._policy.day_boundaries(now.date())
        records = self._attendance.list_records(start=bounds.start, end=bounds.end)

        first_check_in: dict[str, datetime] = {}
        for record in records:
            seen = first_check_in.get(record.user_id)
            if seen is None or record.check_in_time < seen:
                first_check_in[record.user_id] = record.check_in_time

        present = len(first_check_in)
        late = sum(1 for instant in first_check_in.values() if self._policy.is_late(instant))
        if self._policy.is_weekend(now.date()):
            absent = 0
        else:
            staff = self._staff.count_active_users_without(constants.ATTENDANCE_MANAGEMENT)
            absent = max(0, staff - present)

        logger.debug("Today %s: present=%s late=%s absent=%s", now.date(), present, late, absent)
        return TodayCounts(day=now.date(), present=present, late=late, absent=absent)
