from datetime import date, datetime

import pytest

from fakes import make_container
from timeclock.attendance.model import AttendanceRecord
from timeclock.core.enums import StatsPeriod
from timeclock.core.exceptions import AuthorizationError, ValidationError


def _add(c, user_id, check_in, check_out=None):
    hours = None
    if check_out is not None:
        hours = round((check_out - check_in).total_seconds() / 3600, 2)
    return c.attendance_repo.add(
        AttendanceRecord(
            attendance_id=0,
            user_id=user_id,
            check_in_time=check_in,
            check_out_time=check_out,
            total_hours=hours,
        )
    )


@pytest.fixture
def week():
    c = make_container(now=datetime(2024, 1, 5, 18, 0))
    _add(c, "alice", datetime(2024, 1, 1, 9, 0), datetime(2024, 1, 1, 17, 0))
    _add(c, "alice", datetime(2024, 1, 2, 9, 30), datetime(2024, 1, 2, 17, 30))
    _add(c, "alice", datetime(2024, 1, 3, 8, 0), datetime(2024, 1, 3, 12, 0))
    _add(c, "alice", datetime(2024, 1, 3, 13, 0), datetime(2024, 1, 3, 23, 0))
    _add(c, "alice", datetime(2023, 12, 29, 9, 0), datetime(2023, 12, 29, 17, 0))
    _add(c, "bob", datetime(2024, 1, 4, 9, 0), datetime(2024, 1, 4, 17, 0))
    return c


def test_weekly_statistics(week):
    stats = week.stats_service.user_statistics("alice", "week")

    assert stats.period == StatsPeriod.WEEK
    assert stats.start_date == date(2024, 1, 1)
    assert stats.end_date == date(2024, 1, 5)
    # Wednesday's 14 hours are capped at the daily maximum.
    assert stats.total_hours == 28.0
    assert stats.attendance_days == 3
    assert stats.average_hours == 9.33
    assert stats.total_working_days == 5
    assert stats.attendance_rate == 60.0
    # The latest record of a day decides punctuality; Wednesday's is the 13:00 one.
    assert stats.days_on_time == 1
    assert stats.days_late == 2
    assert stats.on_time_rate == 33.33


def test_unknown_period_falls_back_to_month(week):
    stats = week.stats_service.user_statistics("alice", "fortnight")

    assert stats.period == StatsPeriod.MONTH
    assert stats.start_date == date(2024, 1, 1)


def test_year_period_starts_on_january_first(week):
    assert week.stats_service.user_statistics("alice", "year").start_date == date(2024, 1, 1)


def test_statistics_without_records_are_zero():
    c = make_container(now=datetime(2024, 1, 6, 12, 0))

    stats = c.stats_service.user_statistics("alice", "day")

    assert stats.total_hours == 0.0
    assert stats.average_hours == 0.0
    assert stats.total_working_days == 0
    assert stats.attendance_rate == 0.0
    assert stats.on_time_rate == 0.0


def test_grouped_history_by_day(week):
    page = week.stats_service.grouped_history("alice", "day", start=datetime(2024, 1, 1), end=datetime(2024, 1, 5, 23, 59))

    assert [g.period for g in page.items] == ["2024-01-03", "2024-01-02", "2024-01-01"]
    wednesday = page.items[0]
    assert wednesday.check_in_count == 2
    assert wednesday.total_hours == 14.0
    assert wednesday.unique_days_count == 1
    assert wednesday.display_label == "Wednesday, January 3, 2024"


def test_grouped_history_by_week_and_month(week):
    weeks = week.stats_service.grouped_history("alice", "week").items
    months = week.stats_service.grouped_history("alice", "month").items

    assert [g.period for g in weeks] == ["2024-01-01", "2023-12-25"]
    assert weeks[0].display_label == "Week of Jan 1 - Jan 7, 2024"
    assert weeks[0].unique_days_count == 3
    assert weeks[0].average_hours_per_day == round(30.0 / 3, 2)
    assert [g.period for g in months] == ["2024-01", "2023-12"]
    assert months[1].display_label == "December 2023"


def test_grouped_history_caps_each_record():
    c = make_container(now=datetime(2024, 1, 2, 12, 0))
    _add(c, "alice", datetime(2024, 1, 1, 6, 0), datetime(2024, 1, 1, 23, 0))

    group = c.stats_service.grouped_history("alice", "day").items[0]

    assert group.total_hours == 12.0


def test_grouped_history_rejects_unknown_grouping(week):
    with pytest.raises(ValidationError):
        week.stats_service.grouped_history("alice", "quarter")


def test_today_counts_on_a_weekday():
    c = make_container(now=datetime(2024, 1, 2, 11, 0), staff=5)
    _add(c, "alice", datetime(2024, 1, 2, 9, 0))
    _add(c, "bob", datetime(2024, 1, 2, 9, 40))
    _add(c, "carol", datetime(2024, 1, 2, 8, 0), datetime(2024, 1, 2, 8, 30))
    _add(c, "carol", datetime(2024, 1, 2, 10, 0))
    _add(c, "dave", datetime(2024, 1, 1, 9, 0))

    counts = c.stats_service.today_counts("mgr")

    assert counts.present == 3
    assert counts.late == 1
    assert counts.absent == 2


def test_absent_count_never_negative():
    c = make_container(now=datetime(2024, 1, 2, 11, 0), staff=1)
    _add(c, "alice", datetime(2024, 1, 2, 9, 0))
    _add(c, "bob", datetime(2024, 1, 2, 9, 0))

    assert c.stats_service.today_counts("mgr").absent == 0


def test_absent_count_is_zero_on_weekends():
    c = make_container(now=datetime(2024, 1, 6, 11, 0), staff=5)

    assert c.stats_service.today_counts("mgr").absent == 0


def test_today_counts_requires_permission():
    c = make_container()

    with pytest.raises(AuthorizationError):
        c.stats_service.today_counts("alice")
