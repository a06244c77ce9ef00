from datetime import date, datetime, time

from timeclock.attendance.policy import WorkdayPolicy


def test_day_boundaries_cover_the_whole_local_day():
    bounds = WorkdayPolicy().day_boundaries(date(2024, 1, 1))

    assert bounds.start == datetime(2024, 1, 1, 0, 0)
    assert bounds.end == datetime(2024, 1, 1, 23, 59, 59, 999999)


def test_weekend_is_saturday_and_sunday():
    policy = WorkdayPolicy()

    assert policy.is_weekend(date(2024, 1, 6))
    assert policy.is_weekend(date(2024, 1, 7))
    assert not policy.is_weekend(date(2024, 1, 8))
    assert policy.is_work_day(date(2024, 1, 5))


def test_late_threshold_is_start_plus_grace():
    policy = WorkdayPolicy()

    assert policy.late_threshold(date(2024, 1, 2)) == datetime(2024, 1, 2, 9, 15)
    assert not policy.is_late(datetime(2024, 1, 2, 9, 15))
    assert policy.is_late(datetime(2024, 1, 2, 9, 15, 0, 1))
    assert not policy.is_late(datetime(2024, 1, 2, 7, 30))


def test_work_hours_are_start_inclusive_end_exclusive():
    policy = WorkdayPolicy()

    assert policy.is_within_work_hours(datetime(2024, 1, 2, 9, 0))
    assert policy.is_within_work_hours(datetime(2024, 1, 2, 16, 59))
    assert not policy.is_within_work_hours(datetime(2024, 1, 2, 17, 0))
    assert not policy.is_within_work_hours(datetime(2024, 1, 2, 8, 59))


def test_from_settings_overrides_only_given_keys():
    policy = WorkdayPolicy.from_settings({"WORK_START": "08:30", "LATE_GRACE_MINUTES": "5", "MAX_HOURS_PER_DAY": 10})

    assert policy.work_start == time(8, 30)
    assert policy.work_end == time(17, 0)
    assert policy.late_grace_minutes == 5
    assert policy.max_hours_per_day == 10.0
    assert policy.default_checkout_hours == 8.0


def test_from_settings_accepts_none():
    assert WorkdayPolicy.from_settings(None) == WorkdayPolicy()
