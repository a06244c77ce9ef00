from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Check-in classification against the late threshold."""

    ON_TIME = "ON_TIME"
    LATE = "LATE"


class CorrectionStatus(str, Enum):
    """Review state of a correction request. Leaves PENDING at most once."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ActivityAction(str, Enum):
    CHECK_IN = "checked-in"
    CHECK_OUT = "checked-out"
    AUTO_CHECKOUT = "auto-checkout"
    CORRECTION_REQUESTED = "correction-requested"
    CORRECTION_APPROVED = "correction-approved"
    CORRECTION_REJECTED = "correction-rejected"


class StatsPeriod(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class GroupBy(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
