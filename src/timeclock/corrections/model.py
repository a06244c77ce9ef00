from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import CorrectionStatus


@dataclass(frozen=True)
class CorrectionRequest:
    """A user's proposal to amend the times of one of their attendance records.

    ``original_*`` is a snapshot taken when the request was made. ``reviewed_*``
    is set only when the request leaves ``pending``.
    """

    request_id: int
    attendance_id: int
    user_id: str
    original_check_in_time: datetime
    original_check_out_time: Optional[datetime]
    requested_check_in_time: Optional[datetime]
    requested_check_out_time: Optional[datetime]
    reason: str
    status: CorrectionStatus = CorrectionStatus.PENDING
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == CorrectionStatus.PENDING


@dataclass(frozen=True)
class NewCorrectionRequest:
    attendance_id: int
    user_id: str
    original_check_in_time: datetime
    original_check_out_time: Optional[datetime]
    requested_check_in_time: Optional[datetime]
    requested_check_out_time: Optional[datetime]
    reason: str


@dataclass(frozen=True)
class ReviewDecision:
    """Everything a review writes, applied by the repository as one unit."""

    request_id: int
    status: CorrectionStatus
    reviewed_by: str
    reviewed_at: datetime
    review_notes: Optional[str] = None
    attendance_id: Optional[int] = None
    attendance_patch: Optional[dict] = None
    expected_version: Optional[int] = None


@dataclass(frozen=True)
class ReviewResult:
    request: CorrectionRequest
    record: Optional[AttendanceRecord] = None
