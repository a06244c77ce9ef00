from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    """Persistence contract for attendance records.

    ``create`` must check for and insert the open record atomically and raise
    ConflictError when another open record for the user exists. ``update`` is
    an optimistic read-modify-write: it applies only when the stored version
    equals ``expected_version`` (ConflictError otherwise, NotFoundError when
    the row is gone) and bumps the version.
    """

    def find_open_by_user(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def find_latest_by_user(self, user_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, new: NewAttendance) -> AttendanceRecord:
        raise NotImplementedError

    def update(self, attendance_id: int, patch: Mapping[str, Any], *, expected_version: int) -> AttendanceRecord:
        raise NotImplementedError

    def list_records(
        self,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records ordered by check-in time, newest first; bounds are inclusive."""

        raise NotImplementedError

    def count_records(
        self,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> int:
        raise NotImplementedError
