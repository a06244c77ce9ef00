from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from ..audit.model import ActivityEvent
from ..audit.repository import AuditSink
from ..common.clock import Clock, SystemClock
from ..core import constants
from ..core.enums import ActivityAction, AttendanceStatus
from ..core.exceptions import (
    AlreadyCheckedInError,
    AlreadyCheckedOutError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..permissions.model import Action
from ..permissions.policy import AccessPolicy
from ..settings.service import SettingsService
from .duration import DurationCalculator
from .model import (
    AttendanceRecord,
    CheckInResult,
    CheckOutResult,
    CurrentAttendance,
    NewAttendance,
    Page,
    Provenance,
    SweepResult,
    provenance_columns,
)
from .repository import AttendanceRepository
from .strategies.base import CheckoutDecision

logger = logging.getLogger(__name__)


class AttendanceService:
    """Lifecycle of attendance records: OPEN on check-in, CLOSED exactly once on checkout."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        settings: SettingsService,
        calculator: DurationCalculator,
        audit: AuditSink,
        access: AccessPolicy,
        *,
        clock: Clock | None = None,
    ):
        self._attendance = attendance
        self._settings = settings
        self._calculator = calculator
        self._audit = audit
        self._access = access
        self._clock = clock or SystemClock()

    @property
    def policy(self):
        return self._calculator.policy

    def check_in(
        self,
        user_id: str,
        provenance: Provenance = Provenance(),
        *,
        project_id: Optional[str] = None,
        task_id: Optional[str] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> CheckInResult:
        now = now or self._clock.now()

        existing = self._attendance.find_open_by_user(user_id)
        if existing:
            raise AlreadyCheckedInError("You are already checked in", record=existing)

        new = NewAttendance(
            user_id=user_id,
            check_in_time=now,
            check_in=provenance,
            project_id=project_id or None,
            task_id=task_id or None,
            notes=(notes or "").strip() or None,
        )
        try:
            record = self._attendance.create(new)
        except ConflictError:
            # Lost the race against a concurrent check-in; report the winner.
            winner = self._attendance.find_open_by_user(user_id)
            if winner:
                raise AlreadyCheckedInError("You are already checked in", record=winner) from None
            raise

        status = AttendanceStatus.LATE if self.policy.is_late(now) else AttendanceStatus.ON_TIME
        logger.info("User %s checked in (attendance=%s, status=%s)", user_id, record.attendance_id, status.value)
        self._audit.record(
            ActivityEvent(
                action=ActivityAction.CHECK_IN,
                entity_type="attendance",
                entity_id=str(record.attendance_id),
                description="User checked in",
                user_id=user_id,
            )
        )
        return CheckInResult(record=record, status=status)

    def check_out(
        self,
        user_id: str,
        provenance: Provenance = Provenance(),
        *,
        attendance_id: Optional[int] = None,
        explicit_checkout_time: Optional[datetime] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> CheckOutResult:
        now = now or self._clock.now()

        if attendance_id is not None:
            record = self._attendance.find_by_id(int(attendance_id))
        else:
            record = self._attendance.find_open_by_user(user_id)
        if not record:
            raise NotFoundError("No active check-in found")

        self._access.require(user_id, Action.CHECKOUT, record, message="You can only check out your own attendance")
        if not record.is_open:
            raise AlreadyCheckedOutError("Already checked out", record=record)

        decision = self._calculator.compute_checkout(record.check_in_time, now, explicit_checkout_time)
        if explicit_checkout_time is not None and decision.check_out_time <= record.check_in_time:
            raise ValidationError("Check-out time must be after check-in time")

        return self._close(record, decision, provenance=provenance, notes=notes, actor_id=user_id)

    def auto_checkout_sweep(
        self,
        user_id: str,
        *,
        force_checkout: bool = False,
        provenance: Provenance = Provenance(),
        now: datetime | None = None,
    ) -> SweepResult:
        """Close the user's open session when their auto-checkout settings (or ``force_checkout``) allow it."""
        settings = self._settings.get_for_user(user_id)
        if not settings.auto_checkout_enabled and not force_checkout:
            return SweepResult(checked_out=False, message="Auto-checkout is not enabled for this user")

        record = self._attendance.find_open_by_user(user_id)
        if not record:
            return SweepResult(checked_out=False, message="No active check-in found")

        now = now or self._clock.now()
        cutoff: Optional[datetime] = None
        cutoff_time = settings.auto_checkout_at()
        if cutoff_time and not force_checkout:
            cutoff = datetime.combine(now.date(), cutoff_time)
            if record.check_in_time >= cutoff:
                # Session began after today's cutoff; tomorrow's cutoff is the next chance.
                cutoff = cutoff + timedelta(days=1)
            if now < cutoff:
                return SweepResult(
                    checked_out=False,
                    message="Not yet time for auto-checkout",
                    record=record,
                    next_checkout=cutoff,
                )

        decision = self._calculator.compute_checkout(record.check_in_time, now, cutoff)
        decision = CheckoutDecision(
            check_out_time=decision.check_out_time,
            is_auto_checkout=True,
            days_since_check_in=decision.days_since_check_in,
        )
        try:
            result = self._close(record, decision, provenance=provenance, notes=None, actor_id=user_id)
        except AlreadyCheckedOutError:
            # A manual checkout committed after the open record was read.
            logger.info("Auto-checkout skipped for attendance %s: already closed", record.attendance_id)
            return SweepResult(checked_out=False, message="No active check-in found")
        return SweepResult(checked_out=True, message="Auto-checkout successful", record=result.record)

    def _close(
        self,
        record: AttendanceRecord,
        decision: CheckoutDecision,
        *,
        provenance: Provenance,
        notes: Optional[str],
        actor_id: str,
    ) -> CheckOutResult:
        total_hours = self._calculator.total_hours(record.check_in_time, decision.check_out_time)

        patch = {
            "check_out_time": decision.check_out_time,
            "total_hours": total_hours,
            "auto_checkout": decision.is_auto_checkout,
            **provenance_columns("check_out", provenance),
        }
        if notes and notes.strip():
            patch["notes"] = notes.strip()

        try:
            updated = self._attendance.update(record.attendance_id, patch, expected_version=record.version)
        except ConflictError:
            current = self._attendance.find_by_id(record.attendance_id)
            if current and not current.is_open:
                raise AlreadyCheckedOutError("Already checked out", record=current) from None
            raise

        if decision.is_auto_checkout:
            action = ActivityAction.AUTO_CHECKOUT
            description = (
                f"System applied automatic checkout ({total_hours} hours) "
                f"for check-in from {decision.days_since_check_in} day(s) ago"
            )
        else:
            action = ActivityAction.CHECK_OUT
            description = f"User checked out after {total_hours} hours"

        logger.info(
            "Attendance %s closed at %s (%s hours, auto=%s)",
            record.attendance_id,
            decision.check_out_time.isoformat(),
            total_hours,
            decision.is_auto_checkout,
        )
        self._audit.record(
            ActivityEvent(
                action=action,
                entity_type="attendance",
                entity_id=str(record.attendance_id),
                description=description,
                user_id=actor_id,
            )
        )
        return CheckOutResult(
            record=updated,
            is_auto_checkout=decision.is_auto_checkout,
            days_since_check_in=decision.days_since_check_in,
        )

    def get_current(self, user_id: str) -> CurrentAttendance:
        record = self._attendance.find_open_by_user(user_id)
        if record:
            return CurrentAttendance(checked_in=True, record=record)
        return CurrentAttendance(checked_in=False, record=self._attendance.find_latest_by_user(user_id))

    def get_record(self, principal_id: str, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.find_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        self._access.require(principal_id, Action.VIEW, record, message="You cannot view this attendance record")
        return record

    def get_history(
        self,
        user_id: str,
        *,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 1,
        limit: int = constants.DEFAULT_HISTORY_LIMIT,
    ) -> Page:
        return self._page(user_id=user_id, start=start, end=end, page=page, limit=limit)

    def list_records(
        self,
        principal_id: str,
        *,
        user_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        page: int = 1,
        limit: int = constants.DEFAULT_PAGE_SIZE,
    ) -> Page:
        self._access.require(principal_id, Action.LIST, message="You do not have permission to view all attendance")
        return self._page(user_id=user_id, start=start, end=end, page=page, limit=limit)

    def _page(self, *, user_id, start, end, page: int, limit: int) -> Page:
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        items = self._attendance.list_records(
            user_id=user_id,
            start=start,
            end=end,
            offset=(page - 1) * limit,
            limit=limit,
        )
        total = self._attendance.count_records(user_id=user_id, start=start, end=end)
        return Page(items=list(items), total=total, page=page, limit=limit)
