from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..attendance.duration import DurationCalculator
from ..attendance.model import Page
from ..attendance.repository import AttendanceRepository
from ..audit.model import ActivityEvent
from ..audit.repository import AuditSink
from ..common.clock import Clock, SystemClock
from ..common.validators import require_min_length
from ..core import constants
from ..core.enums import ActivityAction, CorrectionStatus
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ..permissions.model import Action
from ..permissions.policy import AccessPolicy
from .model import CorrectionRequest, NewCorrectionRequest, ReviewDecision, ReviewResult
from .repository import CorrectionRepository

logger = logging.getLogger(__name__)

_DECISIONS = {CorrectionStatus.APPROVED, CorrectionStatus.REJECTED}


def _reason_preview(reason: str) -> str:
    preview = reason[: constants.AUDIT_REASON_PREVIEW]
    return preview + ("..." if len(reason) > constants.AUDIT_REASON_PREVIEW else "")


def _parse_decision(decision) -> CorrectionStatus:
    try:
        status = CorrectionStatus(decision)
    except ValueError:
        raise ValidationError("Decision must be 'approved' or 'rejected'")
    if status not in _DECISIONS:
        raise ValidationError("Decision must be 'approved' or 'rejected'")
    return status


def _parse_status_filter(status) -> Optional[CorrectionStatus]:
    if status is None or status == "" or status == "all":
        return None
    try:
        return CorrectionStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown correction status: {status!r}")


class CorrectionService:
    """Correction requests: owners propose new times, attendance managers approve or reject them."""

    def __init__(
        self,
        corrections: CorrectionRepository,
        attendance: AttendanceRepository,
        calculator: DurationCalculator,
        audit: AuditSink,
        access: AccessPolicy,
        *,
        clock: Clock | None = None,
    ):
        self._corrections = corrections
        self._attendance = attendance
        self._calculator = calculator
        self._audit = audit
        self._access = access
        self._clock = clock or SystemClock()

    def request_correction(
        self,
        attendance_id: int,
        requester_id: str,
        *,
        requested_check_in_time: Optional[datetime],
        requested_check_out_time: Optional[datetime] = None,
        reason: str,
    ) -> CorrectionRequest:
        record = self._attendance.find_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        self._access.require(
            requester_id,
            Action.CORRECT,
            record,
            message="You can only request corrections for your own attendance records",
        )

        reason = require_min_length(reason, "Reason", constants.MIN_CORRECTION_REASON_LENGTH)
        if requested_check_in_time is None and requested_check_out_time is None:
            raise ValidationError("A requested check-in or check-out time is required")

        effective_in = requested_check_in_time or record.check_in_time
        effective_out = requested_check_out_time or record.check_out_time
        if effective_out is not None and effective_out <= effective_in:
            raise ValidationError("Requested check-out time must be after check-in time")

        request = self._corrections.create(
            NewCorrectionRequest(
                attendance_id=record.attendance_id,
                user_id=requester_id,
                original_check_in_time=record.check_in_time,
                original_check_out_time=record.check_out_time,
                requested_check_in_time=requested_check_in_time,
                requested_check_out_time=requested_check_out_time,
                reason=reason,
            )
        )
        logger.info("User %s requested correction %s for attendance %s", requester_id, request.request_id, record.attendance_id)
        self._audit.record(
            ActivityEvent(
                action=ActivityAction.CORRECTION_REQUESTED,
                entity_type="attendance",
                entity_id=str(record.attendance_id),
                description=f"Requested correction for attendance record: {_reason_preview(reason)}",
                user_id=requester_id,
            )
        )
        return request

    def review_correction(
        self,
        request_id: int,
        reviewer_id: str,
        decision,
        notes: Optional[str] = None,
    ) -> ReviewResult:
        self._access.require(reviewer_id, Action.REVIEW, message="You do not have permission to review correction requests")
        status = _parse_decision(decision)

        request = self._corrections.get(int(request_id))
        if not request:
            raise NotFoundError("Correction request not found")
        if not request.is_pending:
            raise InvalidStateError("Correction request has already been reviewed")

        notes = (notes or "").strip() or None
        review = ReviewDecision(
            request_id=request.request_id,
            status=status,
            reviewed_by=reviewer_id,
            reviewed_at=self._clock.now(),
            review_notes=notes,
        )

        record = None
        if status == CorrectionStatus.APPROVED:
            record = self._attendance.find_by_id(request.attendance_id)
            if not record:
                raise NotFoundError("Attendance record not found")
            patch = self._approval_patch(request, record)
            review = replace(
                review,
                attendance_id=record.attendance_id,
                attendance_patch=patch,
                expected_version=record.version,
            )

        updated = self._corrections.decide(review)
        if record is not None:
            record = self._attendance.find_by_id(record.attendance_id)

        logger.info("Correction %s %s by %s", updated.request_id, status.value, reviewer_id)
        verb = "Approved" if status == CorrectionStatus.APPROVED else "Rejected"
        self._audit.record(
            ActivityEvent(
                action=ActivityAction.CORRECTION_APPROVED
                if status == CorrectionStatus.APPROVED
                else ActivityAction.CORRECTION_REJECTED,
                entity_type="attendance",
                entity_id=str(updated.attendance_id),
                description=f"{verb} correction request: {notes or 'No notes provided'}",
                user_id=reviewer_id,
            )
        )
        return ReviewResult(request=updated, record=record)

    def _approval_patch(self, request: CorrectionRequest, record) -> dict:
        """Field overwrite for an approved request; the auto-checkout flag is left alone."""
        check_in = request.requested_check_in_time or record.check_in_time
        check_out = request.requested_check_out_time or record.check_out_time

        patch: dict = {}
        if request.requested_check_in_time is not None:
            patch["check_in_time"] = request.requested_check_in_time
        if request.requested_check_out_time is not None:
            patch["check_out_time"] = request.requested_check_out_time
        if check_out is not None:
            patch["total_hours"] = self._calculator.total_hours(check_in, check_out)
        return patch

    def list_for_reviewer(
        self,
        reviewer_id: str,
        *,
        status=None,
        user_id: Optional[str] = None,
        page: int = 1,
        limit: int = constants.DEFAULT_PAGE_SIZE,
    ) -> Page:
        self._access.require(reviewer_id, Action.REVIEW, message="You do not have permission to access correction requests")
        status = _parse_status_filter(status)
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        items = self._corrections.list_requests(status=status, user_id=user_id, offset=(page - 1) * limit, limit=limit)
        total = self._corrections.count_requests(status=status, user_id=user_id)
        return Page(items=list(items), total=total, page=page, limit=limit)

    def list_mine(self, user_id: str, *, status=None) -> list[CorrectionRequest]:
        return list(self._corrections.list_requests(status=_parse_status_filter(status), user_id=user_id))
