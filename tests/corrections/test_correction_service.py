from datetime import datetime

import pytest

from fakes import RecordingAuditSink, make_container
from timeclock.core.enums import ActivityAction, CorrectionStatus
from timeclock.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


def _closed_record(c, user_id="alice"):
    c.clock.set(datetime(2024, 1, 1, 9, 30))
    c.attendance_service.check_in(user_id)
    c.clock.set(datetime(2024, 1, 1, 16, 0))
    return c.attendance_service.check_out(user_id).record


def _request(c, record, **overrides):
    values = dict(
        requested_check_in_time=datetime(2024, 1, 1, 9, 0),
        requested_check_out_time=datetime(2024, 1, 1, 17, 0),
        reason="Forgot to check in on arrival",
    )
    values.update(overrides)
    return c.correction_service.request_correction(record.attendance_id, record.user_id, **values)


def test_request_snapshots_original_times():
    audit = RecordingAuditSink()
    c = make_container(audit_sink=audit)
    record = _closed_record(c)

    request = _request(c, record)

    assert request.status == CorrectionStatus.PENDING
    assert request.original_check_in_time == datetime(2024, 1, 1, 9, 30)
    assert request.original_check_out_time == datetime(2024, 1, 1, 16, 0)
    assert audit.events[-1].action == ActivityAction.CORRECTION_REQUESTED
    assert audit.events[-1].description.endswith("Forgot to check in on arrival")


def test_audit_description_truncates_long_reason():
    audit = RecordingAuditSink()
    c = make_container(audit_sink=audit)
    record = _closed_record(c)

    _request(c, record, reason="x" * 80)

    assert audit.events[-1].description == "Requested correction for attendance record: " + "x" * 50 + "..."


def test_request_for_missing_record():
    c = make_container()

    with pytest.raises(NotFoundError):
        c.correction_service.request_correction(42, "alice", requested_check_in_time=datetime(2024, 1, 1, 9, 0), reason="valid reason")


def test_request_by_non_owner_is_forbidden():
    c = make_container()
    record = _closed_record(c)

    with pytest.raises(AuthorizationError):
        c.correction_service.request_correction(
            record.attendance_id, "bob", requested_check_in_time=datetime(2024, 1, 1, 9, 0), reason="valid reason"
        )


@pytest.mark.parametrize("reason", ["", "   ", "four", "  abc  "])
def test_request_requires_meaningful_reason(reason):
    c = make_container()
    record = _closed_record(c)

    with pytest.raises(ValidationError):
        _request(c, record, reason=reason)


def test_request_rejects_check_out_before_check_in():
    c = make_container()
    record = _closed_record(c)

    with pytest.raises(ValidationError):
        _request(c, record, requested_check_out_time=datetime(2024, 1, 1, 8, 0))


def test_approval_overwrites_times_and_recomputes_hours():
    audit = RecordingAuditSink()
    c = make_container(audit_sink=audit)
    record = _closed_record(c)
    request = _request(c, record)
    c.clock.set(datetime(2024, 1, 2, 10, 0))

    result = c.correction_service.review_correction(request.request_id, "mgr", "approved", "ok")

    assert result.request.status == CorrectionStatus.APPROVED
    assert result.request.reviewed_by == "mgr"
    assert result.request.reviewed_at == datetime(2024, 1, 2, 10, 0)
    assert result.request.review_notes == "ok"
    assert result.record.check_in_time == datetime(2024, 1, 1, 9, 0)
    assert result.record.check_out_time == datetime(2024, 1, 1, 17, 0)
    assert result.record.total_hours == 8.0
    assert result.record.auto_checkout is False
    assert audit.events[-1].action == ActivityAction.CORRECTION_APPROVED
    assert audit.events[-1].description == "Approved correction request: ok"


def test_approval_keeps_auto_checkout_flag():
    c = make_container(now=datetime(2024, 1, 1, 9, 0))
    c.attendance_service.check_in("alice")
    c.clock.set(datetime(2024, 1, 2, 10, 0))
    record = c.attendance_service.check_out("alice").record
    request = _request(c, record, requested_check_in_time=None, requested_check_out_time=datetime(2024, 1, 1, 18, 0))

    result = c.correction_service.review_correction(request.request_id, "mgr", "approved")

    assert result.record.auto_checkout is True
    assert result.record.check_in_time == datetime(2024, 1, 1, 9, 0)
    assert result.record.total_hours == 9.0


def test_second_review_fails_and_does_not_reapply():
    c = make_container()
    record = _closed_record(c)
    request = _request(c, record)
    c.correction_service.review_correction(request.request_id, "mgr", "approved")
    # A later manual edit must survive a repeated review.
    after = c.attendance_repo.find_by_id(record.attendance_id)
    c.attendance_repo.update(after.attendance_id, {"notes": "kept"}, expected_version=after.version)

    with pytest.raises(InvalidStateError):
        c.correction_service.review_correction(request.request_id, "mgr", "rejected")

    stored = c.attendance_repo.find_by_id(record.attendance_id)
    assert stored.notes == "kept"
    assert stored.version == after.version + 1
    assert c.corrections_repo.get(request.request_id).status == CorrectionStatus.APPROVED


def test_rejection_leaves_record_untouched():
    audit = RecordingAuditSink()
    c = make_container(audit_sink=audit)
    record = _closed_record(c)
    request = _request(c, record)

    result = c.correction_service.review_correction(request.request_id, "mgr", "rejected")

    assert result.request.status == CorrectionStatus.REJECTED
    assert result.record is None
    assert c.attendance_repo.find_by_id(record.attendance_id) == record
    assert audit.events[-1].description == "Rejected correction request: No notes provided"


def test_review_requires_permission():
    c = make_container()
    record = _closed_record(c)
    request = _request(c, record)

    with pytest.raises(AuthorizationError):
        c.correction_service.review_correction(request.request_id, "alice", "approved")


@pytest.mark.parametrize("decision", ["pending", "maybe", None])
def test_review_rejects_unknown_decision(decision):
    c = make_container()
    record = _closed_record(c)
    request = _request(c, record)

    with pytest.raises(ValidationError):
        c.correction_service.review_correction(request.request_id, "mgr", decision)


def test_review_of_missing_request():
    c = make_container()

    with pytest.raises(NotFoundError):
        c.correction_service.review_correction(99, "mgr", "approved")


def test_reviewer_listing_filters_and_pages():
    c = make_container()
    record = _closed_record(c)
    first = _request(c, record)
    _request(c, record, reason="second attempt at fixing")
    c.correction_service.review_correction(first.request_id, "mgr", "rejected")

    pending = c.correction_service.list_for_reviewer("mgr", status="pending")
    everything = c.correction_service.list_for_reviewer("mgr", status="all", page=1, limit=1)

    assert pending.total == 1
    assert everything.total == 2
    assert len(everything.items) == 1
    with pytest.raises(AuthorizationError):
        c.correction_service.list_for_reviewer("alice")


def test_list_mine_only_returns_own_requests():
    c = make_container()
    _request(c, _closed_record(c, "alice"))
    c.clock.set(datetime(2024, 1, 2, 9, 0))
    bob_record = c.attendance_service.check_in("bob").record
    c.correction_service.request_correction(
        bob_record.attendance_id, "bob", requested_check_in_time=datetime(2024, 1, 2, 8, 0), reason="came in early"
    )

    assert [r.user_id for r in c.correction_service.list_mine("alice")] == ["alice"]


def test_review_rolls_back_when_record_changed_after_it_was_read(monkeypatch):
    c = make_container()
    record = _closed_record(c)
    request = _request(c, record)
    decide = c.corrections_repo.decide

    def decide_after_concurrent_edit(decision):
        current = c.attendance_repo.find_by_id(record.attendance_id)
        c.attendance_repo.update(record.attendance_id, {"notes": "edited"}, expected_version=current.version)
        return decide(decision)

    monkeypatch.setattr(c.corrections_repo, "decide", decide_after_concurrent_edit)

    with pytest.raises(ConflictError):
        c.correction_service.review_correction(request.request_id, "mgr", "approved")

    assert c.corrections_repo.get(request.request_id).status == CorrectionStatus.PENDING
    stored = c.attendance_repo.find_by_id(record.attendance_id)
    assert stored.check_in_time == datetime(2024, 1, 1, 9, 30)
    assert stored.check_out_time == datetime(2024, 1, 1, 16, 0)
    assert stored.notes == "edited"
