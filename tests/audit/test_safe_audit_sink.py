import logging

from fakes import FailingAuditSink, RecordingAuditSink
from timeclock.audit.model import ActivityEvent
from timeclock.audit.service import SafeAuditSink
from timeclock.core.enums import ActivityAction

EVENT = ActivityEvent(
    action=ActivityAction.CHECK_IN,
    entity_type="attendance",
    entity_id="7",
    description="User checked in",
    user_id="alice",
)


def test_events_pass_through_to_inner_sink():
    inner = RecordingAuditSink()

    SafeAuditSink(inner).record(EVENT)

    assert inner.events == [EVENT]


def test_failures_are_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR, logger="timeclock.audit.service"):
        SafeAuditSink(FailingAuditSink()).record(EVENT)

    assert "Failed to record activity checked-in for attendance 7" in caplog.text
    assert caplog.records[0].exc_info is not None
