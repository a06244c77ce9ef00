from datetime import datetime

import pytest

from timeclock.attendance.model import AttendanceRecord
from timeclock.core.exceptions import AuthorizationError
from timeclock.permissions.model import Action, GrantRule
from timeclock.permissions.policy import AccessPolicy, attendance_policy


class FakeOracle:
    def __init__(self, holders):
        self.holders = set(holders)

    def has_permission(self, user_id, permission):
        return user_id in self.holders and permission == "attendance_management"


RECORD = AttendanceRecord(attendance_id=1, user_id="alice", check_in_time=datetime(2024, 1, 1, 9, 0))


def test_owner_may_view_checkout_and_correct_own_record():
    policy = attendance_policy(FakeOracle([]))

    for action in (Action.VIEW, Action.CHECKOUT, Action.CORRECT):
        decision = policy.decide("alice", action, RECORD)
        assert decision.allowed
        assert decision.rule == "owner"


def test_owner_may_not_list_or_review():
    policy = attendance_policy(FakeOracle([]))

    assert not policy.decide("alice", Action.LIST).allowed
    assert not policy.decide("alice", Action.REVIEW, RECORD).allowed


def test_manager_may_view_list_and_review_but_not_check_out_for_others():
    policy = attendance_policy(FakeOracle(["mgr"]))

    assert policy.decide("mgr", Action.VIEW, RECORD).rule == "attendance_management"
    assert policy.decide("mgr", Action.LIST).allowed
    assert policy.decide("mgr", Action.REVIEW).allowed
    assert not policy.decide("mgr", Action.CHECKOUT, RECORD).allowed


def test_require_raises_forbidden_with_message():
    policy = attendance_policy(FakeOracle([]))

    with pytest.raises(AuthorizationError, match="nope"):
        policy.require("bob", Action.VIEW, RECORD, message="nope")


def test_first_granting_rule_wins():
    policy = AccessPolicy(
        [
            GrantRule(name="first", actions=frozenset({"read"}), check=lambda ctx: True),
            GrantRule(name="second", actions=frozenset({"read"}), check=lambda ctx: True),
        ]
    )

    assert policy.decide("anyone", "read").rule == "first"
    assert not policy.decide("anyone", "write").allowed
