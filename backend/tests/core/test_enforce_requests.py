"""Review requests — approval grants a role, every decision clears the flag."""

from datetime import datetime, timezone

import pytest

from bloxmarket.core.domain_types import ReviewRequest, UserRole
from bloxmarket.core.enforce_requests import plan_request_decision
from bloxmarket.core.errors import InvalidTransitionError

NOW = datetime(2026, 5, 1, tzinfo=timezone.utc)
GRANT = {"ban_reason": None, "banned_at": None}


def test_approve_verification_from_user():
    planned = plan_request_decision(
        ReviewRequest.VERIFICATION, True, UserRole.USER, True, NOW,
    )
    assert planned == {"verification_requested": False, "role": "verified", **GRANT}


def test_approve_middleman_from_verified():
    planned = plan_request_decision(
        ReviewRequest.MIDDLEMAN, True, "verified", True, NOW,
    )
    assert planned == {"middleman_requested": False, "role": "middleman", **GRANT}


def test_rejection_only_clears_flag():
    planned = plan_request_decision(
        ReviewRequest.MIDDLEMAN, False, UserRole.USER, True, NOW,
    )
    assert planned == {"middleman_requested": False}


@pytest.mark.parametrize("kind,role", [
    (ReviewRequest.VERIFICATION, UserRole.MIDDLEMAN),
    (ReviewRequest.VERIFICATION, UserRole.ADMIN),
    (ReviewRequest.MIDDLEMAN, UserRole.MODERATOR),
])
def test_approval_keeps_higher_roles(kind, role):
    planned = plan_request_decision(kind, True, role, True, NOW)
    assert "role" not in planned


def test_decision_requires_pending_request():
    with pytest.raises(InvalidTransitionError):
        plan_request_decision(ReviewRequest.VERIFICATION, True, "user", False, NOW)


def test_banned_user_cannot_be_approved():
    with pytest.raises(InvalidTransitionError) as exc:
        plan_request_decision(ReviewRequest.VERIFICATION, True, "banned", True, NOW)
    assert exc.value.current == "banned"


def test_banned_user_can_be_rejected():
    planned = plan_request_decision(
        ReviewRequest.VERIFICATION, False, "banned", True, NOW,
    )
    assert planned == {"verification_requested": False}
