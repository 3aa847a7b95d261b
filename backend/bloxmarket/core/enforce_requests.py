"""Review Requests — staff decisions on verification and middleman requests.

Invariants:
    - A decision needs a pending request; the request flag is cleared either way
    - Approval raises the role only from the roles listed in PROMOTABLE_FROM;
      staff roles (and middleman, for verification) are kept as they are
    - A banned user cannot be approved, only rejected
    - plan_request_decision is PURE and returns the full column group to write

Design Decisions:
    - Approval grants a role instead of separate is_verified/is_middleman flags:
      the role column already carries verified/middleman
"""

from datetime import datetime

from bloxmarket.core.domain_types import ReviewRequest, UserRole
from bloxmarket.core.enforce_ban import plan_role_change
from bloxmarket.core.errors import InvalidTransitionError

REQUEST_FLAGS = {
    ReviewRequest.VERIFICATION: "verification_requested",
    ReviewRequest.MIDDLEMAN: "middleman_requested",
}

GRANTED_ROLE = {
    ReviewRequest.VERIFICATION: UserRole.VERIFIED,
    ReviewRequest.MIDDLEMAN: UserRole.MIDDLEMAN,
}

PROMOTABLE_FROM = {
    ReviewRequest.VERIFICATION: {UserRole.USER},
    ReviewRequest.MIDDLEMAN: {UserRole.USER, UserRole.VERIFIED},
}


def plan_request_decision(
    kind: ReviewRequest,
    approved: bool,
    role: UserRole | str,
    requested: bool,
    now: datetime,
) -> dict:
    """Column values for approving or rejecting a pending request."""
    role = UserRole(role)
    flag = REQUEST_FLAGS[kind]
    outcome = "approved" if approved else "rejected"
    if not requested:
        raise InvalidTransitionError("User", f"no pending {kind.value} request", outcome)

    changes = {flag: False}
    if not approved:
        return changes
    if role is UserRole.BANNED:
        raise InvalidTransitionError("User", role.value, GRANTED_ROLE[kind].value)
    if role in PROMOTABLE_FROM[kind]:
        changes.update(plan_role_change(GRANTED_ROLE[kind], None, now))
    return changes
