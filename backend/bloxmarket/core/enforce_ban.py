"""Ban Enforcement — role changes that keep (role, ban_reason, banned_at) consistent.

Invariants:
    - role == banned  <=>  ban_reason and banned_at are both set
    - plan_role_change is PURE: returns the full column group to write together
    - Leaving banned clears ban_reason and banned_at in the same write

Design Decisions:
    - The returned dict always contains all three columns, so the shell can never
      persist a partial group
"""

from datetime import datetime

from bloxmarket.core.domain_types import UserRole
from bloxmarket.core.errors import ValidationError


def plan_role_change(
    new_role: UserRole | str, ban_reason: str | None, now: datetime,
) -> dict:
    """Column values for a role change, including the ban group."""
    new_role = UserRole(new_role)
    reason = ban_reason.strip() if ban_reason else None

    if new_role is UserRole.BANNED:
        if not reason:
            raise ValidationError(
                "ban_reason is required when banning a user", "ban_reason",
            )
        return {"role": new_role.value, "ban_reason": reason, "banned_at": now}

    if reason:
        raise ValidationError(
            "ban_reason is only valid together with role 'banned'", "ban_reason",
        )
    return {"role": new_role.value, "ban_reason": None, "banned_at": None}


def is_ban_state_consistent(
    role: str, ban_reason: str | None, banned_at: datetime | None,
) -> bool:
    if role == UserRole.BANNED.value:
        return bool(ban_reason) and banned_at is not None
    return ban_reason is None and banned_at is None
