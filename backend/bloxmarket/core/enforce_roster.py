"""Roster Enforcement — event join/leave rules over (participants, participant_count).

Invariants:
    - participant_count == len(participants) before and after every plan
    - A join never pushes len(participants) past max_participants
    - plan_join / plan_leave are PURE: they return the new count, the shell
      writes the count and the participant row in one transaction

Design Decisions:
    - Ended check runs before capacity/membership so a full, ended event reports
      EVENT_ENDED rather than EVENT_FULL
    - leave() by a non-participant raises NotFoundError (never a silent no-op)
"""

from datetime import datetime
from uuid import UUID

from bloxmarket.core.derive_event_status import is_live_ended
from bloxmarket.core.errors import (
    AlreadyJoinedError, CapacityError, EventEndedError, NotFoundError,
)


def plan_join(
    participants: set[UUID],
    max_participants: int | None,
    user_id: UUID,
    now: datetime,
    end_date: datetime | None,
) -> int:
    """Validate a join and return the new participant_count."""
    if is_live_ended(now, end_date):
        raise EventEndedError()
    if user_id in participants:
        raise AlreadyJoinedError()
    if max_participants is not None and len(participants) >= max_participants:
        raise CapacityError(max_participants)
    return len(participants) + 1


def plan_leave(participants: set[UUID], user_id: UUID) -> int:
    """Validate a leave and return the new participant_count."""
    if user_id not in participants:
        raise NotFoundError("Participant", str(user_id))
    return len(participants) - 1
