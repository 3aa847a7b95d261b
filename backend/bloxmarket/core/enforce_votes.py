"""Vote Toggling — one vote per user per target, re-voting toggles.

Invariants:
    - plan_vote is PURE: maps (existing vote, requested vote) to the vote to keep
    - Same direction again removes the vote; the other direction replaces it
    - None means "no vote row" on both sides

Design Decisions:
    - Forum posts keep plain counters (no voter identity); trade and event votes
      are per-user rows so they can be withdrawn and tallied with user_vote
"""

from bloxmarket.core.domain_types import VoteDirection
from bloxmarket.core.errors import ValidationError


def parse_direction(direction: VoteDirection | str) -> VoteDirection:
    try:
        return VoteDirection(direction)
    except ValueError:
        raise ValidationError(f"unknown vote direction '{direction}'", "direction")


def plan_vote(
    existing: VoteDirection | None, requested: VoteDirection,
) -> VoteDirection | None:
    """The user's vote after casting `requested`."""
    if existing is requested:
        return None
    return requested
