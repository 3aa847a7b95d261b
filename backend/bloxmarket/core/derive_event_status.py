"""Event Status Derivation — time-based status as a pure function of (now, start, end).

Invariants:
    - derive_event_status is PURE: same (now, start, end) always yields the same status
    - end_date wins over start_date: an event past its end is ENDED even if start is unset
    - Naive datetimes are interpreted as UTC before comparison

Design Decisions:
    - Stored status is a write-time snapshot: the shell calls this on create and
      whenever start_date/end_date change, never on a schedule
    - is_live_ended() is the read-time check used by roster operations, so a stale
      snapshot cannot let users join an event whose end_date has passed
"""

from datetime import datetime

from bloxmarket.core.clock import as_utc
from bloxmarket.core.domain_types import EventStatus
from bloxmarket.core.errors import ValidationError


def derive_event_status(
    now: datetime, start_date: datetime | None, end_date: datetime | None,
) -> EventStatus:
    """Ended after E, upcoming before S, active otherwise."""
    now = as_utc(now)
    start_date = as_utc(start_date)
    end_date = as_utc(end_date)

    if end_date is not None and now > end_date:
        return EventStatus.ENDED
    if start_date is not None and now < start_date:
        return EventStatus.UPCOMING
    return EventStatus.ACTIVE


def check_event_window(
    start_date: datetime | None, end_date: datetime | None,
) -> None:
    """When both dates are set, end must come strictly after start."""
    if start_date is None or end_date is None:
        return
    if as_utc(start_date) >= as_utc(end_date):
        raise ValidationError(
            "end_date must be after start_date", "end_date",
        )


def is_live_ended(now: datetime, end_date: datetime | None) -> bool:
    return derive_event_status(now, None, end_date) is EventStatus.ENDED


def touches_event_window(fields: dict) -> bool:
    """True when an update carries start_date or end_date (re-derive trigger)."""
    return "start_date" in fields or "end_date" in fields
