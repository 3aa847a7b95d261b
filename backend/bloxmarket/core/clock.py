"""Clock Helpers — single source of "now" and UTC normalization.

Invariants:
    - utc_now() always returns an aware datetime in UTC
    - as_utc() treats naive datetimes as UTC (SQLite drops tzinfo on read)
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
