"""Event status derivation — pure tests over (now, start_date, end_date)."""

from datetime import datetime, timedelta, timezone

import pytest

from bloxmarket.core.derive_event_status import (
    check_event_window,
    derive_event_status,
    is_live_ended,
    touches_event_window,
)
from bloxmarket.core.domain_types import EventStatus
from bloxmarket.core.errors import ValidationError

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)


def test_no_dates_is_active():
    assert derive_event_status(NOW, None, None) is EventStatus.ACTIVE


def test_before_start_is_upcoming():
    assert derive_event_status(NOW, NOW + HOUR, NOW + 2 * HOUR) is EventStatus.UPCOMING


def test_inside_window_is_active():
    assert derive_event_status(NOW, NOW - HOUR, NOW + HOUR) is EventStatus.ACTIVE


def test_after_end_is_ended():
    assert derive_event_status(NOW, NOW - 2 * HOUR, NOW - HOUR) is EventStatus.ENDED


def test_end_wins_without_start():
    assert derive_event_status(NOW, None, NOW - HOUR) is EventStatus.ENDED


def test_exact_end_instant_is_still_active():
    """ENDED only strictly after end_date."""
    assert derive_event_status(NOW, None, NOW) is EventStatus.ACTIVE


def test_exact_start_instant_is_active():
    assert derive_event_status(NOW, NOW, None) is EventStatus.ACTIVE


def test_naive_dates_are_read_as_utc():
    naive_end = (NOW - HOUR).replace(tzinfo=None)
    assert derive_event_status(NOW, None, naive_end) is EventStatus.ENDED


def test_window_rejects_end_before_start():
    with pytest.raises(ValidationError) as exc:
        check_event_window(NOW, NOW - HOUR)
    assert exc.value.field == "end_date"


def test_window_rejects_equal_dates():
    with pytest.raises(ValidationError):
        check_event_window(NOW, NOW)


def test_window_accepts_open_ended():
    check_event_window(NOW, None)
    check_event_window(None, NOW)


def test_is_live_ended():
    assert is_live_ended(NOW, NOW - HOUR)
    assert not is_live_ended(NOW, NOW + HOUR)
    assert not is_live_ended(NOW, None)


def test_touches_event_window():
    assert touches_event_window({"end_date": None})
    assert touches_event_window({"start_date": NOW, "title": "x"})
    assert not touches_event_window({"title": "x", "max_participants": 3})
