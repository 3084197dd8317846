from __future__ import annotations

from datetime import datetime, timedelta, timezone

from core import timefmt


def test_display_minute_shifts_to_utc8_and_truncates():
    instant = datetime(2026, 2, 1, 17, 45, 59, tzinfo=timezone.utc)
    assert timefmt.to_display_minute(instant) == "2026-02-02 01:45"


def test_naive_datetime_is_utc():
    assert timefmt.to_display_minute(datetime(2026, 2, 1, 0, 0)) == "2026-02-01 08:00"


def test_other_offsets_are_converted():
    instant = datetime(2026, 2, 1, 9, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert timefmt.to_display_minute(instant) == "2026-02-01 22:00"


def test_display_text_sorts_like_the_instant():
    earlier = datetime(2026, 2, 1, 23, 59, tzinfo=timezone.utc)
    later = earlier + timedelta(minutes=1)
    assert timefmt.to_display_minute(earlier) < timefmt.to_display_minute(later)


def test_normalize_round_trips_display_text():
    text = timefmt.to_display_minute(datetime(2026, 2, 1, 3, 4, tzinfo=timezone.utc))
    assert timefmt.normalize_display_minute(text) == text
