"""
Display-time helpers.

Registration times are shown (and filtered) as minute-precision text in a
fixed UTC+8 offset, e.g. "2026-02-01 09:30". That text sorts the same way as
the instant it was derived from, so range filters can compare it directly.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

DISPLAY_TZ = timezone(timedelta(hours=8))
DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


def to_display_minute(value: datetime) -> str:
    """
    Shift an instant to UTC+8 and truncate it to the minute.

    Naive datetimes are treated as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(DISPLAY_TZ).strftime(DISPLAY_FORMAT)


def normalize_display_minute(raw: str | None) -> str | None:
    """
    Normalize a caller-supplied bound to the display format.

    Accepts "YYYY-MM-DD HH:MM", the datetime-local form "YYYY-MM-DDTHH:MM",
    and longer ISO strings (seconds are truncated). A value carrying an offset
    is converted to UTC+8 first. Returns None when the text is not a timestamp.
    """
    text = (raw or "").strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(DISPLAY_TZ)
    return parsed.strftime(DISPLAY_FORMAT)
