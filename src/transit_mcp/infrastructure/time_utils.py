from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import humanize

NEW_YORK_TZ: ZoneInfo = ZoneInfo("America/New_York")
UTC_TZ: ZoneInfo = ZoneInfo("UTC")


def now_utc() -> datetime:
    """Return the current moment as a timezone-aware datetime in UTC."""
    return datetime.now(tz=UTC_TZ)


def parse_api_datetime(s: str) -> datetime:
    """Parse an ISO-8601 timestamp from backend responses.

    Handles formats:
    - "2026-02-24T14:30:00Z"          (UTC)
    - "2026-02-24T14:30:00.000Z"      (UTC, milliseconds)
    - "2026-02-24T14:30:00-05:00"     (offset-aware)
    - "2026-02-24T14:30:00"           (naive, assumed New York)

    Always returns a timezone-aware datetime.
    Raises ValueError on empty or unparseable input.
    """
    if not s or not s.strip():
        raise ValueError("Empty datetime string")

    s = s.strip()
    # fromisoformat only accepts a trailing "Z" from Python 3.11 on
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"

    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        raise ValueError(f"Cannot parse datetime string: {s!r}")

    if dt.tzinfo is None:
        return dt.replace(tzinfo=NEW_YORK_TZ)
    return dt


def format_clock(dt: datetime) -> str:
    """Return a New York wall-clock time such as "3:05 PM"."""
    return dt.astimezone(NEW_YORK_TZ).strftime("%I:%M %p").lstrip("0")


def format_distance(dt: datetime, now: datetime) -> str:
    """Describe dt relative to now, e.g. "12 minutes ago" or "2 hours from now"."""
    return humanize.naturaltime(now - dt)
