"""UTC time helpers for SRS scheduling.

Scheduling math works on timezone-aware UTC datetimes. ISO strings produced by this
module are UTC, end with 'Z' and keep millisecond precision:
YYYY-MM-DDTHH:MM:SS.mmmZ
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC 'now'."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime. Naive datetimes are taken to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_datetime_to_iso_z(dt: datetime) -> str:
    """Format a datetime as UTC ISO string with millisecond precision and trailing 'Z'."""
    dt = ensure_utc(dt)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    """Return current time as UTC ISO string with trailing 'Z'."""
    return utc_datetime_to_iso_z(utc_now())


def parse_iso_z(s: str) -> datetime:
    """Parse an ISO-8601 string ending with 'Z' (or an offset) into UTC datetime.

    Accepts second precision, fractional seconds and bare dates.
    """
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(s))


def add_interval(now: datetime, interval: timedelta) -> datetime:
    return ensure_utc(now) + interval
