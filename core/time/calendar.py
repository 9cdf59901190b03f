"""
Till Core Time - Calendar-Day Helpers
=======================================
Pure functions over explicit datetimes. No hidden clock access.

A day key is the local date formatted YYYY-MM-DD. Timestamps are
stored as ISO-8601 strings, so "created on day X" is a prefix match.
"""

from __future__ import annotations

from datetime import datetime, time, timedelta

DAY_KEY_LENGTH = 10


def day_key(dt: datetime) -> str:
    """Calendar-day key for a local datetime, e.g. '2024-01-03'."""
    return dt.date().isoformat()


def timestamp(dt: datetime) -> str:
    """ISO-8601 representation used for createdAt / sale dates."""
    return dt.isoformat()


def created_on(iso_timestamp: str, day: str) -> bool:
    """True when an ISO timestamp falls on the given day key."""
    if not iso_timestamp or not day:
        return False
    return iso_timestamp[:DAY_KEY_LENGTH] == day


def next_midnight(now: datetime) -> datetime:
    """Start of the calendar day after `now`, in now's timezone."""
    tomorrow = now.date() + timedelta(days=1)
    return datetime.combine(tomorrow, time.min, tzinfo=now.tzinfo)


def seconds_until_rollover(now: datetime, skew_ms: int = 1000) -> float:
    """
    Delay for the rollover deadline timer.

    The skew lands the fire just after midnight rather than just before it.
    """
    remaining = (next_midnight(now) - now).total_seconds()
    return max(0.0, remaining) + skew_ms / 1000.0
