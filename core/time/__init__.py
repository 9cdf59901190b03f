"""
Till Core Time - Public API
=============================
Explicit clock protocol and calendar-day helpers.
"""

from core.time.calendar import (
    created_on,
    day_key,
    next_midnight,
    seconds_until_rollover,
    timestamp,
)
from core.time.clock import Clock, FixedClock, SystemClock

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "day_key",
    "timestamp",
    "created_on",
    "next_midnight",
    "seconds_until_rollover",
]
