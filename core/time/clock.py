"""
Till Core Time - Explicit Clock Protocol
==========================================
Rule: NO datetime.now() inside ledger logic.
The ledger, the reconciliation step and the rollover scheduler all
receive "now" from an injected Clock.

The business day is the host's LOCAL calendar day, so clocks return
timezone-aware datetimes in the local offset.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Injectable local wall-clock source."""

    def now(self) -> datetime:
        """Return the current local time (timezone-aware)."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Production clock - host wall clock in the local timezone."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """
    Test clock - returns a fixed timestamp until advanced.

    Usage:
        clock = FixedClock(datetime(2024, 1, 1, 23, 59, tzinfo=timezone.utc))
        clock.advance(120)
        assert clock.now().day == 2
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt

    def now(self) -> datetime:
        return self._fixed_dt

    def advance(self, seconds: float) -> None:
        """Move the clock forward (multi-step test scenarios)."""
        self._fixed_dt = self._fixed_dt + timedelta(seconds=seconds)

    def set(self, fixed_dt: datetime) -> None:
        """Jump to an arbitrary instant (simulates sleep/resume)."""
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires timezone-aware datetime.")
        self._fixed_dt = fixed_dt
