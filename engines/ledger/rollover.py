"""
Till Ledger Engine - Day Rollover
===================================
Archive-and-Reset transition plus the scheduler that drives it live.

Archive-and-Reset (oldDate -> newDate):
    1. ordersCount = orders created on oldDate
    2. itemsLeft   = sum of item stock right now
    3. prepend DaySummary(oldDate, dailyIncome, dailySold, ...)
    4. reset accumulators, currentDate = newDate
    5. persist (store on_commit hook)

The same transition closes a stale day during startup reconciliation.

Scheduler triggers:
- Deadline: one-shot timer at next local midnight + skew, re-armed after
  every fire
- Safety poll: fixed-period timer that recovers missed deadlines (sleep)

Both triggers read currentDate from the store at fire time, so a second
trigger for the same day change finds oldDate == newDate and does nothing.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import Callable, Optional, Protocol

from core.events import ObserverRegistry, notify
from core.time import Clock, day_key, seconds_until_rollover
from engines.ledger.events import (
    LEDGER_DAY_ARCHIVED,
    build_day_archived_payload,
)
from engines.ledger.models import ZERO, DaySummary
from engines.ledger.store import LedgerState, LedgerStore

logger = logging.getLogger("till.rollover")

TRIGGER_DEADLINE = "deadline"
TRIGGER_POLL = "poll"
TRIGGER_MANUAL = "manual"
TRIGGER_RECONCILE = "reconcile"


# ══════════════════════════════════════════════════════════════
# ARCHIVE-AND-RESET TRANSITION (pure)
# ══════════════════════════════════════════════════════════════

def summarize_day(state: LedgerState, day: str) -> DaySummary:
    """Closing summary for `day` computed from the given state."""
    return DaySummary(
        date=day,
        income=state.daily_income,
        sold=state.daily_sold,
        orders_count=state.orders_created_on(day),
        items_left=state.items_left(),
    )


def archive_day(
    state: LedgerState, old_date: str, new_date: str,
) -> Optional[LedgerState]:
    """
    Close `old_date` and open `new_date`.

    Returns None (no-op) when old_date == new_date or when the state has
    already moved off old_date. If history already holds old_date the
    day is not archived twice; the state still advances.
    """
    if not new_date or old_date == new_date:
        return None
    if state.current_date != old_date:
        return None

    history = state.history
    if state.has_history_for(old_date):
        logger.warning(
            f"Day {old_date} already archived; advancing to {new_date} "
            f"without a second summary"
        )
    else:
        history = (summarize_day(state, old_date),) + history

    return replace(
        state,
        history=history,
        daily_income=ZERO,
        daily_sold=0,
        current_date=new_date,
    )


# ══════════════════════════════════════════════════════════════
# TIMERS
# ══════════════════════════════════════════════════════════════

class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...  # pragma: no cover


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def thread_timer(delay_seconds: float, callback: Callable[[], None]) -> TimerHandle:
    """Start a daemon threading.Timer."""
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


# ══════════════════════════════════════════════════════════════
# ROLLOVER SCHEDULER
# ══════════════════════════════════════════════════════════════

class RolloverScheduler:
    """
    Drives Archive-and-Reset while the process runs.

    Every arm is tagged with a generation number. stop() and re-arms bump
    the generation, so a timer that was already in flight when it was
    cancelled finds a stale generation and returns without touching state.
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Clock,
        *,
        skew_ms: int = 1000,
        poll_interval_s: float = 60.0,
        timer_factory: TimerFactory = thread_timer,
        registry: Optional[ObserverRegistry] = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._skew_ms = skew_ms
        self._poll_interval_s = poll_interval_s
        self._timer_factory = timer_factory
        self._registry = registry

        self._lock = threading.RLock()
        self._generation = 0
        self._running = False
        self._deadline: Optional[TimerHandle] = None
        self._poll: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def generation(self) -> int:
        return self._generation

    # ── Lifecycle ──────────────────────────────────────────────

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._arm_all()
        logger.info("Rollover scheduler started")

    def stop(self) -> None:
        """Cancel both timers together. Safe to call repeatedly."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            self._generation += 1
            self._cancel_all()
        logger.info("Rollover scheduler stopped")

    def rearm(self) -> None:
        """Cancel and re-arm both timers from the current clock reading."""
        with self._lock:
            if not self._running:
                return
            self._cancel_all()
            self._arm_all()

    # ── Transition ─────────────────────────────────────────────

    def check_rollover(self, trigger: str = TRIGGER_MANUAL) -> Optional[DaySummary]:
        """
        Archive the open day if the clock has moved past it.

        Returns the summary this call archived, or None if none was added
        (same day, or the closing day was already in history).
        """
        today = day_key(self._clock.now())
        before: list[LedgerState] = []

        def mutation(state: LedgerState) -> Optional[LedgerState]:
            before.append(state)
            return archive_day(state, state.current_date, today)

        committed = self._store.apply(mutation)
        if committed is None:
            return None

        previous = before[-1]
        old_date = previous.current_date
        if len(committed.history) == len(previous.history):
            logger.info(f"Advanced {old_date} -> {today} ({trigger}); day was already archived")
            return None
        summary = committed.history[0]

        logger.info(
            f"Day {old_date} archived ({trigger}): income={summary.income} "
            f"sold={summary.sold} orders={summary.orders_count} "
            f"items_left={summary.items_left}; now {today}"
        )
        notify(
            LEDGER_DAY_ARCHIVED,
            build_day_archived_payload(summary, today, trigger),
            self._registry,
        )
        return summary

    # ── Timer plumbing ─────────────────────────────────────────

    def _arm_all(self) -> None:
        self._generation += 1
        generation = self._generation
        self._arm_deadline(generation)
        self._arm_poll(generation)

    def _cancel_all(self) -> None:
        for handle in (self._deadline, self._poll):
            if handle is not None:
                handle.cancel()
        self._deadline = None
        self._poll = None

    def _arm_deadline(self, generation: int) -> None:
        delay = seconds_until_rollover(self._clock.now(), self._skew_ms)
        self._deadline = self._timer_factory(
            delay, lambda: self._on_deadline(generation),
        )
        logger.debug(f"Deadline armed in {delay:.1f}s (gen {generation})")

    def _arm_poll(self, generation: int) -> None:
        self._poll = self._timer_factory(
            self._poll_interval_s, lambda: self._on_poll(generation),
        )

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _on_deadline(self, generation: int) -> None:
        with self._lock:
            if not self._is_current(generation):
                logger.debug(f"Stale deadline fire ignored (gen {generation})")
                return
            summary = self.check_rollover(TRIGGER_DEADLINE)
            if summary is not None:
                self._cancel_all()
                self._arm_all()
            else:
                self._arm_deadline(generation)

    def _on_poll(self, generation: int) -> None:
        with self._lock:
            if not self._is_current(generation):
                logger.debug(f"Stale poll fire ignored (gen {generation})")
                return
            summary = self.check_rollover(TRIGGER_POLL)
            if summary is not None:
                self._cancel_all()
                self._arm_all()
            else:
                self._arm_poll(generation)
