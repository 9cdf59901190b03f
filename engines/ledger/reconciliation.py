"""
Till Ledger Engine - Startup Reconciliation
=============================================
Runs once, synchronously, before any transaction operation is reachable.

Outcomes:
    FRESH     no usable snapshot: today, empty history, seed catalog
    RESUMED   snapshot is from today: restore it as-is
    ARCHIVED  snapshot is from an earlier day: close that day, open today

A gap of several days still produces ONE archived summary, for the last
day the ledger knew about. Days in between get no history entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.events import ObserverRegistry, notify
from core.persistence import SnapshotPersistence
from core.time import Clock, day_key
from engines.ledger.events import (
    LEDGER_STATE_RECONCILED,
    build_state_reconciled_payload,
)
from engines.ledger.models import DaySummary
from engines.ledger.rollover import archive_day
from engines.ledger.seed import SeedFactory, default_seed
from engines.ledger.snapshot import (
    SnapshotFormatError,
    decode_snapshot,
    snapshot_to_state,
    state_to_snapshot,
)
from engines.ledger.store import LedgerState

logger = logging.getLogger("till.reconcile")

OUTCOME_FRESH = "FRESH"
OUTCOME_RESUMED = "RESUMED"
OUTCOME_ARCHIVED = "ARCHIVED"


@dataclass(frozen=True)
class ReconciliationResult:
    state: LedgerState
    outcome: str
    archived: Optional[DaySummary] = None
    persisted: bool = False


def _fresh_state(today: str, clock: Clock, seed: SeedFactory) -> LedgerState:
    items, orders = seed(clock.now())
    return LedgerState(current_date=today, items=items, orders=orders)


def reconcile(
    persistence: SnapshotPersistence,
    clock: Clock,
    *,
    seed: SeedFactory = default_seed,
    registry: Optional[ObserverRegistry] = None,
) -> ReconciliationResult:
    """Produce the initial LedgerState from the persisted snapshot."""
    today = day_key(clock.now())
    raw = persistence.load()

    decoded = None
    if raw is not None:
        try:
            decoded = decode_snapshot(raw)
        except SnapshotFormatError as exc:
            persistence.report_corrupt(str(exc))

    archived: Optional[DaySummary] = None
    corrected = True
    if decoded is None:
        state = _fresh_state(today, clock, seed)
        outcome = OUTCOME_FRESH
    elif decoded.date == today or not decoded.date:
        state = snapshot_to_state(decoded, today)
        outcome = OUTCOME_RESUMED
        corrected = not decoded.date
    else:
        stale = snapshot_to_state(decoded, decoded.date)
        state = archive_day(stale, decoded.date, today) or stale
        if len(state.history) > len(decoded.history):
            archived = state.history[0]
        outcome = OUTCOME_ARCHIVED

    persisted = False
    if corrected:
        persisted = persistence.save(lambda: state_to_snapshot(state))

    if archived is not None:
        logger.info(
            f"Closed stale day {archived.date} on startup: income={archived.income} "
            f"sold={archived.sold} orders={archived.orders_count}; now {today}"
        )
    else:
        logger.info(f"Ledger reconciled: {outcome} for {today}")

    notify(
        LEDGER_STATE_RECONCILED,
        build_state_reconciled_payload(outcome, state.current_date, archived),
        registry,
    )
    return ReconciliationResult(
        state=state, outcome=outcome, archived=archived, persisted=persisted,
    )
