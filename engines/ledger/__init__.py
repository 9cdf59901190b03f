"""
Till Ledger Engine - Public API
=================================
Daily ledger: items, orders, sales, today's accumulators, closed-day
history, and the rollover that moves one into the other.
"""

from engines.ledger.models import DaySummary, Item, LineItem, Order, Sale
from engines.ledger.reconciliation import (
    OUTCOME_ARCHIVED,
    OUTCOME_FRESH,
    OUTCOME_RESUMED,
    ReconciliationResult,
    reconcile,
)
from engines.ledger.rollover import RolloverScheduler, archive_day
from engines.ledger.runtime import LedgerRuntime, LedgerRuntimeError
from engines.ledger.services import LedgerService
from engines.ledger.store import LedgerInvariantError, LedgerState, LedgerStore

__all__ = [
    "Item",
    "LineItem",
    "Order",
    "Sale",
    "DaySummary",
    "LedgerState",
    "LedgerStore",
    "LedgerInvariantError",
    "LedgerService",
    "RolloverScheduler",
    "archive_day",
    "reconcile",
    "ReconciliationResult",
    "OUTCOME_FRESH",
    "OUTCOME_RESUMED",
    "OUTCOME_ARCHIVED",
    "LedgerRuntime",
    "LedgerRuntimeError",
]
