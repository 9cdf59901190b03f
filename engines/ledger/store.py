"""
Till Ledger Engine - Ledger Store
===================================
Canonical in-memory ledger state and its single write path.

RULES (NON-NEGOTIABLE):
- LedgerState is an immutable value; a mutation yields a new state
- Every mutation runs as ONE read-decide-commit step under the store lock
- Mutations read the live state handed to them, never a captured copy
- Invariants are checked before a new state is published
- After each commit the on_commit hook runs (persistence)

Single-writer model: transaction operations and timer callbacks all
funnel through LedgerStore.apply(), so they never interleave.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Optional, Tuple

from core.time import created_on
from engines.ledger.models import (
    ZERO,
    DashboardSummary,
    DaySummary,
    Item,
    Order,
    Sale,
)

logger = logging.getLogger("till.ledger")

Mutation = Callable[["LedgerState"], Optional["LedgerState"]]


class LedgerInvariantError(Exception):
    """A mutation tried to publish a state that breaks a ledger invariant."""
    pass


# ══════════════════════════════════════════════════════════════
# LEDGER STATE (aggregate root)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerState:
    """
    Snapshot of the whole ledger.

    daily_income / daily_sold always describe current_date only.
    history is most-recent-first. items and orders are newest-first.
    """

    current_date: str
    daily_income: Decimal = ZERO
    daily_sold: int = 0
    history: Tuple[DaySummary, ...] = ()
    items: Tuple[Item, ...] = ()
    orders: Tuple[Order, ...] = ()
    sales: Tuple[Sale, ...] = ()

    def find_item(self, item_id: str) -> Optional[Item]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def find_order(self, order_id: str) -> Optional[Order]:
        for order in self.orders:
            if order.id == order_id:
                return order
        return None

    def items_left(self) -> int:
        return sum(item.stock for item in self.items)

    def orders_created_on(self, day: str) -> int:
        return sum(1 for order in self.orders if created_on(order.created_at, day))

    def has_history_for(self, day: str) -> bool:
        return any(summary.date == day for summary in self.history)

    def dashboard(self) -> DashboardSummary:
        return DashboardSummary(
            current_date=self.current_date,
            income=self.daily_income,
            sold=self.daily_sold,
            item_count=len(self.items),
            stock_on_hand=self.items_left(),
            pending_orders=sum(1 for order in self.orders if not order.received),
            days_archived=len(self.history),
        )


def check_invariants(
    new: LedgerState,
    previous: Optional[LedgerState] = None,
) -> None:
    """
    Raise LedgerInvariantError if `new` is not publishable.

    Record-level rules (stock >= 0 etc.) are enforced by the record
    constructors; this checks the aggregate-level ones.
    """
    if not new.current_date:
        raise LedgerInvariantError("current_date must be set.")
    if new.daily_income < 0:
        raise LedgerInvariantError("daily_income cannot be negative.")
    if new.daily_sold < 0:
        raise LedgerInvariantError("daily_sold cannot be negative.")

    dates = [summary.date for summary in new.history]
    if len(dates) != len(set(dates)):
        raise LedgerInvariantError("history contains duplicate dates.")

    if previous is None:
        return

    previous_sold = {item.id: item.sold for item in previous.items}
    for item in new.items:
        if item.sold < previous_sold.get(item.id, 0):
            raise LedgerInvariantError(
                f"sold decreased for item '{item.id}'."
            )

    if len(new.sales) < len(previous.sales):
        raise LedgerInvariantError("sales log is append-only.")

    previous_received = {o.id for o in previous.orders if o.received}
    for order in new.orders:
        if order.id in previous_received and not order.received:
            raise LedgerInvariantError(
                f"order '{order.id}' cannot be un-received."
            )


# ══════════════════════════════════════════════════════════════
# LEDGER STORE
# ══════════════════════════════════════════════════════════════

class LedgerStore:
    """
    Holder of the current LedgerState.

    apply(mutation) is the only way to change state. The mutation
    receives the live state and returns a new state, or None for a
    no-op. The swap and the on_commit hook happen under one re-entrant
    lock so the persisted order matches the commit order.
    """

    def __init__(
        self,
        state: LedgerState,
        *,
        on_commit: Optional[Callable[[LedgerState], None]] = None,
    ) -> None:
        check_invariants(state)
        self._state = state
        self._on_commit = on_commit
        self._lock = threading.RLock()

    @property
    def state(self) -> LedgerState:
        with self._lock:
            return self._state

    def apply(self, mutation: Mutation) -> Optional[LedgerState]:
        """
        Run one atomic read-decide-commit step.

        Returns the committed state, or None if the mutation was a no-op.
        """
        with self._lock:
            current = self._state
            new_state = mutation(current)
            if new_state is None or new_state is current:
                return None

            check_invariants(new_state, current)
            self._state = new_state

            if self._on_commit is not None:
                self._on_commit(new_state)
            return new_state

    # ── Read model ─────────────────────────────────────────────

    @property
    def current_date(self) -> str:
        return self.state.current_date

    @property
    def daily_income(self) -> Decimal:
        return self.state.daily_income

    @property
    def daily_sold(self) -> int:
        return self.state.daily_sold

    @property
    def history(self) -> Tuple[DaySummary, ...]:
        return self.state.history

    @property
    def items(self) -> Tuple[Item, ...]:
        return self.state.items

    @property
    def orders(self) -> Tuple[Order, ...]:
        return self.state.orders

    @property
    def sales(self) -> Tuple[Sale, ...]:
        return self.state.sales

    def dashboard(self) -> DashboardSummary:
        return self.state.dashboard()
