"""
Till Ledger Engine - Snapshot Codec
=====================================
LedgerState <-> persisted snapshot dict.

Persisted shape:
    {date, dailyIncome, dailySold, history[], items[], orders[]}

The sales log is NOT persisted; it restarts empty.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Tuple

from engines.ledger.models import (
    ZERO,
    DaySummary,
    Item,
    Order,
    money_to_json,
    to_money,
)
from engines.ledger.store import LedgerState


class SnapshotFormatError(Exception):
    """Persisted snapshot does not decode into ledger records."""
    pass


@dataclass(frozen=True)
class DecodedSnapshot:
    """Typed view of a persisted snapshot, before reconciliation."""

    date: str
    daily_income: Decimal
    daily_sold: int
    history: Tuple[DaySummary, ...]
    items: Tuple[Item, ...]
    orders: Tuple[Order, ...]


def state_to_snapshot(state: LedgerState) -> Dict[str, Any]:
    return {
        "date": state.current_date,
        "dailyIncome": money_to_json(state.daily_income),
        "dailySold": state.daily_sold,
        "history": [summary.to_dict() for summary in state.history],
        "items": [item.to_dict() for item in state.items],
        "orders": [order.to_dict() for order in state.orders],
    }


def decode_snapshot(data: Dict[str, Any]) -> DecodedSnapshot:
    """
    Decode a snapshot dict. Missing collections default to empty and
    missing accumulators default to zero.

    Raises:
        SnapshotFormatError: a present field cannot be decoded
    """
    try:
        decoded = DecodedSnapshot(
            date=str(data.get("date") or ""),
            daily_income=to_money(data.get("dailyIncome") or 0),
            daily_sold=int(data.get("dailySold") or 0),
            history=tuple(
                DaySummary.from_dict(entry) for entry in data.get("history") or []
            ),
            items=tuple(Item.from_dict(entry) for entry in data.get("items") or []),
            orders=tuple(
                Order.from_dict(entry) for entry in data.get("orders") or []
            ),
        )
    except (KeyError, TypeError, ValueError, AttributeError, OverflowError) as exc:
        raise SnapshotFormatError(
            f"{type(exc).__name__}: {exc}"
        ) from exc

    dates = [summary.date for summary in decoded.history]
    if len(dates) != len(set(dates)):
        raise SnapshotFormatError("history contains duplicate dates")
    return decoded


def snapshot_to_state(decoded: DecodedSnapshot, current_date: str) -> LedgerState:
    """Build a LedgerState from a decoded snapshot as of current_date."""
    return LedgerState(
        current_date=current_date,
        daily_income=max(decoded.daily_income, ZERO),
        daily_sold=max(decoded.daily_sold, 0),
        history=decoded.history,
        items=decoded.items,
        orders=decoded.orders,
    )
