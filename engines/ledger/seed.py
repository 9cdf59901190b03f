"""
Till Ledger Engine - Default Seed
===================================
Starter catalog for a fresh install with no persisted snapshot.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Callable, Tuple

from core.time import timestamp
from engines.ledger.models import Item, LineItem, Order

SeedFactory = Callable[[datetime], Tuple[Tuple[Item, ...], Tuple[Order, ...]]]


def default_seed(now: datetime) -> Tuple[Tuple[Item, ...], Tuple[Order, ...]]:
    items = (
        Item(id="i1", name="Classic Tee", price=Decimal("19.99"), stock=50, sold=8),
        Item(id="i2", name="Denim Jacket", price=Decimal("59.99"), stock=12, sold=3),
        Item(id="i3", name="Summer Dress", price=Decimal("39.50"), stock=25, sold=5),
    )
    orders = (
        Order(
            id="o1",
            customer="Alice",
            line_items=(LineItem(item_id="i1", qty=2),),
            total=Decimal("39.98"),
            created_at=timestamp(now),
            received=False,
        ),
    )
    return items, orders


def empty_seed(now: datetime) -> Tuple[Tuple[Item, ...], Tuple[Order, ...]]:
    return (), ()
