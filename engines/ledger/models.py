"""
Till Ledger Engine - Records
==============================
Item, Order, Sale and DaySummary value objects.

RULES:
- Records are immutable; a change produces a new record
- Money is Decimal in memory and a JSON number on the wire
- Stock, sold and quantities are integers
- Dict shapes use the persisted snapshot's camelCase keys

This file contains NO persistence logic.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Tuple

_ID_ALPHABET = string.digits + string.ascii_lowercase
_ID_LENGTH = 7

ZERO = Decimal("0")


def new_id(prefix: str = "") -> str:
    """Prefix plus seven random base-36 characters, e.g. 'i4k2x9ab'."""
    return prefix + "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


def to_money(value: Any) -> Decimal:
    """
    Coerce a number (or numeric string) to Decimal without float noise.

    Raises ValueError for anything that is not a finite amount
    (booleans, None, garbage, NaN, Infinity).
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a monetary value: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"Not a monetary value: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Not a finite monetary value: {value!r}")
    return amount


def money_to_json(amount: Decimal) -> int | float:
    """JSON number for a Decimal; integral amounts stay integers."""
    if not amount.is_finite():
        raise ValueError(f"Cannot serialize non-finite amount: {amount}")
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


def _to_count(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Not a count: {value!r}")
    try:
        return int(value)
    except OverflowError as exc:
        raise ValueError(f"Not a finite count: {value!r}") from exc


# ══════════════════════════════════════════════════════════════
# ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Item:
    """Catalog item with on-hand stock and cumulative units sold."""

    id: str
    name: str
    price: Decimal
    stock: int
    sold: int = 0

    def __post_init__(self):
        if not self.id:
            raise ValueError("Item id must be non-empty.")
        if not self.price.is_finite() or self.price < 0:
            raise ValueError("Item price must be a finite, non-negative amount.")
        if self.stock < 0:
            raise ValueError("Item stock cannot be negative.")
        if self.sold < 0:
            raise ValueError("Item sold cannot be negative.")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": money_to_json(self.price),
            "stock": self.stock,
            "sold": self.sold,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Item:
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=to_money(data.get("price", 0)),
            stock=_to_count(data.get("stock", 0)),
            sold=_to_count(data.get("sold", 0)),
        )


# ══════════════════════════════════════════════════════════════
# ORDER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """Order line: a reference to an item and a positive quantity."""

    item_id: str
    qty: int

    def __post_init__(self):
        if not self.item_id:
            raise ValueError("item_id must be non-empty.")
        if self.qty <= 0:
            raise ValueError("Line quantity must be positive.")

    def to_dict(self) -> dict:
        return {"itemId": self.item_id, "qty": self.qty}

    @classmethod
    def from_dict(cls, data: dict) -> LineItem:
        return cls(item_id=str(data["itemId"]), qty=_to_count(data["qty"]))


@dataclass(frozen=True)
class Order:
    """
    Customer order. Flips from received=False to received=True once,
    on receipt, and is immutable after that.
    """

    id: str
    customer: str
    line_items: Tuple[LineItem, ...]
    total: Decimal
    created_at: str
    received: bool = False

    def __post_init__(self):
        if not self.id:
            raise ValueError("Order id must be non-empty.")
        if not self.total.is_finite() or self.total < 0:
            raise ValueError("Order total must be a finite, non-negative amount.")

    @property
    def nominal_quantity(self) -> int:
        return sum(line.qty for line in self.line_items)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer": self.customer,
            "lineItems": [line.to_dict() for line in self.line_items],
            "total": money_to_json(self.total),
            "received": self.received,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Order:
        # Snapshots written by the browser build call the lines "items".
        raw_lines = data.get("lineItems", data.get("items", []))
        return cls(
            id=str(data["id"]),
            customer=str(data.get("customer", "")),
            line_items=tuple(LineItem.from_dict(line) for line in raw_lines),
            total=to_money(data.get("total", 0)),
            created_at=str(data.get("createdAt", "")),
            received=bool(data.get("received", False)),
        )


# ══════════════════════════════════════════════════════════════
# SALE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Sale:
    """Append-only point-of-sale log entry."""

    id: str
    item_id: str
    qty: int
    total: Decimal
    date: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "itemId": self.item_id,
            "qty": self.qty,
            "total": money_to_json(self.total),
            "date": self.date,
        }


# ══════════════════════════════════════════════════════════════
# DAY SUMMARY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DaySummary:
    """One closed business day. Immutable once archived."""

    date: str
    income: Decimal = ZERO
    sold: int = 0
    orders_count: int = 0
    items_left: int = 0

    def __post_init__(self):
        if not self.date:
            raise ValueError("DaySummary date must be non-empty.")
        if not self.income.is_finite():
            raise ValueError("DaySummary income must be finite.")

    def to_dict(self) -> dict:
        return {
            "date": self.date,
            "income": money_to_json(self.income),
            "sold": self.sold,
            "ordersCount": self.orders_count,
            "itemsLeft": self.items_left,
        }

    @classmethod
    def from_dict(cls, data: dict) -> DaySummary:
        return cls(
            date=str(data["date"]),
            income=to_money(data.get("income", 0)),
            sold=_to_count(data.get("sold", 0)),
            orders_count=_to_count(data.get("ordersCount", 0)),
            items_left=_to_count(data.get("itemsLeft", 0)),
        )


@dataclass(frozen=True)
class DashboardSummary:
    """Read model for the dashboard panel."""

    current_date: str
    income: Decimal
    sold: int
    item_count: int
    stock_on_hand: int
    pending_orders: int
    days_archived: int

    def to_dict(self) -> dict:
        return {
            "currentDate": self.current_date,
            "income": money_to_json(self.income),
            "sold": self.sold,
            "itemCount": self.item_count,
            "stockOnHand": self.stock_on_hand,
            "pendingOrders": self.pending_orders,
            "daysArchived": self.days_archived,
        }
