"""
Till Ledger Engine - Notification Types and Payload Builders
==============================================================
Notifications the ledger publishes on the observer bus after a
mutation has been committed. Observers never influence the ledger.
"""

from __future__ import annotations

from typing import Optional

from engines.ledger.models import DaySummary, Item, Order, Sale, money_to_json


# ══════════════════════════════════════════════════════════════
# NOTIFICATION TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

LEDGER_ITEM_ADDED = "ledger.item.added"
LEDGER_STOCK_ADJUSTED = "ledger.stock.adjusted"
LEDGER_SALE_RECORDED = "ledger.sale.recorded"
LEDGER_ORDER_CREATED = "ledger.order.created"
LEDGER_ORDER_RECEIVED = "ledger.order.received"
LEDGER_DAY_ARCHIVED = "ledger.day.archived"
LEDGER_STATE_RECONCILED = "ledger.state.reconciled"

LEDGER_NOTIFICATION_TYPES = (
    LEDGER_ITEM_ADDED,
    LEDGER_STOCK_ADJUSTED,
    LEDGER_SALE_RECORDED,
    LEDGER_ORDER_CREATED,
    LEDGER_ORDER_RECEIVED,
    LEDGER_DAY_ARCHIVED,
    LEDGER_STATE_RECONCILED,
)


# ══════════════════════════════════════════════════════════════
# PAYLOAD BUILDERS
# ══════════════════════════════════════════════════════════════

def build_item_added_payload(item: Item) -> dict:
    return {"item": item.to_dict()}


def build_stock_adjusted_payload(item: Item, delta: int, previous_stock: int) -> dict:
    return {
        "item_id": item.id,
        "delta": delta,
        "previous_stock": previous_stock,
        "stock": item.stock,
    }


def build_sale_recorded_payload(sale: Sale, requested_qty: int) -> dict:
    return {
        "sale": sale.to_dict(),
        "requested_qty": requested_qty,
        "clamped": sale.qty < requested_qty,
    }


def build_order_created_payload(order: Order) -> dict:
    return {"order": order.to_dict()}


def build_order_received_payload(order: Order, deducted: dict[str, int]) -> dict:
    return {
        "order_id": order.id,
        "total": money_to_json(order.total),
        "nominal_qty": order.nominal_quantity,
        "deducted": dict(deducted),
    }


def build_day_archived_payload(
    summary: DaySummary, new_date: str, trigger: str,
) -> dict:
    return {
        "summary": summary.to_dict(),
        "new_date": new_date,
        "trigger": trigger,
    }


def build_state_reconciled_payload(
    outcome: str, current_date: str, archived: Optional[DaySummary],
) -> dict:
    return {
        "outcome": outcome,
        "current_date": current_date,
        "archived": archived.to_dict() if archived is not None else None,
    }
