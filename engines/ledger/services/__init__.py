"""
Till Ledger Engine - Application Service
==========================================
Transaction operations: add item, adjust stock, record sale,
receive order, create walk-in order.

Each operation is one LedgerStore.apply() call. The mutation derives
every intermediate value (sell quantity, amounts) from the live state it
is handed, so a rollover or another operation can never slip in between
the read and the write.

Invalid input (unknown id, quantity beyond stock) is a no-op or a clamp,
never an exception.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Any, Optional

from core.events import ObserverRegistry, notify
from core.time import Clock, timestamp
from engines.ledger.events import (
    LEDGER_ITEM_ADDED,
    LEDGER_ORDER_CREATED,
    LEDGER_ORDER_RECEIVED,
    LEDGER_SALE_RECORDED,
    LEDGER_STOCK_ADJUSTED,
    build_item_added_payload,
    build_order_created_payload,
    build_order_received_payload,
    build_sale_recorded_payload,
    build_stock_adjusted_payload,
)
from engines.ledger.models import (
    ZERO,
    Item,
    LineItem,
    Order,
    Sale,
    new_id,
    to_money,
)
from engines.ledger.store import LedgerState, LedgerStore

logger = logging.getLogger("till.ledger")

WALK_IN_CUSTOMER = "Walk-in"


def _replace_item(state: LedgerState, updated: Item) -> tuple:
    return tuple(updated if item.id == updated.id else item for item in state.items)


def _as_int(value: Any, *, saturate: bool = False) -> int:
    """
    Integer quantity from caller input; garbage becomes 0.

    Infinite input becomes 0 as well, unless `saturate` is set, in which
    case it becomes +/- sys.maxsize so callers that clamp still clamp.
    """
    try:
        return int(value)
    except OverflowError:
        if not saturate:
            return 0
        return sys.maxsize if value > 0 else -sys.maxsize
    except (TypeError, ValueError):
        return 0


class LedgerService:
    """The only mutators exposed to the UI boundary."""

    def __init__(
        self,
        *,
        store: LedgerStore,
        clock: Clock,
        registry: Optional[ObserverRegistry] = None,
    ):
        self._store = store
        self._clock = clock
        self._registry = registry

    @property
    def store(self) -> LedgerStore:
        return self._store

    # ── addItem ────────────────────────────────────────────────

    def add_item(self, name: str, price: Any, stock: Any) -> Item:
        """Create an item with price and stock clamped to >= 0."""
        try:
            clamped_price = max(to_money(price), ZERO)
        except ValueError:
            clamped_price = ZERO
        item = Item(
            id=new_id("i"),
            name=str(name),
            price=clamped_price,
            stock=max(_as_int(stock), 0),
            sold=0,
        )

        self._store.apply(lambda state: replace(state, items=(item,) + state.items))

        logger.info(f"Item added: {item.id} '{item.name}' stock={item.stock}")
        notify(LEDGER_ITEM_ADDED, build_item_added_payload(item), self._registry)
        return item

    # ── adjustStock ────────────────────────────────────────────

    def adjust_stock(self, item_id: str, delta: Any) -> Optional[Item]:
        """stock = max(0, stock + delta). Returns the updated item."""
        delta = _as_int(delta)
        result: dict[str, Any] = {}

        def mutation(state: LedgerState) -> Optional[LedgerState]:
            item = state.find_item(item_id)
            if item is None:
                return None
            updated = replace(item, stock=max(0, item.stock + delta))
            if updated == item:
                return None
            result["item"] = updated
            result["previous_stock"] = item.stock
            return replace(state, items=_replace_item(state, updated))

        if self._store.apply(mutation) is None:
            logger.debug(f"adjust_stock no-op: item={item_id} delta={delta}")
            return None

        updated = result["item"]
        logger.info(
            f"Stock adjusted: {item_id} {result['previous_stock']} → {updated.stock}"
        )
        notify(
            LEDGER_STOCK_ADJUSTED,
            build_stock_adjusted_payload(updated, delta, result["previous_stock"]),
            self._registry,
        )
        return updated

    # ── recordSale ─────────────────────────────────────────────

    def record_sale(self, item_id: str, qty: Any) -> Optional[Sale]:
        """
        Sell up to `qty` units. Quantity beyond stock is clamped, so
        stock never goes negative. Returns the Sale, or None for a no-op.
        """
        requested = _as_int(qty, saturate=True)
        result: dict[str, Sale] = {}

        def mutation(state: LedgerState) -> Optional[LedgerState]:
            item = state.find_item(item_id)
            if item is None:
                return None
            sell_qty = min(item.stock, requested)
            if sell_qty <= 0:
                return None

            amount = item.price * sell_qty
            sale = Sale(
                id=new_id("s"),
                item_id=item_id,
                qty=sell_qty,
                total=amount,
                date=timestamp(self._clock.now()),
            )
            result["sale"] = sale
            updated = replace(
                item, stock=item.stock - sell_qty, sold=item.sold + sell_qty,
            )
            return replace(
                state,
                items=_replace_item(state, updated),
                daily_income=state.daily_income + amount,
                daily_sold=state.daily_sold + sell_qty,
                sales=state.sales + (sale,),
            )

        if self._store.apply(mutation) is None:
            logger.debug(f"record_sale no-op: item={item_id} qty={requested}")
            return None

        sale = result["sale"]
        logger.info(f"Sale recorded: {sale.id} item={item_id} qty={sale.qty} total={sale.total}")
        notify(
            LEDGER_SALE_RECORDED,
            build_sale_recorded_payload(sale, requested),
            self._registry,
        )
        return sale

    # ── receiveOrder ───────────────────────────────────────────

    def receive_order(self, order_id: str) -> bool:
        """
        Mark an order received and fulfil it from stock.

        Stock is deducted per line, capped by what is on hand. Income and
        units sold are recognized at the order's NOMINAL total and line
        quantities, even when stock ran short.
        """
        deducted: dict[str, int] = {}
        result: dict[str, Order] = {}

        def mutation(state: LedgerState) -> Optional[LedgerState]:
            order = state.find_order(order_id)
            if order is None or order.received:
                return None

            stock = {item.id: item for item in state.items}
            for line in order.line_items:
                item = stock.get(line.item_id)
                if item is None:
                    continue
                sell_qty = min(item.stock, line.qty)
                stock[item.id] = replace(
                    item,
                    stock=max(0, item.stock - sell_qty),
                    sold=item.sold + sell_qty,
                )
                deducted[item.id] = deducted.get(item.id, 0) + sell_qty

            received = replace(order, received=True)
            result["order"] = received
            return replace(
                state,
                items=tuple(stock[item.id] for item in state.items),
                orders=tuple(
                    received if o.id == order_id else o for o in state.orders
                ),
                daily_income=state.daily_income + order.total,
                daily_sold=state.daily_sold + order.nominal_quantity,
            )

        if self._store.apply(mutation) is None:
            logger.debug(f"receive_order no-op: order={order_id}")
            return False

        order = result["order"]
        shortfall = order.nominal_quantity - sum(deducted.values())
        logger.info(
            f"Order received: {order_id} total={order.total} "
            f"qty={order.nominal_quantity} shortfall={shortfall}"
        )
        notify(
            LEDGER_ORDER_RECEIVED,
            build_order_received_payload(order, deducted),
            self._registry,
        )
        return True

    # ── createQuickOrder ───────────────────────────────────────

    def create_quick_order(self) -> Optional[Order]:
        """Walk-in order for one unit of the first catalog item."""
        result: dict[str, Order] = {}

        def mutation(state: LedgerState) -> Optional[LedgerState]:
            if not state.items:
                return None
            first = state.items[0]
            order = Order(
                id=new_id("o"),
                customer=WALK_IN_CUSTOMER,
                line_items=(LineItem(item_id=first.id, qty=1),),
                total=first.price,
                created_at=timestamp(self._clock.now()),
                received=False,
            )
            result["order"] = order
            return replace(state, orders=(order,) + state.orders)

        if self._store.apply(mutation) is None:
            logger.debug("create_quick_order no-op: catalog is empty")
            return None

        order = result["order"]
        logger.info(f"Walk-in order created: {order.id} total={order.total}")
        notify(LEDGER_ORDER_CREATED, build_order_created_payload(order), self._registry)
        return order


__all__ = ["LedgerService", "WALK_IN_CUSTOMER"]
