"""
Tests for engines.ledger.services - the five transaction operations.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.events import ObserverRegistry
from core.time import FixedClock
from engines.ledger.events import (
    LEDGER_ITEM_ADDED,
    LEDGER_ORDER_RECEIVED,
    LEDGER_SALE_RECORDED,
)
from engines.ledger.models import Item, LineItem, Order
from engines.ledger.services import WALK_IN_CUSTOMER, LedgerService
from engines.ledger.snapshot import state_to_snapshot
from engines.ledger.store import LedgerState, LedgerStore

LOCAL = timezone(timedelta(hours=3))
NOW = datetime(2024, 1, 1, 10, 30, tzinfo=LOCAL)


def _service(items=(), orders=(), registry=None):
    committed = []
    store = LedgerStore(
        LedgerState(current_date="2024-01-01", items=tuple(items), orders=tuple(orders)),
        on_commit=committed.append,
    )
    service = LedgerService(store=store, clock=FixedClock(NOW), registry=registry)
    return service, store, committed


def _tee(stock=5, price="10", sold=0):
    return Item(id="i1", name="Tee", price=Decimal(price), stock=stock, sold=sold)


# ══════════════════════════════════════════════════════════════
# recordSale
# ══════════════════════════════════════════════════════════════

class TestRecordSale:
    def test_sell_then_clamp_scenario(self):
        service, store, _ = _service(items=[_tee()])

        sale = service.record_sale("i1", 3)
        assert store.items[0].stock == 2
        assert store.items[0].sold == 3
        assert store.daily_income == Decimal("30")
        assert len(store.sales) == 1
        assert (sale.item_id, sale.qty, sale.total) == ("i1", 3, Decimal("30"))

        clamped = service.record_sale("i1", 10)
        assert clamped.qty == 2
        assert store.items[0].stock == 0
        assert store.items[0].sold == 5
        assert store.daily_income == Decimal("50")
        assert store.daily_sold == 5

    def test_sale_is_stamped_with_clock(self):
        service, _, _ = _service(items=[_tee()])
        assert service.record_sale("i1", 1).date.startswith("2024-01-01T10:30")

    def test_out_of_stock_is_no_op(self):
        service, store, committed = _service(items=[_tee(stock=0)])
        assert service.record_sale("i1", 1) is None
        assert store.sales == ()
        assert committed == []

    @pytest.mark.parametrize("qty", [0, -3, "abc", None, float("nan"), float("-inf")])
    def test_non_positive_or_bad_qty_is_no_op(self, qty):
        service, store, _ = _service(items=[_tee()])
        assert service.record_sale("i1", qty) is None
        assert store.daily_income == Decimal("0")

    @pytest.mark.parametrize("qty", [float("inf"), Decimal("Infinity")])
    def test_infinite_qty_sells_remaining_stock(self, qty):
        service, store, _ = _service(items=[_tee(stock=4)])

        sale = service.record_sale("i1", qty)

        assert sale.qty == 4
        assert store.items[0].stock == 0
        assert store.daily_income == Decimal("40")

    def test_unknown_item_is_no_op(self):
        service, _, committed = _service(items=[_tee()])
        assert service.record_sale("missing", 1) is None
        assert committed == []

    def test_decimal_prices_do_not_drift(self):
        service, store, _ = _service(items=[_tee(stock=10, price="19.99")])
        service.record_sale("i1", 3)
        assert store.daily_income == Decimal("59.97")

    def test_notifies_clamped_sale(self):
        registry = ObserverRegistry()
        seen = []
        registry.subscribe(LEDGER_SALE_RECORDED, seen.append)
        service, _, _ = _service(items=[_tee(stock=2)], registry=registry)

        service.record_sale("i1", 5)

        assert seen[0].payload["clamped"] is True
        assert seen[0].payload["requested_qty"] == 5


# ══════════════════════════════════════════════════════════════
# addItem / adjustStock
# ══════════════════════════════════════════════════════════════

class TestAddItem:
    def test_prepends_new_item(self):
        service, store, committed = _service(items=[_tee()])
        item = service.add_item("Scarf", 12.5, 4)

        assert store.items[0] == item
        assert item.id.startswith("i") and item.id != "i1"
        assert item.price == Decimal("12.5")
        assert item.sold == 0
        assert len(committed) == 1

    def test_clamps_negative_values(self):
        service, _, _ = _service()
        item = service.add_item("Broken", -5, -2)
        assert item.price == Decimal("0")
        assert item.stock == 0

    @pytest.mark.parametrize("price", [float("inf"), float("nan"), "Infinity", Decimal("-Infinity")])
    def test_non_finite_price_becomes_zero(self, price):
        service, store, committed = _service()

        item = service.add_item("Odd", price, 2)

        assert item.price == Decimal("0")
        assert state_to_snapshot(committed[-1])["items"][0]["price"] == 0
        assert service.adjust_stock(item.id, 1).stock == 3

    def test_infinite_stock_becomes_zero(self):
        service, _, _ = _service()
        assert service.add_item("Odd", 5, float("inf")).stock == 0

    def test_notifies(self):
        registry = ObserverRegistry()
        seen = []
        registry.subscribe(LEDGER_ITEM_ADDED, seen.append)
        service, _, _ = _service(registry=registry)
        service.add_item("Scarf", 10, 1)
        assert seen[0].payload["item"]["name"] == "Scarf"


class TestAdjustStock:
    def test_adds_and_removes(self):
        service, store, _ = _service(items=[_tee(stock=5)])
        assert service.adjust_stock("i1", 3).stock == 8
        assert service.adjust_stock("i1", -2).stock == 6
        assert store.items[0].stock == 6

    def test_floors_at_zero(self):
        service, store, _ = _service(items=[_tee(stock=5)])
        service.adjust_stock("i1", -50)
        assert store.items[0].stock == 0

    @pytest.mark.parametrize("delta", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_delta_is_no_op(self, delta):
        service, store, committed = _service(items=[_tee(stock=5)])
        assert service.adjust_stock("i1", delta) is None
        assert store.items[0].stock == 5
        assert committed == []

    def test_no_change_is_no_op(self):
        service, _, committed = _service(items=[_tee(stock=0)])
        assert service.adjust_stock("i1", -1) is None
        assert service.adjust_stock("i1", 0) is None
        assert service.adjust_stock("missing", 5) is None
        assert committed == []

    def test_does_not_touch_sold_or_income(self):
        service, store, _ = _service(items=[_tee(sold=4)])
        service.adjust_stock("i1", 10)
        assert store.items[0].sold == 4
        assert store.daily_income == Decimal("0")


# ══════════════════════════════════════════════════════════════
# receiveOrder / createQuickOrder
# ══════════════════════════════════════════════════════════════

def _alice_order(qty=2, total="20"):
    return Order(
        id="o1",
        customer="Alice",
        line_items=(LineItem(item_id="i1", qty=qty),),
        total=Decimal(total),
        created_at="2024-01-01T09:00:00+03:00",
    )


class TestReceiveOrder:
    def test_fulfils_from_stock(self):
        service, store, _ = _service(items=[_tee(stock=5)], orders=[_alice_order()])

        assert service.receive_order("o1") is True
        assert store.orders[0].received is True
        assert store.items[0].stock == 3
        assert store.items[0].sold == 2
        assert store.daily_income == Decimal("20")
        assert store.daily_sold == 2

    def test_is_idempotent(self):
        service, store, committed = _service(items=[_tee()], orders=[_alice_order()])
        assert service.receive_order("o1") is True
        assert service.receive_order("o1") is False
        assert store.items[0].stock == 3
        assert store.daily_income == Decimal("20")
        assert len(committed) == 1

    def test_short_stock_still_books_nominal_income(self):
        registry = ObserverRegistry()
        seen = []
        registry.subscribe(LEDGER_ORDER_RECEIVED, seen.append)
        service, store, _ = _service(
            items=[_tee(stock=1)], orders=[_alice_order(qty=3, total="30")], registry=registry,
        )

        service.receive_order("o1")

        assert store.items[0].stock == 0
        assert store.items[0].sold == 1
        assert store.daily_income == Decimal("30")
        assert store.daily_sold == 3
        assert seen[0].payload["deducted"] == {"i1": 1}

    def test_line_for_deleted_item_is_skipped(self):
        order = Order(
            id="o9",
            customer="Bob",
            line_items=(LineItem(item_id="gone", qty=1), LineItem(item_id="i1", qty=1)),
            total=Decimal("15"),
            created_at="2024-01-01T09:00:00+03:00",
        )
        service, store, _ = _service(items=[_tee()], orders=[order])

        assert service.receive_order("o9") is True
        assert store.items[0].stock == 4
        assert store.daily_sold == 2

    def test_unknown_order_is_no_op(self):
        service, _, committed = _service(items=[_tee()])
        assert service.receive_order("nope") is False
        assert committed == []


class TestCreateQuickOrder:
    def test_one_unit_of_first_item(self):
        service, store, _ = _service(items=[_tee(price="19.99")])
        order = service.create_quick_order()

        assert store.orders[0] == order
        assert order.customer == WALK_IN_CUSTOMER
        assert order.line_items == (LineItem(item_id="i1", qty=1),)
        assert order.total == Decimal("19.99")
        assert order.received is False
        assert order.created_at.startswith("2024-01-01")

    def test_counts_toward_day_orders(self):
        service, store, _ = _service(items=[_tee()])
        service.create_quick_order()
        assert store.state.orders_created_on("2024-01-01") == 1

    def test_empty_catalog_is_no_op(self):
        service, store, committed = _service()
        assert service.create_quick_order() is None
        assert store.orders == ()
        assert committed == []


class TestStockInvariantAcrossSequence:
    def test_stock_never_negative_and_sold_never_decreases(self):
        service, store, _ = _service(items=[_tee(stock=3)], orders=[_alice_order(qty=5)])
        observed_sold = []
        for step in (
            lambda: service.record_sale("i1", 2),
            lambda: service.adjust_stock("i1", -10),
            lambda: service.receive_order("o1"),
            lambda: service.adjust_stock("i1", 4),
            lambda: service.record_sale("i1", 9),
            lambda: service.create_quick_order(),
        ):
            step()
            item = store.items[0]
            assert item.stock >= 0
            observed_sold.append(item.sold)
        assert observed_sold == sorted(observed_sold)
