import threading
import unittest
from decimal import Decimal
from unittest.mock import Mock

from apps.carts.checkout import (
    CheckoutCoordinator,
    CheckoutInconsistencyError,
    EmptyCartError,
    InsufficientStockError,
)
from apps.carts.mappers import CartMapper, LineItemMapper
from apps.carts.services import CartStore
from apps.carts.tests.fakes import FakeLineItemRepository
from apps.catalog.services import InventoryLedger, StockConflictError
from apps.catalog.tests.fakes import FakeProductRepository


class CheckoutCoordinatorTests(unittest.TestCase):
    def setUp(self):
        self.products = FakeProductRepository()
        self.products.add(1, stock=10, price="2.50", name="Mug")
        self.products.add(2, stock=1, price="10.00", name="Lamp")
        self.line_items = FakeLineItemRepository(self.products)
        self.store = CartStore(
            line_items=self.line_items,
            products=self.products,
            cart_mapper=CartMapper(LineItemMapper()),
        )
        self.ledger = InventoryLedger(self.products)
        self.coordinator = CheckoutCoordinator(self.store, self.ledger)

    def test_empty_cart_rejected(self):
        with self.assertRaises(EmptyCartError) as ctx:
            self.coordinator.checkout(7)
        self.assertEqual(ctx.exception.code, "EMPTY_CART")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(self.products.apply_calls, 0)

    def test_successful_checkout_takes_stock_and_clears_cart(self):
        self.store.add_item(7, 1, 4)
        self.store.add_item(7, 2, 1)
        receipt = self.coordinator.checkout(7)
        self.assertEqual(receipt.user_id, 7)
        self.assertEqual([(i.product_id, i.quantity) for i in receipt.items], [(1, 4), (2, 1)])
        self.assertEqual(receipt.total_charged, Decimal("20.00"))
        self.assertEqual(self.products.stock_of(1), 6)
        self.assertEqual(self.products.stock_of(2), 0)
        self.assertTrue(self.store.snapshot(7).is_empty)

    def test_insufficient_stock_keeps_cart_and_stock(self):
        self.store.add_item(7, 1, 2)
        self.store.add_item(7, 2, 3)
        with self.assertRaises(InsufficientStockError) as ctx:
            self.coordinator.checkout(7)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(
            ctx.exception.details,
            [{"productId": 2, "requested": 3, "available": 1, "shortBy": 2}],
        )
        self.assertEqual(self.products.stock_of(1), 10)
        self.assertEqual(self.products.stock_of(2), 1)
        self.assertEqual(
            [(i.product_id, i.quantity) for i in self.store.snapshot(7).items],
            [(1, 2), (2, 3)],
        )

    def test_checkout_only_touches_own_cart(self):
        self.store.add_item(7, 1, 1)
        self.store.add_item(8, 1, 2)
        self.coordinator.checkout(7)
        self.assertEqual(self.line_items.quantity_of(8, 1), 2)
        self.assertEqual(self.products.stock_of(1), 9)

    def test_items_added_during_checkout_stay_in_cart(self):
        self.store.add_item(7, 1, 2)
        ledger = Mock(wraps=self.ledger)

        def add_then_reserve(requests):
            # Another request adds to the cart after the snapshot was taken.
            self.store.add_item(7, 1, 3)
            self.store.add_item(7, 2, 1)
            return self.ledger.reserve_and_decrement(requests)

        ledger.reserve_and_decrement.side_effect = add_then_reserve
        receipt = CheckoutCoordinator(self.store, ledger).checkout(7)

        self.assertEqual([(i.product_id, i.quantity) for i in receipt.items], [(1, 2)])
        self.assertEqual(self.products.stock_of(1), 8)
        self.assertEqual(
            [(i.product_id, i.quantity) for i in self.store.snapshot(7).items],
            [(1, 3), (2, 1)],
        )

    def test_conflict_propagates_and_cart_survives(self):
        self.store.add_item(7, 1, 1)
        ledger = Mock()
        ledger.reserve_and_decrement.side_effect = StockConflictError([1], 5)
        coordinator = CheckoutCoordinator(self.store, ledger)
        with self.assertRaises(StockConflictError):
            coordinator.checkout(7)
        self.assertFalse(self.store.snapshot(7).is_empty)

    def test_clear_failure_reports_inconsistency_once(self):
        self.store.add_item(7, 1, 3)
        self.line_items.fail_on_clear = RuntimeError("connection lost")
        with self.assertLogs("apps.carts.checkout", level="CRITICAL") as logs:
            with self.assertRaises(CheckoutInconsistencyError) as ctx:
                self.coordinator.checkout(7)
        self.assertIn("manual reconciliation required", logs.output[0])
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertEqual(ctx.exception.receipt.total_charged, Decimal("7.50"))
        # Stock was taken exactly once and the cart still holds the item.
        self.assertEqual(self.products.stock_of(1), 7)
        self.assertEqual(self.line_items.quantity_of(7, 1), 3)

    def test_clear_after_inconsistency_does_not_touch_stock(self):
        self.store.add_item(7, 1, 3)
        self.line_items.fail_on_clear = RuntimeError("connection lost")
        with self.assertLogs("apps.carts.checkout", level="CRITICAL"):
            with self.assertRaises(CheckoutInconsistencyError):
                self.coordinator.checkout(7)
        self.line_items.fail_on_clear = None
        self.assertEqual(self.coordinator.clear_after_inconsistency(7), 1)
        self.assertTrue(self.store.snapshot(7).is_empty)
        self.assertEqual(self.products.stock_of(1), 7)


class ConcurrentCheckoutTests(unittest.TestCase):
    def test_two_users_racing_for_last_units(self):
        products = FakeProductRepository()
        products.add(1, stock=5, price="1.00")
        products.read_barrier = threading.Barrier(2)
        line_items = FakeLineItemRepository(products)
        store = CartStore(line_items, products, CartMapper())
        coordinator = CheckoutCoordinator(store, InventoryLedger(products))
        store.add_item(1, 1, 3)
        store.add_item(2, 1, 3)

        results = {}
        lock = threading.Lock()

        def run(user_id):
            try:
                receipt = coordinator.checkout(user_id)
                outcome = ("ok", receipt)
            except InsufficientStockError as exc:
                outcome = ("short", exc)
            with lock:
                results[user_id] = outcome

        threads = [threading.Thread(target=run, args=(uid,)) for uid in (1, 2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        kinds = sorted(kind for kind, _ in results.values())
        self.assertEqual(kinds, ["ok", "short"])
        self.assertEqual(products.stock_of(1), 2)
        loser = next(uid for uid, (kind, _) in results.items() if kind == "short")
        self.assertEqual(line_items.quantity_of(loser, 1), 3)
        self.assertEqual(results[loser][1].details[0]["available"], 2)
        self.assertEqual(results[loser][1].details[0]["shortBy"], 1)
