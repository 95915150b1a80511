"""Stock concurrency integration test.

Proves that conditional stock updates under ``select_for_update`` keep
concurrent checkouts from overselling, and that concurrent cancels of
one order return its stock only once.

Scenario:
- Product "Gamer PC" with **stock = 5**.
- 10 users each hold 1 unit in their cart and check out simultaneously.
- Exactly 5 succeed, 5 raise ``InsufficientStockError``.
- Final stock is 0 (never negative).

Uses ``TransactionTestCase`` so each thread can see committed data and
row-level locking behaves realistically.  Skipped on backends without
``SELECT ... FOR UPDATE`` (SQLite).
"""

from __future__ import annotations

import logging
import unittest
from concurrent.futures import ThreadPoolExecutor, as_completed
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.db import connection, connections
from django.test import TransactionTestCase

from modules.carts.models import CartLine
from modules.carts.repositories.django_repository import CartDjangoRepository
from modules.catalog.models import Category, Subcategory
from modules.core.exceptions import InsufficientStockError, InvalidTransitionError
from modules.orders.dtos import CheckoutDTO
from modules.orders.models import Order
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderService
from modules.products.models import Product
from modules.products.repositories.django_repository import ProductDjangoRepository

logger = logging.getLogger(__name__)

INITIAL_STOCK = 5
NUM_WORKERS = 10


def _service() -> OrderService:
    return OrderService(
        order_repository=OrderDjangoRepository(),
        cart_repository=CartDjangoRepository(),
        product_repository=ProductDjangoRepository(),
    )


@unittest.skipUnless(
    connection.features.has_select_for_update,
    "row-level locking needs a backend with SELECT ... FOR UPDATE",
)
class TestStockConcurrency(TransactionTestCase):
    """Prove atomic stock reservation under concurrent load."""

    def setUp(self):
        category = Category.objects.create(name="Computers")
        subcategory = Subcategory.objects.create(category=category, name="Desktops")
        self.product = Product.objects.create(
            name="Gamer PC",
            price=Decimal("2999.99"),
            stock=INITIAL_STOCK,
            subcategory=subcategory,
            category=category,
        )
        User = get_user_model()
        self.users = []
        for i in range(NUM_WORKERS):
            user = User.objects.create_user(username=f"buyer{i}", password="x")
            CartLine.objects.create(
                user=user, product=self.product, quantity=1, unit_price=self.product.price
            )
            self.users.append(user)

    def _checkout_in_thread(self, user_id: int) -> str:
        """Attempt a checkout. Returns 'success' or 'insufficient'."""
        service = _service()
        dto = CheckoutDTO(shipping_address="1 Main St", contact_phone="555-0100")
        try:
            service.checkout(user_id, dto)
            return "success"
        except InsufficientStockError:
            logger.warning("User %d: insufficient stock (expected)", user_id)
            return "insufficient"
        finally:
            connections.close_all()

    def _run_all(self) -> list[str]:
        results = []
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [pool.submit(self._checkout_in_thread, u.id) for u in self.users]
            for future in as_completed(futures):
                results.append(future.result())
        return results

    def test_concurrent_checkouts_exhaust_stock(self):
        results = self._run_all()

        self.assertEqual(results.count("success"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, 0)
        self.assertEqual(Order.objects.count(), INITIAL_STOCK)

    def test_stock_is_conserved(self):
        results = self._run_all()

        self.product.refresh_from_db()
        self.assertGreaterEqual(self.product.stock, 0)
        self.assertEqual(INITIAL_STOCK, results.count("success") + self.product.stock)


@unittest.skipUnless(
    connection.features.has_select_for_update,
    "row-level locking needs a backend with SELECT ... FOR UPDATE",
)
class TestCancelConcurrency(TransactionTestCase):
    """Concurrent cancels of one order restore its stock exactly once."""

    def setUp(self):
        category = Category.objects.create(name="Computers")
        subcategory = Subcategory.objects.create(category=category, name="Laptops")
        self.product = Product.objects.create(
            name="Ultrabook",
            price=Decimal("1499.00"),
            stock=INITIAL_STOCK,
            subcategory=subcategory,
            category=category,
        )
        user = get_user_model().objects.create_user(username="buyer", password="x")
        CartLine.objects.create(
            user=user, product=self.product, quantity=3, unit_price=self.product.price
        )
        self.order = _service().checkout(
            user.id, CheckoutDTO(shipping_address="1 Main St", contact_phone="555-0100")
        )

    def _cancel_in_thread(self) -> str:
        try:
            _service().cancel(self.order.id)
            return "cancelled"
        except InvalidTransitionError:
            return "refused"
        finally:
            connections.close_all()

    def test_stock_restored_once(self):
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            futures = [pool.submit(self._cancel_in_thread) for _ in range(NUM_WORKERS)]
            results = [future.result() for future in as_completed(futures)]

        self.assertEqual(results.count("cancelled"), 1)
        self.assertEqual(results.count("refused"), NUM_WORKERS - 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock, INITIAL_STOCK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "cancelled")
        self.assertEqual(
            self.order.status_history.filter(new_status="cancelled").count(), 1
        )
