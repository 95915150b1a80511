"""Unit tests for Order, OrderItem and OrderStatusHistory models."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError, models, transaction
from django.db.models import ProtectedError

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory

pytestmark = pytest.mark.unit


@pytest.fixture()
def order(user):
    return Order.objects.create(
        user=user,
        total=Decimal("0.00"),
        shipping_address="1 Main St",
        contact_phone="555-0100",
    )


class TestOrder:
    def test_defaults(self, order):
        assert order.status == OrderStatus.PENDING
        assert order.notes == ""
        assert order.paid_at is None
        assert order.cancelled_at is None
        assert str(order) == f"Order {order.pk} (pending)"

    def test_negative_total_rejected(self, order):
        with pytest.raises(IntegrityError), transaction.atomic():
            Order.objects.filter(pk=order.pk).update(total=Decimal("-1.00"))

    def test_user_with_orders_cannot_be_deleted(self, order, user):
        with pytest.raises(ProtectedError):
            user.delete()

    def test_for_user(self, order, user, other_user):
        assert list(Order.objects.for_user(user.id)) == [order]
        assert not Order.objects.for_user(other_user.id).exists()


class TestOrderItem:
    def test_subtotal_computed_on_save(self, order, product):
        item = OrderItem.objects.create(
            order=order, product=product, quantity=3, unit_price=Decimal("2.49")
        )
        assert item.subtotal == Decimal("7.47")

        item.quantity = 4
        item.save()
        item.refresh_from_db()
        assert item.subtotal == Decimal("9.96")

    def test_product_with_order_items_cannot_be_hard_deleted(self, order, product):
        OrderItem.objects.create(
            order=order, product=product, quantity=1, unit_price=product.price
        )
        with pytest.raises(ProtectedError):
            models.Model.delete(product)


class TestOrderStatusHistory:
    def test_system_entry(self, order):
        entry = OrderStatusHistory.objects.create(
            order=order, old_status=None, new_status=OrderStatus.PENDING
        )
        assert entry.user is None
        assert str(entry) == f"{order.pk} : None -> pending"

    def test_newest_first(self, order):
        first = OrderStatusHistory.objects.create(
            order=order, old_status=None, new_status=OrderStatus.PENDING
        )
        second = OrderStatusHistory.objects.create(
            order=order, old_status=OrderStatus.PENDING, new_status=OrderStatus.PAID
        )
        assert list(order.status_history.all()) == [second, first]
