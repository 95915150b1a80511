"""Unit tests for the Order status state machine.

Covers:
- Model-level helpers (can_transition_to, is_terminal, can_be_cancelled).
- Every allowed and refused transition through the service.
- Timestamp stamping and history recording on every transition.
- Full lifecycle.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.exceptions import InvalidStatusError, InvalidTransitionError
from modules.orders.constants import (
    CANCELLABLE_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import OrderNotFound
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.unit

ALL_STATUSES = list(OrderStatus.values)


@pytest.fixture()
def order(place_order, user, product):
    return place_order(user, [(product, 1)])


def _force_status(order: Order, status: str) -> Order:
    Order.objects.filter(pk=order.pk).update(status=status)
    order.refresh_from_db()
    return order


# ===========================================================================
# Transition table
# ===========================================================================


class TestTransitionTable:
    def test_terminal_states_have_no_exits(self):
        for status in TERMINAL_STATES:
            assert VALID_TRANSITIONS[status] == set()

    def test_every_status_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(ALL_STATUSES)

    def test_cancellable_states(self):
        assert CANCELLABLE_STATES == {OrderStatus.PENDING, OrderStatus.PAID}


class TestModelHelpers:
    @pytest.mark.parametrize(
        "current,target",
        [
            (current, target)
            for current, targets in VALID_TRANSITIONS.items()
            for target in targets
        ],
    )
    def test_allowed(self, current, target):
        assert Order(status=current).can_transition_to(target) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (current, target)
            for current in ALL_STATUSES
            for target in ALL_STATUSES
            if target not in VALID_TRANSITIONS[current]
        ],
    )
    def test_refused(self, current, target):
        assert Order(status=current).can_transition_to(target) is False

    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_is_terminal(self, status):
        assert Order(status=status).is_terminal is (status in TERMINAL_STATES)

    def test_stamp_transition_sets_timestamp(self):
        order = Order(status=OrderStatus.PENDING)
        now = timezone.now()
        fields = order.stamp_transition(OrderStatus.PAID, now)

        assert fields == ["status", "paid_at"]
        assert order.status == OrderStatus.PAID
        assert order.paid_at == now

    def test_stamp_pending_has_no_timestamp(self):
        assert Order(status=OrderStatus.PAID).stamp_transition(
            OrderStatus.PENDING, None
        ) == ["status"]


# ===========================================================================
# Service transitions
# ===========================================================================


class TestChangeStatus:
    def test_pending_to_paid_stamps_paid_at(self, order_service, order, staff_user):
        with freeze_time("2026-03-01 10:00:00"):
            updated = order_service.change_status(
                order.id, OrderStatus.PAID, notes="Card captured", user=staff_user
            )

        assert updated.status == OrderStatus.PAID
        assert updated.paid_at.isoformat().startswith("2026-03-01T10:00:00")
        assert updated.shipped_at is None

        latest = OrderStatusHistory.objects.get(order=order, new_status=OrderStatus.PAID)
        assert latest.old_status == OrderStatus.PENDING
        assert latest.new_status == OrderStatus.PAID
        assert latest.user_id == staff_user.id
        assert latest.notes == "Card captured"

    def test_full_lifecycle(self, order_service, order):
        for status in (OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            order = order_service.change_status(order.id, status)

        assert order.status == OrderStatus.DELIVERED
        assert order.paid_at and order.shipped_at and order.delivered_at
        assert order.cancelled_at is None
        # creation row plus three transitions
        assert order.status_history.count() == 4

    def test_history_without_user_is_system(self, order_service, order):
        order_service.change_status(order.id, OrderStatus.PAID)
        latest = OrderStatusHistory.objects.get(order=order, new_status=OrderStatus.PAID)
        assert latest.user_id is None

    @pytest.mark.parametrize(
        "start,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.DELIVERED),
            (OrderStatus.PAID, OrderStatus.PENDING),
            (OrderStatus.SHIPPED, OrderStatus.PAID),
            (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
            (OrderStatus.CANCELLED, OrderStatus.PAID),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
            (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.CANCELLED),
        ],
    )
    def test_refused_transition(self, order_service, order, start, target):
        _force_status(order, start)
        history_before = OrderStatusHistory.objects.filter(order=order).count()

        with pytest.raises(InvalidStatusError):
            order_service.change_status(order.id, target)

        order.refresh_from_db()
        assert order.status == start
        assert OrderStatusHistory.objects.filter(order=order).count() == history_before

    def test_invalid_status_is_an_invalid_transition(self, order_service, order):
        with pytest.raises(InvalidTransitionError):
            order_service.change_status(order.id, OrderStatus.DELIVERED)

    def test_unknown_status(self, order_service, order):
        with pytest.raises(InvalidStatusError):
            order_service.change_status(order.id, "lost")

    def test_same_status_refused(self, order_service, order):
        with pytest.raises(InvalidStatusError):
            order_service.change_status(order.id, OrderStatus.PENDING)

    def test_change_to_cancelled_restores_stock(self, order_service, order, product):
        product.refresh_from_db()
        assert product.stock == 9

        cancelled = order_service.change_status(order.id, OrderStatus.CANCELLED)

        product.refresh_from_db()
        assert cancelled.status == OrderStatus.CANCELLED
        assert cancelled.cancelled_at is not None
        assert product.stock == 10

    def test_refused_cancel_leaves_stock_alone(self, order_service, order, product):
        _force_status(order, OrderStatus.SHIPPED)

        with pytest.raises(InvalidStatusError):
            order_service.change_status(order.id, OrderStatus.CANCELLED)

        product.refresh_from_db()
        assert product.stock == 9

    def test_only_transition_fields_are_written(self, order_service, order):
        original_save = OrderDjangoRepository.save
        with patch.object(
            OrderDjangoRepository, "save", autospec=True, side_effect=original_save
        ) as save:
            order_service.change_status(order.id, OrderStatus.PAID)

        assert save.call_args.kwargs["update_fields"] == ["status", "paid_at"]

    def test_missing_order(self, order_service):
        with pytest.raises(OrderNotFound):
            order_service.change_status(999, OrderStatus.PAID)
