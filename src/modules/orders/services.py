"""Order service layer (Use Cases).

Orchestrates checkout, status management and cancellation.  All write
operations are atomic: the service defines the unit-of-work boundary,
and every side effect (stock movement, timestamps, history rows, cart
clearing) is an explicit step of the use case.

Business rules enforced:
- Checkout needs a non-empty cart whose products are all available and
  in stock; any failing line aborts the whole checkout.
- Stock is taken with conditional updates, in ascending product order.
- Order items copy the cart's frozen prices; the total is fixed at
  checkout and never recomputed.
- Status transitions follow the state machine; entering a status stamps
  its timestamp field in the same save.
- Cancelling (from pending or paid only) returns every item's quantity
  to stock.
- Every status change, creation included, writes a history row.
- Orders are never deleted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.core.exceptions import (
    EmptyCartError,
    ImmutableRecordError,
    InactiveProductError,
    InvalidStatusError,
    InvalidTransitionError,
)
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNotFound
from modules.products.services import ProductService

if TYPE_CHECKING:
    from django.contrib.auth.models import AbstractBaseUser

    from modules.carts.repositories.interfaces import ICartRepository
    from modules.orders.dtos import CheckoutDTO
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).  Stock moves
    through ``ProductService`` so checkout and cancellation share the
    conditional-update primitives used everywhere else.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._order_repo = order_repository
        self._cart_repo = cart_repository
        self._inventory = ProductService(repository=product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def checkout(self, user_id: int, dto: CheckoutDTO) -> Order:
        """Turn the user's cart into a pending order.

        Steps:
        1. Lock the cart lines (ordered by product id to avoid deadlocks).
        2. For each line, check the product is available and take its
           quantity from stock.
        3. Persist the order with one item per line at the frozen price.
        4. Record the creation history row.
        5. Clear the cart.

        Raises:
            EmptyCartError: the cart has no lines.
            ProductNotFound: a product was deleted.
            InactiveProductError: a product is no longer available.
            InsufficientStockError: a line exceeds the remaining stock.
        """
        log = logger.bind(user_id=user_id)
        log.info("order.checkout_started")

        lines = self._cart_repo.list_for_update(user_id)
        if not lines:
            raise EmptyCartError("Cannot check out an empty cart.")

        items = []
        for line in sorted(lines, key=lambda line: line.product_id):
            product = self._inventory.get_product(line.product_id)
            if not product.is_available:
                log.warning("order.product_unavailable", product_id=product.id)
                raise InactiveProductError(
                    f"Product {product.id} is no longer available."
                )
            self._inventory.decrease_stock(product.id, line.quantity)
            items.append(
                {
                    "product_id": product.id,
                    "quantity": line.quantity,
                    "unit_price": line.unit_price,
                }
            )

        order = self._order_repo.create(
            {
                "user_id": user_id,
                "shipping_address": dto.shipping_address,
                "contact_phone": dto.contact_phone,
                "notes": dto.notes,
                "items": items,
            }
        )
        self._order_repo.add_history(
            order_id=order.id,
            old_status=None,
            new_status=OrderStatus.PENDING,
            user_id=user_id,
            notes="Order created",
        )
        self._cart_repo.clear(user_id)

        log.info("order.checkout_completed", order_id=order.id, total=str(order.total))
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def change_status(
        self,
        order_id: int,
        new_status: str,
        notes: str = "",
        user: Optional[AbstractBaseUser] = None,
    ) -> Order:
        """Transition an order to a new status.

        Acquires a row-level lock (``SELECT FOR UPDATE``) on the order
        before validating the transition.  A move to ``cancelled`` goes
        through ``cancel`` so stock is always restored.

        Raises:
            InvalidStatusError: unknown status or disallowed transition.
            OrderNotFound: order does not exist.
        """
        if new_status not in OrderStatus.values:
            raise InvalidStatusError(f"Unknown order status '{new_status}'.")

        order = self._get_locked(order_id)
        log = logger.bind(
            order_id=order.id, current_status=order.status, new_status=new_status
        )

        if not order.can_transition_to(new_status):
            log.warning("order.invalid_transition")
            raise InvalidStatusError(
                f"Cannot transition from {order.status} to {new_status}."
            )

        if new_status == OrderStatus.CANCELLED:
            return self.cancel(order_id, notes=notes, user=user)

        old_status = order.status
        fields = order.stamp_transition(new_status, timezone.now())
        self._order_repo.save(order, update_fields=fields)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=old_status,
            new_status=new_status,
            user_id=_user_id(user),
            notes=notes,
        )

        log.info("order.status_changed")
        return self._order_repo.get_by_id(order.id) or order

    @transaction.atomic
    def cancel(
        self,
        order_id: int,
        notes: str = "",
        user: Optional[AbstractBaseUser] = None,
    ) -> Order:
        """Cancel an order and return its items to stock.

        Acquires a row-level lock on the order **first** so two concurrent
        cancellations cannot restore stock twice.

        Raises:
            OrderNotFound: order does not exist.
            InvalidTransitionError: the order is not pending or paid.
        """
        order = self._get_locked(order_id)
        log = logger.bind(order_id=order.id, current_status=order.status)

        if not order.can_be_cancelled:
            log.warning("order.cancel_not_allowed")
            raise InvalidTransitionError(
                f"Cannot cancel order {order.id} in status {order.status}."
            )

        for item in sorted(order.items.all(), key=lambda item: item.product_id):
            self._inventory.increase_stock(item.product_id, item.quantity)
            log.info(
                "order.stock_restored",
                product_id=item.product_id,
                quantity=item.quantity,
            )

        old_status = order.status
        fields = order.stamp_transition(OrderStatus.CANCELLED, timezone.now())
        self._order_repo.save(order, update_fields=fields)
        self._order_repo.add_history(
            order_id=order.id,
            old_status=old_status,
            new_status=OrderStatus.CANCELLED,
            user_id=_user_id(user),
            notes=notes or "Order cancelled",
        )

        log.info("order.cancelled")
        return self._order_repo.get_by_id(order.id) or order

    def delete_order(self, order_id: int) -> None:
        """Orders are financial records: they are cancelled, never deleted.

        Raises:
            ImmutableRecordError: always.
        """
        logger.warning("order.delete_refused", order_id=order_id)
        raise ImmutableRecordError(
            f"Order {order_id} cannot be deleted; cancel it instead."
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: int) -> Order:
        """Retrieve a single order by ID.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def by_status(self, status: str) -> QuerySet[Order]:
        if status not in OrderStatus.values:
            raise InvalidStatusError(f"Unknown order status '{status}'.")
        return self._order_repo.by_status(status)

    def history_for_user(self, user_id: int) -> QuerySet[Order]:
        """The user's orders, newest first."""
        return self._order_repo.for_user(user_id)

    def list_orders(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        return self._order_repo.list(filters)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_locked(self, order_id: int) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order


def _user_id(user: Optional[AbstractBaseUser]) -> Optional[int]:
    if user is None or not user.is_authenticated:
        return None
    return user.pk
