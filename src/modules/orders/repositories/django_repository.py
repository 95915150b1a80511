"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  The
aggregate (Order + OrderItems) is written inside ``transaction.atomic()``.

Concurrency control on status updates uses ``select_for_update()``
to prevent race conditions (no ``version`` field exists on the model).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

import structlog
from django.db import transaction
from django.db.models import QuerySet

from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderItem, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _base(self) -> QuerySet[Order]:
        return Order.objects.select_related("user").prefetch_related(
            "items__product", "status_history"
        )

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        items = data["items"]
        total = sum(
            (item["unit_price"] * item["quantity"] for item in items),
            Decimal("0.00"),
        )
        order = Order.objects.create(
            user_id=data["user_id"],
            status=OrderStatus.PENDING,
            total=total,
            shipping_address=data["shipping_address"],
            contact_phone=data["contact_phone"],
            notes=data.get("notes", ""),
        )
        for item_data in items:
            OrderItem(
                order=order,
                product_id=item_data["product_id"],
                quantity=item_data["quantity"],
                unit_price=item_data["unit_price"],
            ).save()

        logger.info(
            "order.created", order_id=order.id, item_count=len(items), total=str(total)
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with eager-loaded relations.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return self._base().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Eager-loads items so the caller can iterate over them while the
        row is locked.
        """
        try:
            return (
                Order.objects.select_for_update()
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        """List orders with optional filters and eager-loaded relations.

        Supported filter keys include ``status``, ``user_id`` and
        ``created_at__range``.
        """
        queryset = self._base()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def by_status(self, status: str) -> QuerySet[Order]:
        return self.list({"status": status})

    def for_user(self, user_id: int) -> QuerySet[Order]:
        return self._base().for_user(user_id).order_by("-created_at", "-id")

    # ------------------------------------------------------------------
    # Save / Delete (IRepository contract)
    # ------------------------------------------------------------------

    def save(self, entity: Order, update_fields: Optional[list] = None) -> Order:
        entity.save(update_fields=update_fields)
        logger.info("order.saved", order_id=entity.id, status=entity.status)
        return entity

    def delete(self, id: int) -> bool:
        """Orders are immutable records; this always raises."""
        Order(id=id).delete()
        return False

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: int,
        old_status: Optional[str],
        new_status: str,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=order_id,
            old_status=old_status,
            new_status=new_status,
        )
        return history
