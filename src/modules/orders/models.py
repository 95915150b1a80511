"""Order, OrderItem, and OrderStatusHistory models.

Business rules implemented:
- Status transitions follow ``VALID_TRANSITIONS``; delivered and
  cancelled are terminal (enforced at service layer).
- Entering paid / shipped / delivered / cancelled stamps the matching
  ``*_at`` field in the same save as the status.
- Each status change generates a history record.
- Orders are never physically deleted: ``Order.delete()`` and
  ``Order.objects...delete()`` raise ``ImmutableRecordError``.
- User FK uses PROTECT to preserve financial history.
- OrderItem snapshots the cart's frozen price (``unit_price``) and
  always stores ``subtotal = quantity * unit_price``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from django.conf import settings
from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models

from modules.core.exceptions import ImmutableRecordError
from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_STATES,
    CONTACT_PHONE_MAX_LENGTH,
    TERMINAL_STATES,
    TRANSITION_TIMESTAMPS,
    VALID_TRANSITIONS,
    OrderStatus,
)

IMMUTABLE_MESSAGE = "Orders cannot be deleted; cancel them instead."


class OrderQuerySet(models.QuerySet):
    def delete(self) -> tuple[int, dict[str, int]]:
        raise ImmutableRecordError(IMMUTABLE_MESSAGE)

    def for_user(self, user_id: int) -> OrderQuerySet:
        return self.filter(user_id=user_id)


class Order(BaseModel):
    """Order aggregate root."""

    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    total: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    shipping_address: models.TextField = models.TextField(
        validators=[MinLengthValidator(1)]
    )
    contact_phone: models.CharField = models.CharField(
        max_length=CONTACT_PHONE_MAX_LENGTH,
        validators=[MinLengthValidator(1)],
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    paid_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    shipped_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    cancelled_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total__gte=0),
                name="orders_total_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATES

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        allowed = VALID_TRANSITIONS.get(self.status, set())
        return new_status in allowed

    def stamp_transition(self, new_status: str, at: datetime) -> list[str]:
        """Move to ``new_status`` and stamp its timestamp field.

        Returns the fields to pass as ``update_fields``.  Does not save and
        does not validate the transition.
        """
        self.status = new_status
        fields = ["status"]
        timestamp_field = TRANSITION_TIMESTAMPS.get(new_status)
        if timestamp_field:
            setattr(self, timestamp_field, at)
            fields.append(timestamp_field)
        return fields

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def delete(self, *args: Any, **kwargs: Any) -> tuple[int, dict[str, int]]:
        raise ImmutableRecordError(IMMUTABLE_MESSAGE)

    def __str__(self) -> str:
        return f"Order {self.pk} ({self.status})"


class OrderItem(BaseModel):
    """Line item linking an Order to a Product.

    ``unit_price`` is a **snapshot** copied from the cart line at checkout.
    It never changes even if the product price is updated later.
    ``subtotal`` is always ``quantity * unit_price``, recalculated on every save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product: models.ForeignKey = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(
        max_digits=10,
        decimal_places=2,
    )
    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        editable=False,
    )

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.subtotal = self.quantity * self.unit_price
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_id} x{self.quantity} (${self.subtotal})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    ``old_status`` is ``None`` for the creation row written at checkout.
    ``user`` is nullable: ``None`` means the change was performed by the
    system.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status: models.CharField = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    user: models.ForeignKey = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes: models.TextField = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["order", "-created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"
