"""Order repository interface.

Extends ``IRepository[Order]`` with the methods required by the Order
aggregate: creation with items, row locks for status changes, and the
status history trail.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository, Queryable

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes OrderItem children and
    OrderStatusHistory records.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Create an order with its items.

        ``data`` must include ``user_id``, ``shipping_address``,
        ``contact_phone`` and ``items`` (list of dicts with ``product_id``,
        ``quantity``, ``unit_price``); ``notes`` is optional.  ``total`` is
        computed from the items.
        """

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order (items prefetched) with a row-level lock."""

    @abstractmethod
    def add_history(
        self,
        order_id: int,
        old_status: Optional[str],
        new_status: str,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def by_status(self, status: str) -> Queryable[Order]:
        """Orders currently in ``status``."""

    @abstractmethod
    def for_user(self, user_id: int) -> Queryable[Order]:
        """The user's orders, newest first."""
