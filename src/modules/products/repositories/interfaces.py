"""Product repository interface.

Extends ``IRepository[Product]`` with the stock primitives.  Stock is
never read-then-written by callers: ``decrease_stock`` and
``increase_stock`` are single atomic statements.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Optional

from modules.core.repositories.interfaces import IRepository, Queryable

if TYPE_CHECKING:
    from modules.catalog.models import Category, Subcategory
    from modules.products.models import Product


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Product]:
        """Retrieve a product with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def list_available(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> Queryable[Product]:
        """Active, non-deleted products whose subcategory and category are active."""

    @abstractmethod
    def decrease_stock(self, id: int, quantity: int) -> bool:
        """Atomically take ``quantity`` units if at least that many are in stock.

        Returns ``False`` (and changes nothing) when the product is missing
        or stock is insufficient.
        """

    @abstractmethod
    def increase_stock(self, id: int, quantity: int) -> bool:
        """Atomically add ``quantity`` units.

        Returns ``False`` when the product is missing or the new stock
        would not fit the column.
        """

    # Parent look-ups used by creation / reactivation gating.

    @abstractmethod
    def get_subcategory(self, id: int) -> Optional[Subcategory]:
        """Subcategory (with its category) by primary key, or ``None``."""

    @abstractmethod
    def get_category(self, id: int) -> Optional[Category]:
        """Category by primary key, or ``None``."""
