"""Catalog repository interfaces.

Extend ``IRepository`` with the look-ups needed by the hierarchy rules:
name uniqueness, row locks for cascading deactivation, and bulk
deactivation of descendant products through reverse relations.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.catalog.models import Category, Subcategory


class ICategoryRepository(IRepository["Category"]):
    """Repository contract for ``Category``."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Category]:
        """Retrieve a category with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive look-up by name."""

    @abstractmethod
    def count_subcategories(self, id: int) -> int:
        """Number of subcategories under the category."""

    @abstractmethod
    def count_products(self, id: int) -> int:
        """Number of (non-deleted) products whose category is ``id``."""

    @abstractmethod
    def deactivate_products(self, id: int) -> int:
        """Switch off every still-active product of the category.

        Returns the number of rows changed.
        """


class ISubcategoryRepository(IRepository["Subcategory"]):
    """Repository contract for ``Subcategory``."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Subcategory]:
        """Retrieve a subcategory with a row-level lock (SELECT FOR UPDATE)."""

    @abstractmethod
    def get_by_name(self, category_id: int, name: str) -> Optional[Subcategory]:
        """Case-insensitive look-up by name within a category."""

    @abstractmethod
    def list_for_category(
        self, category_id: int, for_update: bool = False
    ) -> List[Subcategory]:
        """All subcategories of a category, ordered by id."""

    @abstractmethod
    def deactivate_products(self, id: int) -> int:
        """Switch off every still-active product of the subcategory.

        Returns the number of rows changed.
        """
