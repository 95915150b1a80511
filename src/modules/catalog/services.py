"""Catalog service layer (Use Cases).

Owns the cascading-activation rules of the three-level catalog
hierarchy.  Every cascading write is a single ``transaction.atomic``
unit: the parent row is locked first, then each level runs its own
deactivation step.  A failure at any level rolls back the whole
cascade.

Business rules enforced:
- Category names are unique; subcategory names are unique per category.
  Both comparisons ignore case.
- A subcategory is created / reactivated only under an active category.
- Deactivating a category deactivates its subcategories, and through
  them every product beneath.
- Deactivating a subcategory deactivates its products.
- Reactivation never cascades: each level is switched back on by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import structlog
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError, QuerySet

from modules.catalog.exceptions import (
    CatalogInUse,
    CategoryAlreadyExists,
    CategoryNotFound,
    SubcategoryAlreadyExists,
    SubcategoryNotFound,
)
from modules.catalog.models import Category, Subcategory
from modules.core.exceptions import InactiveParentError, MissingParentError

if TYPE_CHECKING:
    from modules.catalog.dtos import (
        CreateCategoryDTO,
        CreateSubcategoryDTO,
        UpdateCategoryDTO,
        UpdateSubcategoryDTO,
    )
    from modules.catalog.repositories.interfaces import (
        ICategoryRepository,
        ISubcategoryRepository,
    )

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DeactivationSummary:
    """Rows switched off by one cascading deactivation."""

    subcategories: int = 0
    products: int = 0

    def __add__(self, other: DeactivationSummary) -> DeactivationSummary:
        return DeactivationSummary(
            subcategories=self.subcategories + other.subcategories,
            products=self.products + other.products,
        )


class CatalogService:
    """Application service for Category / Subcategory use-cases.

    Receives both repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        category_repository: ICategoryRepository,
        subcategory_repository: ISubcategoryRepository,
    ) -> None:
        self._category_repo = category_repository
        self._subcategory_repo = subcategory_repository

    # ------------------------------------------------------------------
    # Category commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_category(self, dto: CreateCategoryDTO) -> Category:
        """Create a category.

        Raises:
            CategoryAlreadyExists: the name is already used.
        """
        if self._category_repo.get_by_name(dto.name):
            logger.warning("catalog.duplicate_category", name=dto.name)
            raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")

        category = self._save_category(
            Category(name=dto.name, description=dto.description)
        )
        logger.info("catalog.category_created", category_id=category.id)
        return category

    @transaction.atomic
    def update_category(self, id: int, dto: UpdateCategoryDTO) -> Category:
        category = self.get_category(id)

        if dto.name is not None:
            existing = self._category_repo.get_by_name(dto.name)
            if existing and existing.id != category.id:
                raise CategoryAlreadyExists(f"Category '{dto.name}' already exists.")
            category.name = dto.name
        if dto.description is not None:
            category.description = dto.description

        category = self._save_category(category)
        logger.info("catalog.category_updated", category_id=category.id)
        return category

    @transaction.atomic
    def deactivate_category(self, id: int) -> DeactivationSummary:
        """Deactivate a category and everything beneath it.

        Steps:
        1. Lock the category row and switch it off.
        2. Deactivate each subcategory (which deactivates its products).
        3. Sweep any product still pointing at the category directly.

        Raises:
            CategoryNotFound: the category does not exist.
        """
        category = self._category_repo.get_for_update(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")

        log = logger.bind(category_id=category.id)

        if category.active:
            category.active = False
            self._category_repo.save(category)

        summary = DeactivationSummary()
        for subcategory in self._subcategory_repo.list_for_category(
            category.id, for_update=True
        ):
            summary += self._deactivate_subcategory(subcategory)

        summary += DeactivationSummary(
            products=self._category_repo.deactivate_products(category.id)
        )

        log.info(
            "catalog.category_deactivated",
            subcategories=summary.subcategories,
            products=summary.products,
        )
        return summary

    @transaction.atomic
    def activate_category(self, id: int) -> Category:
        """Reactivate a category.  Descendants stay as they are."""
        category = self._category_repo.get_for_update(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        if not category.active:
            category.active = True
            category = self._category_repo.save(category)
            logger.info("catalog.category_activated", category_id=category.id)
        return category

    @transaction.atomic
    def delete_category(self, id: int) -> None:
        """Hard-delete a category with its subcategories and products.

        Raises:
            CategoryNotFound: the category does not exist.
            CatalogInUse: a product beneath it is referenced by an order.
        """
        self.get_category(id)
        try:
            self._category_repo.delete(id)
        except ProtectedError as exc:
            logger.warning("catalog.category_delete_blocked", category_id=id)
            raise CatalogInUse(
                f"Category {id} has products referenced by orders; "
                "deactivate it instead."
            ) from exc

    # ------------------------------------------------------------------
    # Subcategory commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_subcategory(self, dto: CreateSubcategoryDTO) -> Subcategory:
        """Create a subcategory under an active category.

        Raises:
            MissingParentError: the category does not exist.
            InactiveParentError: the category is inactive.
            SubcategoryAlreadyExists: the name is used within the category.
        """
        log = logger.bind(category_id=dto.category_id, name=dto.name)

        category = self._category_repo.get_for_update(dto.category_id)
        if not category:
            raise MissingParentError(f"Category {dto.category_id} does not exist.")
        if not category.active:
            log.warning("catalog.subcategory_parent_inactive")
            raise InactiveParentError(
                f"Cannot create a subcategory under inactive category {category.id}."
            )
        if self._subcategory_repo.get_by_name(category.id, dto.name):
            raise SubcategoryAlreadyExists(
                f"Subcategory '{dto.name}' already exists in category {category.id}."
            )

        subcategory = self._save_subcategory(
            Subcategory(category=category, name=dto.name, description=dto.description)
        )
        log.info("catalog.subcategory_created", subcategory_id=subcategory.id)
        return subcategory

    @transaction.atomic
    def update_subcategory(self, id: int, dto: UpdateSubcategoryDTO) -> Subcategory:
        subcategory = self.get_subcategory(id)

        if dto.name is not None:
            existing = self._subcategory_repo.get_by_name(
                subcategory.category_id, dto.name
            )
            if existing and existing.id != subcategory.id:
                raise SubcategoryAlreadyExists(
                    f"Subcategory '{dto.name}' already exists in category "
                    f"{subcategory.category_id}."
                )
            subcategory.name = dto.name
        if dto.description is not None:
            subcategory.description = dto.description

        subcategory = self._save_subcategory(subcategory)
        logger.info("catalog.subcategory_updated", subcategory_id=subcategory.id)
        return subcategory

    @transaction.atomic
    def deactivate_subcategory(self, id: int) -> DeactivationSummary:
        """Deactivate a subcategory and all of its products.

        Raises:
            SubcategoryNotFound: the subcategory does not exist.
        """
        subcategory = self._subcategory_repo.get_for_update(id)
        if not subcategory:
            raise SubcategoryNotFound(f"Subcategory {id} not found.")

        summary = self._deactivate_subcategory(subcategory)
        logger.info(
            "catalog.subcategory_deactivated",
            subcategory_id=subcategory.id,
            products=summary.products,
        )
        return summary

    @transaction.atomic
    def activate_subcategory(self, id: int) -> Subcategory:
        """Reactivate a subcategory; its category must be active.

        Raises:
            SubcategoryNotFound: the subcategory does not exist.
            InactiveParentError: the parent category is inactive.
        """
        subcategory = self._subcategory_repo.get_for_update(id)
        if not subcategory:
            raise SubcategoryNotFound(f"Subcategory {id} not found.")
        if not subcategory.category.active:
            raise InactiveParentError(
                f"Cannot activate subcategory {id}: category "
                f"{subcategory.category_id} is inactive."
            )
        if not subcategory.active:
            subcategory.active = True
            subcategory = self._subcategory_repo.save(subcategory)
            logger.info("catalog.subcategory_activated", subcategory_id=id)
        return subcategory

    @transaction.atomic
    def delete_subcategory(self, id: int) -> None:
        self.get_subcategory(id)
        try:
            self._subcategory_repo.delete(id)
        except ProtectedError as exc:
            logger.warning("catalog.subcategory_delete_blocked", subcategory_id=id)
            raise CatalogInUse(
                f"Subcategory {id} has products referenced by orders; "
                "deactivate it instead."
            ) from exc

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_category(self, id: int) -> Category:
        category = self._category_repo.get_by_id(id)
        if not category:
            raise CategoryNotFound(f"Category {id} not found.")
        return category

    def list_categories(self, active_only: bool = False) -> QuerySet[Category]:
        return self._category_repo.list({"active": True} if active_only else None)

    def get_subcategory(self, id: int) -> Subcategory:
        subcategory = self._subcategory_repo.get_by_id(id)
        if not subcategory:
            raise SubcategoryNotFound(f"Subcategory {id} not found.")
        return subcategory

    def list_subcategories(
        self, category_id: Optional[int] = None, active_only: bool = False
    ) -> QuerySet[Subcategory]:
        filters = {}
        if category_id is not None:
            filters["category_id"] = category_id
        if active_only:
            filters["active"] = True
            filters["category__active"] = True
        return self._subcategory_repo.list(filters)

    def count_subcategories(self, category_id: int) -> int:
        self.get_category(category_id)
        return self._category_repo.count_subcategories(category_id)

    def count_products(self, category_id: int) -> int:
        self.get_category(category_id)
        return self._category_repo.count_products(category_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deactivate_subcategory(self, subcategory: Subcategory) -> DeactivationSummary:
        switched = 0
        if subcategory.active:
            subcategory.active = False
            self._subcategory_repo.save(subcategory)
            switched = 1
        products = self._subcategory_repo.deactivate_products(subcategory.id)
        return DeactivationSummary(subcategories=switched, products=products)

    def _save_category(self, category: Category) -> Category:
        # The pre-check can race a concurrent create; the unique index decides.
        try:
            with transaction.atomic():
                return self._category_repo.save(category)
        except IntegrityError as exc:
            logger.warning("catalog.duplicate_category", name=category.name)
            raise CategoryAlreadyExists(
                f"Category '{category.name}' already exists."
            ) from exc

    def _save_subcategory(self, subcategory: Subcategory) -> Subcategory:
        try:
            with transaction.atomic():
                return self._subcategory_repo.save(subcategory)
        except IntegrityError as exc:
            raise SubcategoryAlreadyExists(
                f"Subcategory '{subcategory.name}' already exists in category "
                f"{subcategory.category_id}."
            ) from exc
