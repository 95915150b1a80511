"""Django ORM implementations of the catalog repositories.

Descendant products are reached through the reverse foreign-key managers
(``category.products`` / ``subcategory.products``) so the catalog never
imports the products module.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from modules.catalog.models import Category, Subcategory
from modules.catalog.repositories.interfaces import (
    ICategoryRepository,
    ISubcategoryRepository,
)

logger = structlog.get_logger(__name__)


class CategoryDjangoRepository(ICategoryRepository):
    """Concrete Category repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Category]:
        try:
            return Category.objects.select_for_update().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_name(self, name: str) -> Optional[Category]:
        return Category.objects.filter(name__iexact=name.strip()).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Category]:
        queryset = Category.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Category) -> Category:
        entity.save()
        logger.info("category.saved", category_id=entity.id, active=entity.active)
        return entity

    @transaction.atomic
    def delete(self, id: int) -> bool:
        """Hard-delete a category; subcategories and products cascade."""
        category = self.get_by_id(id)
        if not category:
            return False
        category.delete()
        logger.info("category.deleted", category_id=id)
        return True

    def count_subcategories(self, id: int) -> int:
        return Subcategory.objects.filter(category_id=id).count()

    def count_products(self, id: int) -> int:
        category = self.get_by_id(id)
        if not category:
            return 0
        return category.products.filter(deleted_at__isnull=True).count()

    def deactivate_products(self, id: int) -> int:
        category = self.get_by_id(id)
        if not category:
            return 0
        return category.products.filter(active=True).update(
            active=False, updated_at=timezone.now()
        )


class SubcategoryDjangoRepository(ISubcategoryRepository):
    """Concrete Subcategory repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Subcategory]:
        try:
            return Subcategory.objects.select_related("category").filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Subcategory]:
        try:
            return (
                Subcategory.objects.select_for_update()
                .select_related("category")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def get_by_name(self, category_id: int, name: str) -> Optional[Subcategory]:
        return Subcategory.objects.filter(
            category_id=category_id, name__iexact=name.strip()
        ).first()

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Subcategory]:
        queryset = Subcategory.objects.select_related("category")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_for_category(
        self, category_id: int, for_update: bool = False
    ) -> List[Subcategory]:
        queryset = Subcategory.objects.filter(category_id=category_id).order_by("id")
        if for_update:
            queryset = queryset.select_for_update()
        return list(queryset)

    @transaction.atomic
    def save(self, entity: Subcategory) -> Subcategory:
        entity.save()
        logger.info(
            "subcategory.saved",
            subcategory_id=entity.id,
            category_id=entity.category_id,
            active=entity.active,
        )
        return entity

    @transaction.atomic
    def delete(self, id: int) -> bool:
        """Hard-delete a subcategory; its products cascade."""
        subcategory = self.get_by_id(id)
        if not subcategory:
            return False
        subcategory.delete()
        logger.info("subcategory.deleted", subcategory_id=id)
        return True

    def deactivate_products(self, id: int) -> int:
        subcategory = self.get_by_id(id)
        if not subcategory:
            return 0
        return subcategory.products.filter(active=True).update(
            active=False, updated_at=timezone.now()
        )
