"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.
Error handling follows the Null Object pattern: methods return ``None``
or ``False`` instead of raising, the Service Layer decides which domain
error a missing entity becomes.

Stock mutations are single conditional ``UPDATE`` statements
(``stock = stock - q WHERE id = ? AND stock >= q``) checked by affected
row count, so concurrent checkouts can never drive stock below zero.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from modules.catalog.models import Category, Subcategory
from modules.products.constants import STOCK_MAX
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Product]:
        """Retrieve a product (soft-deleted included) by primary key.

        Returns ``None`` for non-existent or malformed IDs.
        """
        try:
            return (
                Product.objects.select_related("subcategory", "category")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Product]:
        try:
            return (
                Product.objects.select_for_update()
                .select_related("subcategory", "category")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        """List non-deleted products with optional Django ORM look-ups.

        Examples of valid filters::

            {"active": True}
            {"name__icontains": "widget"}
        """
        queryset = Product.objects.alive().select_related("subcategory", "category")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def list_available(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet[Product]:
        queryset = Product.objects.available().select_related(
            "subcategory", "category"
        )
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: Product) -> Product:
        """Persist (create or update) a product."""
        entity.save()
        logger.info("product.saved", product_id=entity.id, active=entity.active)
        return entity

    @transaction.atomic
    def delete(self, id: int) -> bool:
        """Soft-delete a product by ID.

        Returns ``True`` if the product was found and soft-deleted,
        ``False`` if no product exists with the given ID.
        """
        product = self.get_by_id(id)
        if not product:
            return False
        product.delete()
        logger.info("product.soft_deleted", product_id=id)
        return True

    # ------------------------------------------------------------------
    # Stock primitives
    # ------------------------------------------------------------------

    def decrease_stock(self, id: int, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, stock__gte=quantity).update(
            stock=F("stock") - quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    def increase_stock(self, id: int, quantity: int) -> bool:
        updated = Product.objects.filter(id=id, stock__lte=STOCK_MAX - quantity).update(
            stock=F("stock") + quantity,
            updated_at=timezone.now(),
        )
        return updated == 1

    # ------------------------------------------------------------------
    # Parent look-ups
    # ------------------------------------------------------------------

    def get_subcategory(self, id: int) -> Optional[Subcategory]:
        try:
            return Subcategory.objects.select_related("category").filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_category(self, id: int) -> Optional[Category]:
        try:
            return Category.objects.filter(id=id).first()
        except (TypeError, ValueError):
            return None
