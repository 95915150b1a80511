"""Django ORM implementation of the cart repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.db.models import QuerySet

from modules.carts.models import CartLine
from modules.carts.repositories.interfaces import ICartRepository

logger = structlog.get_logger(__name__)


class CartDjangoRepository(ICartRepository):
    """Concrete cart repository backed by Django ORM."""

    def _base(self) -> QuerySet[CartLine]:
        return CartLine.objects.select_related(
            "product", "product__subcategory", "product__category"
        )

    def get_by_id(self, id: int) -> Optional[CartLine]:
        try:
            return self._base().filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[CartLine]:
        queryset = self._base()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: CartLine) -> CartLine:
        entity.save()
        return entity

    def delete(self, id: int) -> bool:
        deleted, _ = CartLine.objects.filter(id=id).delete()
        return deleted > 0

    def get_line(self, user_id: int, product_id: int) -> Optional[CartLine]:
        return self._base().filter(user_id=user_id, product_id=product_id).first()

    def list_for_user(self, user_id: int) -> QuerySet[CartLine]:
        return self._base().filter(user_id=user_id).order_by("-created_at", "-id")

    def list_for_update(self, user_id: int) -> List[CartLine]:
        # Locking in product order keeps concurrent checkouts from deadlocking.
        return list(
            CartLine.objects.select_for_update()
            .filter(user_id=user_id)
            .order_by("product_id")
        )

    def delete_line(self, user_id: int, product_id: int) -> bool:
        deleted, _ = CartLine.objects.filter(
            user_id=user_id, product_id=product_id
        ).delete()
        return deleted > 0

    def clear(self, user_id: int) -> int:
        deleted, _ = CartLine.objects.filter(user_id=user_id).delete()
        if deleted:
            logger.info("cart.cleared", user_id=user_id, lines=deleted)
        return deleted
