"""Product model with stock control and catalog placement.

Business rules implemented:
- Name between 3 and 200 characters.
- Price cannot be negative (CHECK constraint).
- Stock cannot be negative (CHECK constraint; mutated only through
  conditional updates in the repository).
- A product's category must be its subcategory's category (enforced at
  service layer on creation).
- Creation / reactivation require an active subcategory and category
  (enforced at service layer).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinLengthValidator, MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel, SoftDeleteQuerySet


class ProductQuerySet(SoftDeleteQuerySet):
    def available(self) -> ProductQuerySet:
        """Products a shopper may see and buy."""
        return self.alive().filter(
            active=True,
            subcategory__active=True,
            category__active=True,
        )


class Product(SoftDeleteModel):
    """Product aggregate root, placed under a subcategory and category."""

    name = models.CharField(max_length=200, validators=[MinLengthValidator(3)])
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )
    stock = models.PositiveIntegerField(default=0)
    image = models.CharField(max_length=255, blank=True, default="")
    subcategory = models.ForeignKey(
        "catalog.Subcategory",
        on_delete=models.CASCADE,
        related_name="products",
    )
    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.CASCADE,
        related_name="products",
    )
    active = models.BooleanField(default=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["active"], name="products_active_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gte=0),
                name="products_price_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Domain helpers
    # ------------------------------------------------------------------

    @property
    def is_available(self) -> bool:
        """Active, not deleted, and not hidden by an inactive ancestor."""
        return (
            self.active
            and not self.is_deleted
            and self.subcategory.active
            and self.category.active
        )

    def has_stock(self, quantity: int) -> bool:
        """Pure check: can ``quantity`` units be taken from current stock?"""
        return quantity <= self.stock

    def __str__(self) -> str:
        return self.name
