"""Category and Subcategory models.

Business rules implemented:
- Category name is unique system-wide, ignoring case (3-100 chars).
- Subcategory name is unique within its category, ignoring case (3-100 chars).
- A subcategory is created / reactivated only under an active category
  (enforced at service layer).
- Deactivation cascades Category -> Subcategory -> Product
  (enforced at service layer, inside one transaction).
- Category owns its subcategories; deleting a category deletes them.
"""

from __future__ import annotations

from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models.functions import Lower

from modules.core.models import BaseModel


class Category(BaseModel):
    """Top level of the catalog hierarchy."""

    name = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    description = models.TextField(blank=True, default="")
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_categories"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["active"], name="categories_active_idx"),
        ]
        constraints = [
            models.UniqueConstraint(Lower("name"), name="category_name_ci_unique"),
        ]

    def __str__(self) -> str:
        return self.name


class Subcategory(BaseModel):
    """Second level of the catalog hierarchy, owned by a ``Category``."""

    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.CASCADE,
        related_name="subcategories",
    )
    name = models.CharField(max_length=100, validators=[MinLengthValidator(3)])
    description = models.TextField(blank=True, default="")
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "catalog_subcategories"
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                "category",
                Lower("name"),
                name="subcategory_name_per_category_ci_unique",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.category} / {self.name}"
