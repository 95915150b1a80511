"""Catalog domain exceptions.

Raised by the Service Layer when catalog hierarchy rules are violated.
The DRF exception handler in ``modules.core.exceptions`` renders them.
"""

from __future__ import annotations

from modules.core.exceptions import NotFoundError, ValidationError


class CategoryNotFound(NotFoundError):
    """The requested category does not exist."""


class SubcategoryNotFound(NotFoundError):
    """The requested subcategory does not exist."""


class CategoryAlreadyExists(ValidationError):
    """Another category already uses this name."""


class SubcategoryAlreadyExists(ValidationError):
    """The parent category already has a subcategory with this name."""


class CatalogInUse(ValidationError):
    """Products under this catalog node are referenced by orders."""
