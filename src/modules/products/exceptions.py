"""Product domain exceptions.

Raised by the Service Layer when product or stock rules are violated.
The DRF exception handler in ``modules.core.exceptions`` renders them.
"""

from __future__ import annotations

from modules.core.exceptions import NotFoundError, ValidationError


class ProductNotFound(NotFoundError):
    """The requested product does not exist or has been soft-deleted."""


class CategoryMismatch(ValidationError):
    """The product's category is not its subcategory's category."""


class StockLimitExceeded(ValidationError):
    """Adding the units would overflow the stock column."""

    code = "stock_limit"
