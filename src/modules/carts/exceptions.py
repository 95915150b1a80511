"""Cart domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFoundError, ValidationError


class CartLineAlreadyExists(ValidationError):
    """The product is already in the cart; update its quantity instead."""


class CartLineNotFound(NotFoundError):
    pass
