"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  The
generic ones (stock, transitions, empty cart, immutability) live in
``modules.core.exceptions``; only order-specific subclasses are here.
"""

from __future__ import annotations

from modules.core.exceptions import NotFoundError


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""
