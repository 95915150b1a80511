"""Cart repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, List, Optional

from modules.core.repositories.interfaces import IRepository, Queryable

if TYPE_CHECKING:
    from modules.carts.models import CartLine


class ICartRepository(IRepository["CartLine"]):
    """Repository contract for cart lines, keyed by ``(user, product)``."""

    @abstractmethod
    def get_line(self, user_id: int, product_id: int) -> Optional[CartLine]:
        """The user's line for ``product_id``, or ``None``."""

    @abstractmethod
    def list_for_user(self, user_id: int) -> Queryable[CartLine]:
        """The user's lines with their products, newest first."""

    @abstractmethod
    def list_for_update(self, user_id: int) -> List[CartLine]:
        """Lock the user's lines, ordered by product id."""

    @abstractmethod
    def delete_line(self, user_id: int, product_id: int) -> bool:
        """Delete one line.  ``False`` when there was nothing to delete."""

    @abstractmethod
    def clear(self, user_id: int) -> int:
        """Delete every line of the user; returns the number removed."""
