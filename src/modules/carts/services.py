"""Cart service layer (Use Cases).

Business rules enforced here:
- Only available products (active, not deleted, active parents) can be
  put in a cart.
- ``quantity <= product.stock`` is checked at every write; stock is not
  reserved, checkout performs the authoritative check.
- A line freezes the product's price when it is created; quantity
  updates never re-price it.
- One line per ``(user, product)``: adding an existing product fails and
  the caller must update the quantity instead.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import structlog
from django.db import IntegrityError, transaction
from django.db.models import QuerySet

from modules.carts.exceptions import CartLineAlreadyExists, CartLineNotFound
from modules.carts.models import CartLine
from modules.core.exceptions import InactiveProductError, InsufficientStockError
from modules.products.services import ProductService

if TYPE_CHECKING:
    from modules.carts.dtos import AddCartLineDTO, UpdateCartLineDTO
    from modules.carts.repositories.interfaces import ICartRepository
    from modules.products.models import Product
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)

ZERO = Decimal("0.00")


class CartService:
    """Application service for cart use-cases.

    Product look-ups and stock predicates go through ``ProductService`` so
    the cart applies the same not-found and availability rules as the
    rest of the catalog.
    """

    def __init__(
        self,
        cart_repository: ICartRepository,
        product_repository: IProductRepository,
    ) -> None:
        self._repo = cart_repository
        self._inventory = ProductService(repository=product_repository)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def add_line(self, user_id: int, dto: AddCartLineDTO) -> CartLine:
        """Add a product to the user's cart at its current price.

        Raises:
            ProductNotFound: the product does not exist or was deleted.
            InactiveProductError: the product is not available.
            InsufficientStockError: ``dto.quantity`` exceeds the stock.
            CartLineAlreadyExists: the product is already in the cart.
        """
        log = logger.bind(user_id=user_id, product_id=dto.product_id)

        product = self._available_product(dto.product_id)
        self._ensure_stock(product, dto.quantity)

        if self._repo.get_line(user_id, product.id):
            raise CartLineAlreadyExists(
                f"Product {product.id} is already in the cart; "
                "update its quantity instead."
            )

        line = CartLine(
            user_id=user_id,
            product=product,
            quantity=dto.quantity,
            unit_price=product.price,
        )
        try:
            with transaction.atomic():
                line = self._repo.save(line)
        except IntegrityError as exc:
            raise CartLineAlreadyExists(
                f"Product {product.id} is already in the cart."
            ) from exc

        log.info("cart.line_added", quantity=line.quantity, unit_price=str(line.unit_price))
        return line

    @transaction.atomic
    def update_quantity(
        self, user_id: int, product_id: int, dto: UpdateCartLineDTO
    ) -> CartLine:
        """Set a new quantity on an existing line.  The frozen price stays.

        Raises:
            CartLineNotFound: the product is not in the cart.
            InsufficientStockError: the new quantity exceeds the stock.
        """
        line = self._repo.get_line(user_id, product_id)
        if not line:
            raise CartLineNotFound(f"Product {product_id} is not in the cart.")

        self._ensure_stock(line.product, dto.quantity)

        line.quantity = dto.quantity
        line = self._repo.save(line)
        logger.info(
            "cart.line_updated",
            user_id=user_id,
            product_id=product_id,
            quantity=line.quantity,
        )
        return line

    @transaction.atomic
    def remove_line(self, user_id: int, product_id: int) -> bool:
        removed = self._repo.delete_line(user_id, product_id)
        if removed:
            logger.info("cart.line_removed", user_id=user_id, product_id=product_id)
        return removed

    @transaction.atomic
    def clear(self, user_id: int) -> int:
        return self._repo.clear(user_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_cart(self, user_id: int) -> QuerySet[CartLine]:
        return self._repo.list_for_user(user_id)

    def total(self, user_id: int) -> Decimal:
        """Sum of ``unit_price * quantity`` over the cart; ``0.00`` when empty."""
        return sum(
            (line.subtotal for line in self._repo.list_for_user(user_id)), ZERO
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _available_product(self, product_id: int) -> Product:
        product = self._inventory.get_product(product_id)
        if not product.is_available:
            raise InactiveProductError(f"Product {product_id} is not available.")
        return product

    @staticmethod
    def _ensure_stock(product: Product, quantity: int) -> None:
        if not product.has_stock(quantity):
            logger.warning(
                "cart.insufficient_stock",
                product_id=product.id,
                requested=quantity,
                stock=product.stock,
            )
            raise InsufficientStockError(
                f"Insufficient stock for product {product.id}: "
                f"requested {quantity}, available {product.stock}."
            )
