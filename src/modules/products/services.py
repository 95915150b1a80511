"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- A product is created / reactivated only under an active subcategory
  and an active category, and its category must be the subcategory's.
- Stock never goes negative: decrements are conditional updates and a
  refused decrement leaves stock unchanged.
- ``has_stock`` is a pure predicate; stock changes only through
  ``decrease_stock`` / ``increase_stock``.
- Deletion is soft; the stored image is removed after commit, best-effort.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import structlog
from django.db import transaction
from django.db.models import QuerySet

from modules.core import storage
from modules.core.exceptions import (
    InactiveParentError,
    InsufficientStockError,
    MissingParentError,
    ValidationError,
)
from modules.products.exceptions import (
    CategoryMismatch,
    ProductNotFound,
    StockLimitExceeded,
)
from modules.products.constants import STOCK_MAX
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.catalog.models import Subcategory
    from modules.products.dtos import CreateProductDTO, UpdateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP), and
    the stored-file primitive used to clean up images of deleted products.
    """

    def __init__(
        self,
        repository: IProductRepository,
        delete_stored_file: Callable[[str], bool] = storage.delete_stored_file,
    ) -> None:
        self._repo = repository
        self._delete_stored_file = delete_stored_file

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a product under an active subcategory / category pair.

        Raises:
            MissingParentError: the subcategory or category does not exist.
            InactiveParentError: the subcategory or category is inactive.
            CategoryMismatch: the subcategory belongs to another category.
        """
        log = logger.bind(
            subcategory_id=dto.subcategory_id, category_id=dto.category_id
        )

        subcategory = self._repo.get_subcategory(dto.subcategory_id)
        if not subcategory:
            raise MissingParentError(
                f"Subcategory {dto.subcategory_id} does not exist."
            )
        category = self._repo.get_category(dto.category_id)
        if not category:
            raise MissingParentError(f"Category {dto.category_id} does not exist.")
        if subcategory.category_id != category.id:
            log.warning("product.category_mismatch")
            raise CategoryMismatch(
                f"Subcategory {subcategory.id} does not belong to category "
                f"{category.id}."
            )
        self._ensure_parents_active(subcategory)

        product = self._repo.save(
            Product(
                name=dto.name,
                description=dto.description,
                price=dto.price,
                stock=dto.stock,
                image=dto.image,
                subcategory=subcategory,
                category=category,
            )
        )
        log.info("product.created", product_id=product.id, stock=product.stock)
        return product

    @transaction.atomic
    def update_product(self, id: int, dto: UpdateProductDTO) -> Product:
        """Update name, description, price or image.

        Price changes never reach cart lines or orders, which hold their
        own frozen prices.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self.get_product(id)

        for field in ("name", "price", "description", "image"):
            value = getattr(dto, field)
            if value is not None:
                setattr(product, field, value)

        product = self._repo.save(product)
        logger.info("product.updated", product_id=product.id)
        return product

    @transaction.atomic
    def activate_product(self, id: int) -> Product:
        """Reactivate a product; both of its parents must be active.

        Raises:
            ProductNotFound: if the product does not exist.
            InactiveParentError: the subcategory or category is inactive.
        """
        product = self._get_locked(id)
        if not product.active:
            self._ensure_parents_active(product.subcategory)
            product.active = True
            product = self._repo.save(product)
            logger.info("product.activated", product_id=product.id)
        return product

    @transaction.atomic
    def deactivate_product(self, id: int) -> Product:
        product = self._get_locked(id)
        if product.active:
            product.active = False
            product = self._repo.save(product)
            logger.info("product.deactivated", product_id=product.id)
        return product

    @transaction.atomic
    def delete_product(self, id: int) -> None:
        """Soft-delete a product, then remove its image once committed.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        product = self.get_product(id)
        image = product.image
        self._repo.delete(product.id)

        if image:
            transaction.on_commit(lambda: self._remove_image(product.id, image))

    # ------------------------------------------------------------------
    # Stock
    # ------------------------------------------------------------------

    def has_stock(self, product_id: int, quantity: int) -> bool:
        """Pure predicate: ``quantity <= stock``.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        return self.get_product(product_id).has_stock(quantity)

    @transaction.atomic
    def decrease_stock(self, product_id: int, quantity: int) -> Product:
        """Take ``quantity`` units in one conditional update.

        Raises:
            ValidationError: ``quantity`` is below 1.
            ProductNotFound: if the product does not exist.
            InsufficientStockError: fewer than ``quantity`` units in stock.
        """
        self._ensure_positive(quantity)
        log = logger.bind(product_id=product_id, quantity=quantity)

        if not self._repo.decrease_stock(product_id, quantity):
            product = self.get_product(product_id)
            log.warning("product.insufficient_stock", stock=product.stock)
            raise InsufficientStockError(
                f"Insufficient stock for product {product_id}: "
                f"requested {quantity}, available {product.stock}."
            )

        log.info("product.stock_decreased")
        return self.get_product(product_id)

    @transaction.atomic
    def increase_stock(self, product_id: int, quantity: int) -> Product:
        """Return ``quantity`` units to stock.

        Raises:
            ValidationError: ``quantity`` is below 1.
            ProductNotFound: if the product does not exist.
            StockLimitExceeded: the new stock would overflow the column.
        """
        self._ensure_positive(quantity)
        if not self._repo.increase_stock(product_id, quantity):
            product = self._repo.get_by_id(product_id)
            if product is None:
                raise ProductNotFound(f"Product {product_id} not found.")
            logger.warning(
                "product.stock_limit_exceeded",
                product_id=product_id,
                quantity=quantity,
                stock=product.stock,
            )
            raise StockLimitExceeded(
                f"Cannot add {quantity} units to product {product_id}: "
                f"stock is capped at {STOCK_MAX}."
            )
        logger.info(
            "product.stock_increased", product_id=product_id, quantity=quantity
        )
        return self._repo.get_by_id(product_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_product(self, id: int) -> Product:
        """Retrieve a single non-deleted product by ID.

        Raises:
            ProductNotFound: if the product does not exist or was deleted.
        """
        product = self._repo.get_by_id(id)
        if not product or product.is_deleted:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    def list_products(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Product]:
        return self._repo.list(filters)

    def list_available_products(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> QuerySet[Product]:
        """Products a shopper may see: active with active parents."""
        return self._repo.list_available(filters)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_locked(self, id: int) -> Product:
        product = self._repo.get_for_update(id)
        if not product or product.is_deleted:
            raise ProductNotFound(f"Product {id} not found.")
        return product

    @staticmethod
    def _ensure_positive(quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1.")

    @staticmethod
    def _ensure_parents_active(subcategory: Subcategory) -> None:
        if not subcategory.active:
            raise InactiveParentError(f"Subcategory {subcategory.id} is inactive.")
        if not subcategory.category.active:
            raise InactiveParentError(
                f"Category {subcategory.category_id} is inactive."
            )

    def _remove_image(self, product_id: int, ref: str) -> None:
        log = logger.bind(product_id=product_id, image=ref)
        try:
            removed = self._delete_stored_file(ref)
        except Exception as exc:  # noqa: BLE001 - removal is best-effort
            log.warning("product.image_removal_failed", error=str(exc))
            return
        if not removed:
            log.warning("product.image_removal_failed", error="file not found")
            return
        log.info("product.image_removed")
