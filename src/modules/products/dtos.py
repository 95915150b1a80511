"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``UpdateProductDTO``: input for partial product updates.
- ``StockChangeDTO``: input for the stock mutators.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.constants import STOCK_MAX

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 200


def _clean_name(value: str) -> str:
    value = (value or "").strip()
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
        )
    return value


# Matches Product.price: DecimalField(max_digits=10, decimal_places=2).
Price = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` is 3-200 characters after stripping.
    - ``price`` is non-negative and fits the column (10 digits, 2 places).
    - ``stock`` is non-negative.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    price: Price
    subcategory_id: int
    category_id: int
    description: str = ""
    stock: int = Field(default=0, le=STOCK_MAX)
    image: str = ""

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("stock")
    @classmethod
    def stock_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Stock cannot be negative.")
        return v


class UpdateProductDTO(BaseModel):
    """Immutable DTO for product update requests.

    All fields are optional, only supplied fields will be updated.
    Stock and activation have dedicated operations and are not here.
    """

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    price: Price | None = None
    description: str | None = None
    image: str | None = None

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str | None) -> str | None:
        return None if v is None else _clean_name(v)


class StockChangeDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    operation: Literal["increase", "decrease"]
    quantity: int = Field(le=STOCK_MAX)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v
