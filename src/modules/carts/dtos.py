"""Cart DTOs for the Service Layer.

- ``AddCartLineDTO``: put a product in the cart.
- ``UpdateCartLineDTO``: change the quantity of an existing line.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


def _positive(value: int) -> int:
    if value < 1:
        raise ValueError("Quantity must be at least 1.")
    return value


class AddCartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: int
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        return _positive(v)


class UpdateCartLineDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        return _positive(v)
