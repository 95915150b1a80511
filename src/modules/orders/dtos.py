"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``CheckoutDTO``: delivery details for turning a cart into an order.
- ``ChangeStatusDTO``: staff request to move an order along.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator

from modules.orders.constants import CONTACT_PHONE_MAX_LENGTH


class CheckoutDTO(BaseModel):
    """Immutable DTO for checkout requests.

    Validates:
    - ``shipping_address`` is not blank.
    - ``contact_phone`` is not blank and at most 20 characters.
    """

    model_config = ConfigDict(frozen=True)

    shipping_address: str
    contact_phone: str
    notes: str = ""

    @field_validator("shipping_address")
    @classmethod
    def address_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Shipping address is required.")
        return v

    @field_validator("contact_phone")
    @classmethod
    def phone_must_fit(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Contact phone is required.")
        if len(v) > CONTACT_PHONE_MAX_LENGTH:
            raise ValueError(
                f"Contact phone must be at most {CONTACT_PHONE_MAX_LENGTH} characters."
            )
        return v


class ChangeStatusDTO(BaseModel):
    """The target status is checked against the state machine by the service."""

    model_config = ConfigDict(frozen=True)

    status: str
    notes: str = ""
