"""Catalog DTOs for the Service Layer.

Immutable Pydantic v2 models passed from the API layer to
``CatalogService``.

- ``CreateCategoryDTO`` / ``UpdateCategoryDTO``
- ``CreateSubcategoryDTO`` / ``UpdateSubcategoryDTO``
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

NAME_MIN_LENGTH = 3
NAME_MAX_LENGTH = 100


def _clean_name(value: str) -> str:
    value = (value or "").strip()
    if not NAME_MIN_LENGTH <= len(value) <= NAME_MAX_LENGTH:
        raise ValueError(
            f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters."
        )
    return value


class CreateCategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        return _clean_name(v)


class UpdateCategoryDTO(BaseModel):
    """Partial update: only supplied (non-``None``) fields are applied."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_length(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)


class CreateSubcategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    category_id: int
    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def name_length(cls, v: str) -> str:
        return _clean_name(v)


class UpdateSubcategoryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_length(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)
