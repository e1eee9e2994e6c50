"""Pydantic schemas for product API payloads."""

from __future__ import annotations

from datetime import datetime
from datetime import timezone
from decimal import Decimal
from typing import Annotated

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import PlainSerializer
from pydantic import field_validator

PRICE_DECIMAL_PLACES = 2

# Matches the scale of the stored price column.
Price = Annotated[Decimal, Field(decimal_places=PRICE_DECIMAL_PLACES)]
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class ProductCreate(BaseModel):
    """Payload to create a product. Business rules are checked by the service."""

    name: str
    description: str | None = None
    price: Price
    category: str | None = None


class ProductUpdate(BaseModel):
    """Payload replacing every mutable field of an existing product."""

    id: int
    name: str
    description: str | None = None
    price: Price
    category: str | None = None


class Product(BaseModel):
    """Product response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    price: JsonDecimal
    category: str | None = None
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )

    @field_validator("created_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite drops the offset of stored timestamps; they are always written in UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class ProductListResponse(BaseModel):
    """List response envelope for products."""

    items: list[Product]
