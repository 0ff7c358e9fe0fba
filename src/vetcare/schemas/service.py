"""
Service catalogue Pydantic schemas for validation and serialization.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import Field, field_validator

from ..utils.validation import require_text
from .base import InputSchema, ResponseSchema

DEFAULT_SERVICE_CATEGORY = "general"
MAX_SERVICE_PRICE = Decimal("99999999.99")


class ServiceBase(InputSchema):
    """Service fields shared by create and update payloads."""

    name: Optional[str] = Field(None, description="Service name", max_length=150)
    description: Optional[str] = Field(None, description="Service description")
    price: Optional[Decimal] = Field(None, description="Flat price")
    category: Optional[str] = Field(None, description="Category", max_length=100)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return require_text(v, "Service name")

    @field_validator("price", mode="before")
    @classmethod
    def validate_price(cls, v: Any) -> Decimal:
        """Accept numbers and numeric strings; reject negatives."""
        if v is None or isinstance(v, bool):
            raise ValueError("Price must be a non-negative number")
        try:
            price = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            raise ValueError("Price must be a non-negative number")
        if not price.is_finite() or price < 0:
            raise ValueError("Price must be a non-negative number")
        if price > MAX_SERVICE_PRICE:
            raise ValueError("Price is too large")
        return price.quantize(Decimal("0.01"))

    @field_validator("description")
    @classmethod
    def default_description(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("category")
    @classmethod
    def default_category(cls, v: Optional[str]) -> str:
        return v or DEFAULT_SERVICE_CATEGORY


class ServiceCreate(ServiceBase):
    """Schema for adding a service to the catalogue."""

    name: str = Field(..., description="Service name", max_length=150)
    price: Decimal = Field(..., description="Flat price")
    description: str = Field("", description="Service description")
    category: str = Field(
        DEFAULT_SERVICE_CATEGORY, description="Category", max_length=100
    )


class ServiceUpdate(ServiceBase):
    """Schema for partial service updates."""


class ServiceDTO(ResponseSchema):
    """Client-facing service representation."""

    id: int
    name: str
    description: str
    price: float
    category: str
    created_at: Optional[str] = None
