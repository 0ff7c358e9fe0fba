"""
Owner Pydantic schemas for validation and serialization.
"""

from typing import Optional

from pydantic import Field, field_validator

from ..utils.validation import require_text, validate_email
from .base import InputSchema, ResponseSchema


class OwnerBase(InputSchema):
    """Owner fields shared by create and update payloads."""

    first_name: Optional[str] = Field(None, description="Owner's first name", max_length=100)
    last_name: Optional[str] = Field(None, description="Owner's last name", max_length=100)
    phone: Optional[str] = Field(None, description="Primary phone number", max_length=50)
    email: Optional[str] = Field(None, description="Unique contact email")
    address: Optional[str] = Field(None, description="Postal address")

    @field_validator("first_name")
    @classmethod
    def validate_first_name(cls, v: Optional[str]) -> str:
        return require_text(v, "First name")

    @field_validator("last_name")
    @classmethod
    def validate_last_name(cls, v: Optional[str]) -> str:
        return require_text(v, "Last name")

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, v: Optional[str]) -> str:
        result = validate_email(v)
        if not result.is_valid:
            raise ValueError("A valid email is required")
        return result.value

    @field_validator("phone", "address")
    @classmethod
    def validate_contact_text(cls, v: Optional[str]) -> str:
        return v or ""


class OwnerCreate(OwnerBase):
    """Schema for registering a new owner."""

    first_name: str = Field(..., description="Owner's first name", max_length=100)
    last_name: str = Field(..., description="Owner's last name", max_length=100)
    email: str = Field(..., description="Unique contact email")
    phone: str = Field("", description="Primary phone number", max_length=50)
    address: str = Field("", description="Postal address")


class OwnerUpdate(OwnerBase):
    """Schema for partial owner updates; only supplied fields are validated."""


class OwnerDTO(ResponseSchema):
    """Client-facing owner representation."""

    id: int
    full_name: str
    first_name: str
    last_name: str
    phone: str
    email: str
    address: str
    pet_count: int = 0
    created_at: Optional[str] = None
