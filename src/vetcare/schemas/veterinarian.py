"""
Veterinarian Pydantic schemas for validation and serialization.
"""

from typing import Optional

from pydantic import Field, field_validator

from ..utils.validation import require_text, validate_email
from .base import InputSchema, ResponseSchema


class VeterinarianBase(InputSchema):
    """Vet fields shared by create and update payloads."""

    first_name: Optional[str] = Field(None, description="First name", max_length=100)
    last_name: Optional[str] = Field(None, description="Last name", max_length=100)
    specialty: Optional[str] = Field(None, description="Specialization", max_length=150)
    phone: Optional[str] = Field(None, description="Contact phone", max_length=50)
    email: Optional[str] = Field(None, description="Unique contact email")

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

    @field_validator("specialty", "phone")
    @classmethod
    def default_blank(cls, v: Optional[str]) -> str:
        return v or ""


class VeterinarianCreate(VeterinarianBase):
    """Schema for adding a veterinarian."""

    first_name: str = Field(..., description="First name", max_length=100)
    last_name: str = Field(..., description="Last name", max_length=100)
    email: str = Field(..., description="Unique contact email")
    specialty: str = Field("", description="Specialization", max_length=150)
    phone: str = Field("", description="Contact phone", max_length=50)


class VeterinarianUpdate(VeterinarianBase):
    """Schema for partial vet updates."""


class VeterinarianDTO(ResponseSchema):
    """
    Client-facing vet representation.

    ``name`` carries the full name so name sorting treats vets like the
    other entities.
    """

    id: int
    name: str
    full_name: str
    first_name: str
    last_name: str
    specialty: str
    phone: str
    email: str
    created_at: Optional[str] = None
