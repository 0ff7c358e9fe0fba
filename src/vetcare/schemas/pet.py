"""
Pet Pydantic schemas for validation and serialization.

This module contains the create and update payloads for pets and the
PetDTO returned to clients (with the derived age and owner name).
"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from ..utils.datetime_utils import parse_datetime
from ..utils.validation import require_text, validate_birth_date, validate_record_id
from .base import InputSchema, ResponseSchema


class PetBase(InputSchema):
    """Pet fields shared by create and update payloads."""

    owner_id: Optional[int] = Field(None, description="Owner of the pet")
    name: Optional[str] = Field(None, description="Pet's name", max_length=100)
    species: Optional[str] = Field(None, description="Species, e.g. Šuo", max_length=100)
    breed: Optional[str] = Field(None, description="Breed", max_length=100)
    birth_date: Optional[date] = Field(None, description="Date of birth")
    gender: Optional[str] = Field(None, description="Gender", max_length=20)

    @field_validator("owner_id", mode="before")
    @classmethod
    def validate_owner_id(cls, v: Any) -> int:
        return validate_record_id(v, "ownerId")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        return require_text(v, "Pet name")

    @field_validator("species")
    @classmethod
    def validate_species(cls, v: Optional[str]) -> str:
        return require_text(v, "Species")

    @field_validator("breed")
    @classmethod
    def validate_breed(cls, v: Optional[str]) -> str:
        return v or ""

    @field_validator("gender")
    @classmethod
    def validate_gender(cls, v: Optional[str]) -> str:
        return v or "unknown"

    @field_validator("birth_date", mode="before")
    @classmethod
    def parse_birth_date(cls, v: Any) -> Any:
        """Accept plain dates as well as full ISO timestamps."""
        if v is None or v == "":
            return None
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, date):
            return v
        try:
            return parse_datetime(v).date()
        except ValueError:
            raise ValueError("A valid birth date is required")

    @field_validator("birth_date")
    @classmethod
    def validate_birth_date_not_future(cls, v: Optional[date]) -> Optional[date]:
        if v is None:
            return v
        result = validate_birth_date(v)
        if not result.is_valid:
            raise ValueError(result.first_message)
        return v


class PetCreate(PetBase):
    """Schema for registering a new pet."""

    owner_id: int = Field(..., description="Owner of the pet")
    name: str = Field(..., description="Pet's name", max_length=100)
    species: str = Field(..., description="Species, e.g. Šuo", max_length=100)
    breed: str = Field("", description="Breed", max_length=100)
    gender: str = Field("unknown", description="Gender", max_length=20)


class PetUpdate(PetBase):
    """Schema for partial pet updates."""


class PetDTO(ResponseSchema):
    """Client-facing pet representation."""

    id: int
    name: str
    species: str
    breed: str
    birth_date: Optional[str] = None
    age: Optional[int] = None
    gender: str
    owner_id: int
    owner_full_name: Optional[str] = None
    created_at: Optional[str] = None
