"""
Visit Pydantic schemas for validation and serialization.

Visit dates arrive as ISO strings (``2025-03-10`` or
``2025-03-10T09:30:00Z``) and are normalized to aware UTC datetimes.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, field_validator

from ..utils.datetime_utils import parse_datetime
from ..utils.validation import require_text, validate_record_id
from .base import InputSchema, ResponseSchema


def coerce_utc_datetime(value: Any) -> datetime:
    """Shared ``before`` validator body for visit and appointment dates."""
    try:
        return parse_datetime(value)
    except ValueError:
        raise ValueError("A valid date is required")


class VisitBase(InputSchema):
    """Visit fields shared by create and update payloads."""

    pet_id: Optional[int] = Field(None, description="Examined pet")
    vet_id: Optional[int] = Field(None, description="Attending vet")
    date: Optional[datetime] = Field(None, description="When the visit happened")
    diagnosis: Optional[str] = Field(None, description="Diagnosis")
    notes: Optional[str] = Field(None, description="Free-form notes")

    @field_validator("pet_id", mode="before")
    @classmethod
    def validate_pet_id(cls, v: Any) -> int:
        return validate_record_id(v, "petId")

    @field_validator("vet_id", mode="before")
    @classmethod
    def validate_vet_id(cls, v: Any) -> int:
        return validate_record_id(v, "vetId")

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> datetime:
        return coerce_utc_datetime(v)

    @field_validator("diagnosis")
    @classmethod
    def validate_diagnosis(cls, v: Optional[str]) -> str:
        return require_text(v, "Diagnosis")

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class VisitCreate(VisitBase):
    """Schema for recording a visit."""

    pet_id: int = Field(..., description="Examined pet")
    vet_id: int = Field(..., description="Attending vet")
    date: datetime = Field(..., description="When the visit happened")
    diagnosis: str = Field(..., description="Diagnosis")


class VisitUpdate(VisitBase):
    """Schema for partial visit updates."""


class VisitServiceLink(InputSchema):
    """A service to attach to a new visit, with optional per-link notes."""

    service_id: int = Field(..., description="Service performed")
    notes: Optional[str] = Field(None, description="Notes for this service")

    @field_validator("service_id", mode="before")
    @classmethod
    def validate_service_id(cls, v: Any) -> int:
        return validate_record_id(v, "serviceId")

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class VisitServiceDTO(ResponseSchema):
    """A service performed during a visit."""

    id: int
    service_id: int
    name: Optional[str] = None
    price: float = 0.0
    notes: Optional[str] = None


class VisitDTO(ResponseSchema):
    """Client-facing visit representation with the derived total cost."""

    id: int
    date: Optional[str] = None
    diagnosis: str
    notes: Optional[str] = None
    pet_id: int
    pet_name: Optional[str] = None
    owner_full_name: Optional[str] = None
    vet_id: int
    vet_full_name: Optional[str] = None
    services: List[VisitServiceDTO] = Field(default_factory=list)
    total_cost: float = 0.0
    created_at: Optional[str] = None
