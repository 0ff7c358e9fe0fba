"""
Appointment Pydantic schemas for validation and serialization.

This module contains the appointment create and update payloads, which
restrict ``time_slot`` to the canonical clinic slots, and the
AppointmentDTO returned to clients.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from ..models.appointment import AppointmentStatus
from ..utils.datetime_utils import CLINIC_TIME_SLOTS, is_valid_time_slot
from ..utils.validation import validate_record_id
from .base import InputSchema, ResponseSchema
from .visit import coerce_utc_datetime


class AppointmentBase(InputSchema):
    """Appointment fields shared by create and update payloads."""

    pet_id: Optional[int] = Field(None, description="Pet being seen")
    vet_id: Optional[int] = Field(None, description="Assigned vet")
    owner_id: Optional[int] = Field(None, description="Owner who booked")
    date: Optional[datetime] = Field(None, description="Appointment date")
    time_slot: Optional[str] = Field(None, description="Canonical slot, e.g. 11:00")
    status: Optional[AppointmentStatus] = Field(None, description="Current status")
    notes: Optional[str] = Field(None, description="Additional notes")

    @field_validator("pet_id", mode="before")
    @classmethod
    def validate_pet_id(cls, v: Any) -> int:
        return validate_record_id(v, "petId")

    @field_validator("vet_id", mode="before")
    @classmethod
    def validate_vet_id(cls, v: Any) -> int:
        return validate_record_id(v, "vetId")

    @field_validator("owner_id", mode="before")
    @classmethod
    def validate_owner_id(cls, v: Any) -> int:
        return validate_record_id(v, "ownerId")

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v: Any) -> datetime:
        return coerce_utc_datetime(v)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, v: Optional[str]) -> str:
        if not is_valid_time_slot(v):
            raise ValueError(f"timeSlot must be one of: {', '.join(CLINIC_TIME_SLOTS)}")
        return v

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v: Any) -> AppointmentStatus:
        if isinstance(v, AppointmentStatus):
            return v
        if isinstance(v, str) and v.strip().lower() in AppointmentStatus.values():
            return AppointmentStatus(v.strip().lower())
        raise ValueError(
            f"status must be one of: {', '.join(AppointmentStatus.values())}"
        )

    @field_validator("notes")
    @classmethod
    def blank_notes_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class AppointmentCreate(AppointmentBase):
    """Schema for booking an appointment."""

    pet_id: int = Field(..., description="Pet being seen")
    vet_id: int = Field(..., description="Assigned vet")
    owner_id: int = Field(..., description="Owner who booked")
    date: datetime = Field(..., description="Appointment date")
    time_slot: str = Field(..., description="Canonical slot, e.g. 11:00")
    status: AppointmentStatus = Field(
        AppointmentStatus.SCHEDULED, description="Current status"
    )


class AppointmentUpdate(AppointmentBase):
    """Schema for partial appointment updates (e.g. cancelling)."""


class AppointmentDTO(ResponseSchema):
    """Client-facing appointment representation."""

    id: int
    date: Optional[str] = None
    time_slot: str
    status: str
    notes: Optional[str] = None
    pet_id: int
    pet_name: Optional[str] = None
    vet_id: int
    vet_full_name: Optional[str] = None
    owner_id: int
    owner_full_name: Optional[str] = None
    created_at: Optional[str] = None
