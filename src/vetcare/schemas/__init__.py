"""
Pydantic schemas for data validation and serialization.

This module contains the request payload schemas and client-facing DTOs
for every clinic entity.
"""

from .appointment import (
    AppointmentCreate,
    AppointmentDTO,
    AppointmentUpdate,
)
from .base import InputSchema, ResponseSchema
from .clinic import (
    SLOT_BUSY,
    SLOT_FREE,
    DailyStats,
    OwnerDashboard,
    PetHistory,
    SlotAvailability,
)
from .owner import OwnerCreate, OwnerDTO, OwnerUpdate
from .pet import PetCreate, PetDTO, PetUpdate
from .service import ServiceCreate, ServiceDTO, ServiceUpdate
from .user import LoginRequest, LoginResponse, UserCreate, UserDTO
from .veterinarian import VeterinarianCreate, VeterinarianDTO, VeterinarianUpdate
from .visit import (
    VisitCreate,
    VisitDTO,
    VisitServiceDTO,
    VisitServiceLink,
    VisitUpdate,
)

__all__ = [
    # Base classes
    "InputSchema",
    "ResponseSchema",
    # Owner schemas
    "OwnerCreate",
    "OwnerUpdate",
    "OwnerDTO",
    # Pet schemas
    "PetCreate",
    "PetUpdate",
    "PetDTO",
    # Veterinarian schemas
    "VeterinarianCreate",
    "VeterinarianUpdate",
    "VeterinarianDTO",
    # Service schemas
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceDTO",
    # Visit schemas
    "VisitCreate",
    "VisitUpdate",
    "VisitServiceLink",
    "VisitServiceDTO",
    "VisitDTO",
    # Appointment schemas
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentDTO",
    # Clinic aggregates
    "SLOT_FREE",
    "SLOT_BUSY",
    "SlotAvailability",
    "DailyStats",
    "OwnerDashboard",
    "PetHistory",
    # User schemas
    "LoginRequest",
    "LoginResponse",
    "UserCreate",
    "UserDTO",
]
