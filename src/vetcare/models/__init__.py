"""
Database models for the vetcare package.

This module contains SQLAlchemy models for all core entities of the
veterinary clinic.
"""

from .appointment import Appointment, AppointmentStatus

# Base model will be imported by all other models
from .base import Base, BaseModel

# Core entity models
from .owner import Owner
from .pet import Pet
from .service import Service, VisitService
from .user import User
from .veterinarian import Veterinarian
from .visit import Visit

__all__ = [
    "Base",
    "BaseModel",
    "Owner",
    "Pet",
    "Veterinarian",
    "Service",
    "VisitService",
    "Visit",
    "Appointment",
    "AppointmentStatus",
    "User",
]
