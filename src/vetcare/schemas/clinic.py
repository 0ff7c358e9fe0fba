"""
Clinic-wide aggregate schemas.

Responses of the scheduling coordinator that combine several entities:
vet availability, daily statistics, the owner dashboard and a pet's full
history.
"""

from typing import List, Optional

from pydantic import Field

from .appointment import AppointmentDTO
from .base import ResponseSchema
from .owner import OwnerDTO
from .pet import PetDTO
from .visit import VisitDTO

SLOT_FREE = "free"
SLOT_BUSY = "busy"


class SlotAvailability(ResponseSchema):
    """Whether one canonical slot of a vet's day is taken."""

    slot: str
    status: str = Field(..., description="'free' or 'busy'")


class DailyStats(ResponseSchema):
    """Headline counts for today's clinic dashboard."""

    today_visits: int
    upcoming_appointments: int = Field(
        ..., description="Scheduled appointments today"
    )
    total_pets: int
    total_owners: int
    total_vets: int


class OwnerDashboard(ResponseSchema):
    """An owner with their pets, next appointments and latest visits."""

    owner: OwnerDTO
    pets: List[PetDTO] = Field(default_factory=list)
    upcoming_appointments: List[AppointmentDTO] = Field(default_factory=list)
    recent_visits: List[VisitDTO] = Field(default_factory=list)


class PetHistory(ResponseSchema):
    """A pet with its owner and every visit, most recent first."""

    pet: PetDTO
    owner: Optional[OwnerDTO] = None
    visits: List[VisitDTO] = Field(default_factory=list)
