"""
Appointment model for the vetcare package.

This module contains the Appointment SQLAlchemy model. Appointments occupy
one of the canonical hourly slots of a vet's day; at most one appointment
that is not cancelled may hold a given (vet, day, slot).
"""

import datetime as dt
import enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..database.types import UTCDateTime
from ..utils.datetime_utils import CLINIC_TIME_SLOTS, to_utc
from .base import BaseModel

if TYPE_CHECKING:
    from .owner import Owner
    from .pet import Pet
    from .veterinarian import Veterinarian


class AppointmentStatus(enum.Enum):
    """Enumeration of appointment statuses."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls):
        return [member.value for member in cls]


_SLOT_LIST = ", ".join(f"'{slot}'" for slot in CLINIC_TIME_SLOTS)
_LIVE_APPOINTMENT = "status != 'cancelled'"


class Appointment(BaseModel):
    """
    Appointment of a pet with a vet in a canonical time slot.

    ``booking_day`` mirrors the UTC calendar day of ``date`` and is kept in
    sync whenever ``date`` is assigned; the partial unique index on
    (vet_id, booking_day, time_slot) is what prevents double booking when
    two requests race.
    """

    __tablename__ = "appointments"

    def __init__(self, **kwargs):
        """Initialize Appointment with default values."""
        if "status" not in kwargs:
            kwargs["status"] = AppointmentStatus.SCHEDULED
        super().__init__(**kwargs)

    pet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Pet being seen",
    )

    vet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("vets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Assigned veterinarian",
    )

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("owners.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Owner who booked the appointment",
    )

    date: Mapped[dt.datetime] = mapped_column(
        UTCDateTime(), nullable=False, index=True, comment="Scheduled date"
    )

    booking_day: Mapped[dt.date] = mapped_column(
        Date, nullable=False, comment="UTC calendar day of date"
    )

    time_slot: Mapped[str] = mapped_column(
        String(5), nullable=False, comment="Canonical hourly slot, e.g. 11:00"
    )

    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda statuses: [s.value for s in statuses],
            validate_strings=True,
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
        index=True,
        comment="Current status of the appointment",
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Additional notes about the appointment"
    )

    pet: Mapped["Pet"] = relationship(back_populates="appointments")

    vet: Mapped["Veterinarian"] = relationship(back_populates="appointments")

    owner: Mapped["Owner"] = relationship(back_populates="appointments")

    __table_args__ = (
        CheckConstraint(
            f"time_slot IN ({_SLOT_LIST})",
            name="ck_appointments_time_slot_canonical",
        ),
        Index("idx_appointments_vet_day", "vet_id", "booking_day"),
        Index(
            "uq_appointments_vet_day_slot_live",
            "vet_id",
            "booking_day",
            "time_slot",
            unique=True,
            sqlite_where=text(_LIVE_APPOINTMENT),
            postgresql_where=text(_LIVE_APPOINTMENT),
        ),
    )

    @validates("date")
    def _sync_booking_day(self, key: str, value: dt.datetime) -> dt.datetime:
        if value is not None:
            value = to_utc(value)
            self.booking_day = value.date()
        return value

    @property
    def is_scheduled(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED
