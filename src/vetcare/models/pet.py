"""
Pet model for the vetcare package.

This module contains the Pet SQLAlchemy model: a patient of the clinic,
always belonging to exactly one owner.
"""

from datetime import date
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .appointment import Appointment
    from .owner import Owner
    from .visit import Visit


class Pet(BaseModel):
    """
    Pet model representing an animal treated at the clinic.

    Species is stored as free text (e.g. "Šuo", "Katė") and matched
    case-insensitively by the list filters.
    """

    __tablename__ = "pets"

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("owners.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Owner of the pet",
    )

    name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Pet's name"
    )

    species: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True, comment="Species of the pet"
    )

    breed: Mapped[str] = mapped_column(
        String(100), nullable=False, default="", comment="Breed of the pet"
    )

    birth_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, comment="Pet's date of birth"
    )

    gender: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unknown", comment="Pet's gender"
    )

    owner: Mapped["Owner"] = relationship(back_populates="pets")

    visits: Mapped[List["Visit"]] = relationship(
        back_populates="pet", passive_deletes="all"
    )

    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="pet", passive_deletes="all"
    )

    __table_args__ = (Index("idx_pets_owner_name", "owner_id", "name"),)
