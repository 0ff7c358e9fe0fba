"""
Visit model for the vetcare package.

A visit records one examination of a pet by a vet. Its total cost is never
stored; the visit projection derives it from the linked services.
"""

import datetime as dt
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..database.types import UTCDateTime
from .base import BaseModel

if TYPE_CHECKING:
    from .pet import Pet
    from .service import VisitService
    from .veterinarian import Veterinarian


class Visit(BaseModel):
    """Completed examination of a pet by a veterinarian."""

    __tablename__ = "visits"

    pet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Examined pet",
    )

    vet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("vets.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Attending veterinarian",
    )

    date: Mapped[dt.datetime] = mapped_column(
        UTCDateTime(), nullable=False, index=True, comment="When the visit happened"
    )

    diagnosis: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Diagnosis recorded by the vet"
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Free-form notes"
    )

    pet: Mapped["Pet"] = relationship(back_populates="visits")

    vet: Mapped["Veterinarian"] = relationship(back_populates="visits")

    services: Mapped[List["VisitService"]] = relationship(
        back_populates="visit", passive_deletes="all", order_by="VisitService.id"
    )

    __table_args__ = (Index("idx_visits_pet_date", "pet_id", "date"),)
