"""
Veterinarian model for the vetcare package.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .appointment import Appointment
    from .visit import Visit


class Veterinarian(BaseModel):
    """Veterinarian working at the clinic."""

    __tablename__ = "vets"
    entity_label = "Vet"

    first_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Veterinarian's first name"
    )

    last_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Veterinarian's last name"
    )

    specialty: Mapped[str] = mapped_column(
        String(150), nullable=False, default="", comment="Area of specialization"
    )

    phone: Mapped[str] = mapped_column(
        String(50), nullable=False, default="", comment="Contact phone number"
    )

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, comment="Unique contact email"
    )

    visits: Mapped[List["Visit"]] = relationship(
        back_populates="vet", passive_deletes="all"
    )

    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="vet", passive_deletes="all"
    )

    @property
    def full_name(self) -> str:
        """Get the veterinarian's full name."""
        return f"{self.first_name} {self.last_name}"
