"""
Owner model for the vetcare package.

Pet owners (clients) of the clinic. An owner can have many pets and
appointments; deleting an owner that is still referenced is refused.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .appointment import Appointment
    from .pet import Pet


class Owner(BaseModel):
    """Pet owner with contact details."""

    __tablename__ = "owners"

    first_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Owner's first name"
    )

    last_name: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Owner's last name"
    )

    phone: Mapped[str] = mapped_column(
        String(50), nullable=False, comment="Primary phone number"
    )

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, comment="Unique contact email"
    )

    address: Mapped[str] = mapped_column(
        Text, nullable=False, comment="Postal address"
    )

    pets: Mapped[List["Pet"]] = relationship(
        back_populates="owner", passive_deletes="all", order_by="Pet.id"
    )

    appointments: Mapped[List["Appointment"]] = relationship(
        back_populates="owner", passive_deletes="all"
    )

    __table_args__ = (Index("idx_owners_last_first", "last_name", "first_name"),)

    @property
    def full_name(self) -> str:
        """Get the owner's full name."""
        return f"{self.first_name} {self.last_name}"
