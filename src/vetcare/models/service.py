"""
Service catalogue models for the vetcare package.

A Service is a billable procedure with a flat price. VisitService links a
visit to the services performed during it, each link optionally carrying
its own notes.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel

if TYPE_CHECKING:
    from .visit import Visit


class Service(BaseModel):
    """Service offered by the clinic."""

    __tablename__ = "services"

    name: Mapped[str] = mapped_column(
        String(150), nullable=False, comment="Service name"
    )

    description: Mapped[str] = mapped_column(
        Text, nullable=False, default="", comment="Service description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),  # Up to 99,999,999.99
        nullable=False,
        default=Decimal("0"),
        comment="Flat price of the service",
    )

    category: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="general",
        index=True,
        comment="Service category",
    )

    visit_links: Mapped[List["VisitService"]] = relationship(
        back_populates="service", passive_deletes="all"
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_services_price_non_negative"),
    )


class VisitService(BaseModel):
    """Junction row recording that a service was performed during a visit."""

    __tablename__ = "visit_services"
    entity_label = "Visit service"

    visit_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("visits.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    service_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("services.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Notes about this service on this visit"
    )

    visit: Mapped["Visit"] = relationship(back_populates="services")

    service: Mapped["Service"] = relationship(back_populates="visit_links")
