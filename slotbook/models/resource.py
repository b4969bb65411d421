"""Bookable resource model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from slotbook.database import Base

if TYPE_CHECKING:
    from slotbook.models.booking import Booking


class Resource(Base):
    """A bookable resource (room, machine, court).

    Capacity and price are maintained by the resource catalog; the booking
    engine only reads them.
    """

    __tablename__ = "resources"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text)
    location: Mapped[str | None] = mapped_column(String(255))

    # Maximum simultaneous slot units
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    # Unit price per hour, smallest currency unit
    price: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="resource")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="check_resource_capacity_positive"),
        CheckConstraint("price >= 0", name="check_resource_price_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Resource(id={self.id}, name={self.name!r}, capacity={self.capacity})>"
