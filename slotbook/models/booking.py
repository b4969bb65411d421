"""Booking database model."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from slotbook.database import Base
from slotbook.domain.booking_state import BookingStatus, PaymentStatus

if TYPE_CHECKING:
    from slotbook.models.resource import Resource


class Booking(Base):
    """Reservation of ``slots`` units of a resource for ``[start_time, end_time)``."""

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    resource_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("resources.id"), nullable=False, index=True
    )
    # Requester, owned by the identity service
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Window (half-open)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    slots: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Status
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=BookingStatus.PENDING.value
    )  # PENDING, CONFIRMED, CANCELLED, COMPLETED
    payment_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.PENDING.value
    )  # PENDING, PAID, FAILED

    # Pricing snapshot (smallest currency unit)
    price_at_booking: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Timestamps
    payment_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    expired_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    resource: Mapped["Resource"] = relationship("Resource", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("slots > 0", name="check_booking_slots_positive"),
        CheckConstraint("start_time < end_time", name="check_booking_window"),
        Index("ix_bookings_overlap", "resource_id", "status", "start_time", "end_time"),
        Index("ix_bookings_status_expired_at", "status", "expired_at"),
        Index("ix_bookings_status_end_time", "status", "end_time"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, resource={self.resource_id}, status={self.status})>"
