"""Booking admission and lifecycle service.

CRITICAL BUSINESS LOGIC:
- A resource is never committed beyond its capacity at any instant
- Admission runs as one transaction under an exclusive lock on the resource row
- Only PENDING and CONFIRMED bookings hold capacity
- Windows are half-open: [10:00, 11:00) and [11:00, 12:00) do not overlap
- Pay and cancel are only legal from PENDING; lookups are scoped to the owner
"""

import logging
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from slotbook.config import settings
from slotbook.core.exceptions import (
    InvalidBookingStatus,
    NotFoundError,
    ResourceNotAvailable,
    ValidationError,
)
from slotbook.core.locks import ResourceLocks, build_resource_locks
from slotbook.domain.booking_state import (
    ACTIVE_STATUSES,
    BookingStatus,
    PaymentStatus,
    assert_booking_transition,
)
from slotbook.domain.pricing import calculate_expiry, calculate_total_amount
from slotbook.models.booking import Booking
from slotbook.models.resource import Resource
from slotbook.services.resource_catalog import ResourceCatalog, resource_catalog

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class BookingService:
    """Admission controller and lifecycle transitioner for bookings."""

    def __init__(
        self,
        catalog: ResourceCatalog | None = None,
        locks: ResourceLocks | None = None,
        grace_period_minutes: int | None = None,
    ):
        self.catalog = catalog or resource_catalog
        self.locks = locks if locks is not None else build_resource_locks()
        self.grace_period_minutes = (
            grace_period_minutes
            if grace_period_minutes is not None
            else settings.booking_grace_period_minutes
        )

    # ==================== ADMISSION ====================

    def validate_request(
        self,
        start_time: datetime,
        end_time: datetime,
        slots: int,
        now: datetime,
    ) -> None:
        """Check a booking request before any lock is taken.

        Raises:
            ValidationError: Naming the first offending field
        """
        if start_time < now:
            raise ValidationError("Start time must not be in the past", field="start_time")
        if end_time < now:
            raise ValidationError("End time must not be in the past", field="end_time")
        if start_time >= end_time:
            raise ValidationError("End time must be after start time", field="end_time")
        if slots < 1:
            raise ValidationError("Slots must be at least 1", field="slots")

    async def used_slots(
        self,
        db: AsyncSession,
        resource_id: UUID,
        start_time: datetime,
        end_time: datetime,
    ) -> int:
        """Sum of slots held by active bookings overlapping ``[start_time, end_time)``."""
        result = await db.execute(
            select(func.coalesce(func.sum(Booking.slots), 0)).where(
                Booking.resource_id == resource_id,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.start_time < end_time,
                Booking.end_time > start_time,
            )
        )
        return int(result.scalar_one())

    async def create_booking(
        self,
        db: AsyncSession,
        user_id: UUID,
        resource_id: UUID,
        start_time: datetime,
        end_time: datetime,
        slots: int,
        now: datetime | None = None,
    ) -> Booking:
        """Admit a new PENDING booking if the resource has room for it.

        Raises:
            ValidationError: Bad window or slot count
            NotFoundError: Unknown resource
            ResourceNotAvailable: Capacity would be exceeded
        """
        now = as_utc(now) if now else datetime.now(UTC)
        start_time = as_utc(start_time)
        end_time = as_utc(end_time)
        self.validate_request(start_time, end_time, slots, now)

        async with self.locks.hold(resource_id):
            try:
                resource = await self.catalog.lock_resource(db, resource_id)
                if resource is None:
                    raise NotFoundError("Resource", str(resource_id))

                used = await self.used_slots(db, resource_id, start_time, end_time)
                if used + slots > resource.capacity:
                    logger.info(
                        f"Admission rejected: resource={resource_id} used={used} "
                        f"requested={slots} capacity={resource.capacity}"
                    )
                    raise ResourceNotAvailable()

                booking = Booking(
                    resource_id=resource.id,
                    user_id=user_id,
                    start_time=start_time,
                    end_time=end_time,
                    slots=slots,
                    status=BookingStatus.PENDING.value,
                    payment_status=PaymentStatus.PENDING.value,
                    price_at_booking=resource.price,
                    total_amount=calculate_total_amount(start_time, end_time, resource.price),
                    expired_at=calculate_expiry(end_time, self.grace_period_minutes),
                )
                db.add(booking)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        await db.refresh(booking)
        logger.info(
            f"Booking {booking.id} admitted: resource={resource_id} slots={slots} "
            f"total_amount={booking.total_amount}"
        )
        return booking

    # ==================== LIFECYCLE ====================

    async def pay_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user_id: UUID,
        now: datetime | None = None,
    ) -> Booking:
        """Mark a PENDING booking as paid and confirmed.

        Raises:
            NotFoundError: No such booking for this user
            InvalidBookingStatus: Booking is not PENDING
        """
        paid_at = as_utc(now) if now else datetime.now(UTC)
        return await self._transition(
            db,
            booking_id,
            user_id,
            BookingStatus.CONFIRMED,
            {"payment_status": PaymentStatus.PAID.value, "payment_at": paid_at},
        )

    async def cancel_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user_id: UUID,
    ) -> Booking:
        """Cancel a PENDING booking; its slots stop counting against capacity.

        Raises:
            NotFoundError: No such booking for this user
            InvalidBookingStatus: Booking is not PENDING
        """
        return await self._transition(
            db,
            booking_id,
            user_id,
            BookingStatus.CANCELLED,
            {"payment_status": PaymentStatus.FAILED.value},
        )

    async def _transition(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user_id: UUID,
        target: BookingStatus,
        values: dict,
    ) -> Booking:
        try:
            result = await db.execute(
                select(Booking)
                .where(Booking.id == booking_id, Booking.user_id == user_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            booking = result.scalar_one_or_none()
            if booking is None:
                raise NotFoundError("Booking", str(booking_id))

            current = booking.status
            assert_booking_transition(current, target)

            # Guarded on the status we checked so a racing writer cannot be overwritten
            updated = await db.execute(
                update(Booking)
                .where(Booking.id == booking.id, Booking.status == current)
                .values(status=target.value, **values)
                .execution_options(synchronize_session=False)
            )
            if updated.rowcount != 1:
                raise InvalidBookingStatus("Booking was modified by another request")
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await db.refresh(booking)
        logger.info(f"Booking {booking.id} moved {current} -> {target.value} by user {user_id}")
        return booking

    # ==================== QUERIES ====================

    async def get_booking(
        self,
        db: AsyncSession,
        booking_id: UUID,
        user_id: UUID | None = None,
    ) -> Booking:
        """Fetch one booking; when ``user_id`` is given only the owner's booking is visible."""
        query = (
            select(Booking)
            .options(selectinload(Booking.resource))
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        if user_id is not None:
            query = query.where(Booking.user_id == user_id)
        result = await db.execute(query)
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError("Booking", str(booking_id))
        return booking

    async def list_bookings(
        self,
        db: AsyncSession,
        page: int = 1,
        limit: int = 10,
        search: str = "",
        user_id: UUID | None = None,
    ) -> tuple[list[Booking], int]:
        """Page through bookings, newest first, optionally filtered by owner and resource name."""
        query = select(Booking).join(Resource, Booking.resource_id == Resource.id)
        if user_id is not None:
            query = query.where(Booking.user_id == user_id)
        if search:
            query = query.where(Resource.name.ilike(f"%{search}%"))

        count_result = await db.execute(select(func.count()).select_from(query.subquery()))
        total = count_result.scalar() or 0

        offset = (page - 1) * limit
        query = (
            query.options(selectinload(Booking.resource))
            .order_by(Booking.created_at.desc(), Booking.id)
            .offset(offset)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(query)
        return list(result.scalars().all()), total


booking_service = BookingService()
