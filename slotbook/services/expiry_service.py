"""Expiry sweeper for stale bookings.

Two independent passes, each selecting by a status predicate:
- unpaid expiry: PENDING bookings past expired_at become CANCELLED / FAILED
- completion: CONFIRMED bookings past end_time become COMPLETED

Every row transition runs in its own transaction and repeats the predicate in
its UPDATE, so a row already moved by an overlapping sweep (or by the user)
matches nothing and is skipped.
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import ColumnElement, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from slotbook.config import settings
from slotbook.domain.booking_state import BookingStatus, PaymentStatus
from slotbook.models.booking import Booking

logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    """Number of bookings transitioned by one sweep run."""

    cancelled_count: int = 0
    completed_count: int = 0

    def as_dict(self) -> dict[str, int]:
        return {
            "cancelled_count": self.cancelled_count,
            "completed_count": self.completed_count,
        }


class ExpirySweeper:
    """Batch reconciliation of bookings whose deadlines have passed."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        batch_size: int | None = None,
    ):
        self._session_factory = session_factory
        self.batch_size = batch_size or settings.expiry_sweep_batch_size

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            from slotbook.database import async_session_maker

            self._session_factory = async_session_maker
        return self._session_factory

    @staticmethod
    def unpaid_expired(now: datetime) -> ColumnElement[bool]:
        return (Booking.status == BookingStatus.PENDING.value) & (Booking.expired_at < now)

    @staticmethod
    def finished(now: datetime) -> ColumnElement[bool]:
        return (Booking.status == BookingStatus.CONFIRMED.value) & (Booking.end_time < now)

    async def run(self, now: datetime | None = None) -> SweepResult:
        """Run both passes against ``now`` (defaults to the current time)."""
        now = now or datetime.now(UTC)
        result = SweepResult()

        async with self.session_factory() as db:
            result.cancelled_count = await self._sweep(
                db,
                self.unpaid_expired(now),
                {
                    "status": BookingStatus.CANCELLED.value,
                    "payment_status": PaymentStatus.FAILED.value,
                },
                "cancelled",
            )
            result.completed_count = await self._sweep(
                db,
                self.finished(now),
                {"status": BookingStatus.COMPLETED.value},
                "completed",
            )

        logger.info(
            f"Expiry sweep at {now.isoformat()}: cancelled={result.cancelled_count}, "
            f"completed={result.completed_count}"
        )
        return result

    async def collect_candidates(
        self,
        db: AsyncSession,
        predicate: ColumnElement[bool],
        exclude: Collection[UUID] = (),
    ) -> list[UUID]:
        """One page of ids matching ``predicate``, oldest deadline first."""
        query = select(Booking.id).where(predicate)
        if exclude:
            query = query.where(Booking.id.not_in(exclude))
        result = await db.execute(
            query.order_by(Booking.end_time, Booking.id).limit(self.batch_size)
        )
        ids = list(result.scalars().all())
        # End the read transaction before the per-row writes
        await db.commit()
        return ids

    async def transition_one(
        self,
        db: AsyncSession,
        booking_id: UUID,
        predicate: ColumnElement[bool],
        values: dict,
    ) -> bool:
        """Apply ``values`` to one booking if it still matches ``predicate``.

        Returns:
            bool: True when this call moved the booking
        """
        try:
            updated = await db.execute(
                update(Booking)
                .where(Booking.id == booking_id, predicate)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return updated.rowcount == 1

    async def _sweep(
        self,
        db: AsyncSession,
        predicate: ColumnElement[bool],
        values: dict,
        verb: str,
    ) -> int:
        count = 0
        # Failed rows still match the predicate and would otherwise come back every page
        failed: set[UUID] = set()
        while True:
            page = await self.collect_candidates(db, predicate, exclude=failed)
            for booking_id in page:
                try:
                    if await self.transition_one(db, booking_id, predicate, values):
                        count += 1
                        logger.info(f"Booking {booking_id} has been {verb}")
                except SQLAlchemyError:
                    failed.add(booking_id)
                    logger.exception(f"Expiry sweep failed for booking {booking_id}; skipping")
            if len(page) < self.batch_size:
                return count


expiry_sweeper = ExpirySweeper()


async def run_expiry_sweep(now: datetime | None = None) -> SweepResult:
    """Run one sweep with the application's session factory."""
    return await expiry_sweeper.run(now)
