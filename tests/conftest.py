"""Shared fixtures: a throwaway SQLite database per test and factories for rows."""

import os

os.environ.setdefault("RUN_EXPIRY_SWEEPER", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from slotbook.core.locks import LocalResourceLocks
from slotbook.database import Base
from slotbook.domain.booking_state import BookingStatus, PaymentStatus
from slotbook.models import Booking, Resource
from slotbook.services.booking_service import BookingService
from slotbook.services.expiry_service import ExpirySweeper


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'slotbook.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def service() -> BookingService:
    # SQLite ignores FOR UPDATE, so admission is serialized in-process instead
    return BookingService(locks=LocalResourceLocks(timeout=5), grace_period_minutes=15)


@pytest.fixture
def sweeper(session_factory) -> ExpirySweeper:
    return ExpirySweeper(session_factory=session_factory, batch_size=100)


@pytest.fixture
def tomorrow() -> datetime:
    """Top of an hour a day from now, so windows built from it are in the future."""
    return (datetime.now(UTC) + timedelta(days=1)).replace(minute=0, second=0, microsecond=0)


@pytest.fixture
def make_resource(session_factory):
    async def _make(capacity: int = 1, price: int = 1000, name: str = "Meeting Room A") -> Resource:
        async with session_factory() as session:
            resource = Resource(name=name, capacity=capacity, price=price)
            session.add(resource)
            await session.commit()
            return resource

    return _make


@pytest.fixture
def insert_booking(session_factory):
    """Insert a booking row directly, bypassing admission (for past windows)."""

    async def _insert(
        resource: Resource,
        start_time: datetime,
        end_time: datetime,
        status: BookingStatus = BookingStatus.PENDING,
        payment_status: PaymentStatus = PaymentStatus.PENDING,
        slots: int = 1,
        user_id: UUID | None = None,
        expired_at: datetime | None = None,
    ) -> Booking:
        async with session_factory() as session:
            booking = Booking(
                resource_id=resource.id,
                user_id=user_id or uuid4(),
                start_time=start_time,
                end_time=end_time,
                slots=slots,
                status=status.value,
                payment_status=payment_status.value,
                price_at_booking=resource.price,
                total_amount=resource.price,
                expired_at=expired_at or end_time + timedelta(minutes=15),
            )
            session.add(booking)
            await session.commit()
            return booking

    return _insert


@pytest.fixture
def fetch_booking(session_factory):
    async def _fetch(booking_id: UUID) -> Booking:
        async with session_factory() as session:
            return await session.get(Booking, booking_id)

    return _fetch
