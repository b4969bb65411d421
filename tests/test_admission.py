"""Admission controller: validation, overlap, capacity and pricing."""

import asyncio
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from slotbook.core.exceptions import NotFoundError, ResourceNotAvailable, ValidationError
from slotbook.domain.booking_state import BookingStatus, PaymentStatus
from slotbook.models import Booking


async def test_create_booking_snapshots_price_and_deadline(db, service, make_resource, tomorrow):
    resource = await make_resource(capacity=2, price=1000)
    user_id = uuid4()
    start, end = tomorrow, tomorrow + timedelta(hours=2)

    booking = await service.create_booking(db, user_id, resource.id, start, end, slots=1)

    assert booking.status == BookingStatus.PENDING
    assert booking.payment_status == PaymentStatus.PENDING
    assert booking.user_id == user_id
    assert booking.price_at_booking == 1000
    assert booking.total_amount == 2000
    assert booking.payment_at is None
    assert booking.expired_at.replace(tzinfo=UTC) == end + timedelta(minutes=15)


async def test_partial_hour_is_billed_as_full_hour(db, service, make_resource, tomorrow):
    resource = await make_resource(price=1000)

    booking = await service.create_booking(
        db, uuid4(), resource.id, tomorrow, tomorrow + timedelta(minutes=61), slots=1
    )

    assert booking.total_amount == 2000


async def test_touching_windows_do_not_overlap(db, service, make_resource, tomorrow):
    resource = await make_resource(capacity=1)
    ten = tomorrow.replace(hour=10)

    first = await service.create_booking(db, uuid4(), resource.id, ten, ten + timedelta(hours=1), 1)
    second = await service.create_booking(
        db, uuid4(), resource.id, ten + timedelta(hours=1), ten + timedelta(hours=2), 1
    )

    assert first.id != second.id
    with pytest.raises(ResourceNotAvailable):
        await service.create_booking(
            db,
            uuid4(),
            resource.id,
            ten + timedelta(minutes=30),
            ten + timedelta(minutes=90),
            1,
        )


async def test_slots_accumulate_up_to_capacity(db, service, make_resource, tomorrow):
    resource = await make_resource(capacity=3)
    end = tomorrow + timedelta(hours=1)

    await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 2)
    await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)

    with pytest.raises(ResourceNotAvailable):
        await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)

    assert await service.used_slots(db, resource.id, tomorrow, end) == 3


async def test_request_larger_than_capacity_is_rejected(db, service, make_resource, tomorrow):
    resource = await make_resource(capacity=2)

    with pytest.raises(ResourceNotAvailable):
        await service.create_booking(
            db, uuid4(), resource.id, tomorrow, tomorrow + timedelta(hours=1), 3
        )


async def test_rejected_admission_writes_nothing(db, service, make_resource, tomorrow, session_factory):
    resource = await make_resource(capacity=1)
    end = tomorrow + timedelta(hours=1)
    await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)

    with pytest.raises(ResourceNotAvailable):
        await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)

    async with session_factory() as session:
        bookings, total = await service.list_bookings(session, limit=50)
    assert total == 1
    assert len(bookings) == 1


async def test_cancelled_and_completed_bookings_free_capacity(
    db, service, make_resource, insert_booking, tomorrow
):
    resource = await make_resource(capacity=1)
    end = tomorrow + timedelta(hours=1)
    await insert_booking(resource, tomorrow, end, status=BookingStatus.CANCELLED)
    await insert_booking(resource, tomorrow, end, status=BookingStatus.COMPLETED)

    booking = await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)

    assert booking.status == BookingStatus.PENDING


async def test_confirmed_booking_holds_capacity(db, service, make_resource, insert_booking, tomorrow):
    resource = await make_resource(capacity=1)
    end = tomorrow + timedelta(hours=1)
    await insert_booking(
        resource, tomorrow, end, status=BookingStatus.CONFIRMED, payment_status=PaymentStatus.PAID
    )

    with pytest.raises(ResourceNotAvailable):
        await service.create_booking(db, uuid4(), resource.id, tomorrow, end, 1)


async def test_other_resources_are_independent(db, service, make_resource, tomorrow):
    room_a = await make_resource(capacity=1, name="Room A")
    room_b = await make_resource(capacity=1, name="Room B")
    end = tomorrow + timedelta(hours=1)

    await service.create_booking(db, uuid4(), room_a.id, tomorrow, end, 1)
    booking = await service.create_booking(db, uuid4(), room_b.id, tomorrow, end, 1)

    assert booking.resource_id == room_b.id


async def test_unknown_resource_is_not_found(db, service, tomorrow):
    with pytest.raises(NotFoundError):
        await service.create_booking(
            db, uuid4(), uuid4(), tomorrow, tomorrow + timedelta(hours=1), 1
        )


@pytest.mark.parametrize(
    "start_offset, end_offset, slots, field",
    [
        (timedelta(hours=-1), timedelta(hours=1), 1, "start_time"),
        (timedelta(hours=-3), timedelta(hours=-2), 1, "start_time"),
        (timedelta(hours=2), timedelta(hours=1), 1, "end_time"),
        (timedelta(hours=1), timedelta(hours=1), 1, "end_time"),
        (timedelta(hours=1), timedelta(hours=2), 0, "slots"),
    ],
)
async def test_invalid_requests_name_the_field(
    db, service, make_resource, start_offset, end_offset, slots, field
):
    resource = await make_resource()
    now = datetime.now(UTC)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_booking(
            db, uuid4(), resource.id, now + start_offset, now + end_offset, slots, now=now
        )

    assert exc_info.value.field == field
    assert exc_info.value.errors[0]["field"] == field


async def test_end_in_past_is_reported_on_end_time(db, service, make_resource):
    resource = await make_resource()
    now = datetime.now(UTC)

    with pytest.raises(ValidationError) as exc_info:
        service.validate_request(now + timedelta(hours=1), now - timedelta(hours=1), 1, now)

    assert exc_info.value.field == "end_time"


async def test_naive_datetimes_are_treated_as_utc(db, service, make_resource, tomorrow):
    resource = await make_resource(price=500)
    start = tomorrow.replace(tzinfo=None)

    booking = await service.create_booking(
        db, uuid4(), resource.id, start, start + timedelta(minutes=30), 1
    )

    assert booking.total_amount == 500


async def test_concurrent_over_capacity_requests_admit_exactly_one(
    session_factory, service, make_resource, tomorrow
):
    resource = await make_resource(capacity=3)
    end = tomorrow + timedelta(hours=1)

    async def attempt(start):
        async with session_factory() as session:
            try:
                await service.create_booking(session, uuid4(), resource.id, start, end, 2)
                return True
            except ResourceNotAvailable:
                return False

    results = await asyncio.gather(
        attempt(tomorrow), attempt(tomorrow + timedelta(minutes=30))
    )

    assert sorted(results) == [False, True]
    async with session_factory() as session:
        assert await service.used_slots(session, resource.id, tomorrow, end) == 2


async def test_many_concurrent_requests_never_exceed_capacity(
    session_factory, service, make_resource, tomorrow
):
    resource = await make_resource(capacity=5)
    end = tomorrow + timedelta(hours=1)

    async def attempt():
        async with session_factory() as session:
            try:
                await service.create_booking(session, uuid4(), resource.id, tomorrow, end, 1)
                return True
            except ResourceNotAvailable:
                return False

    results = await asyncio.gather(*(attempt() for _ in range(12)))

    assert results.count(True) == 5
    async with session_factory() as session:
        bookings, total = await service.list_bookings(session, limit=100)
    assert total == 5
    assert sum(b.slots for b in bookings) == 5
    assert all(isinstance(b, Booking) for b in bookings)
