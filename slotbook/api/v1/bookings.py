"""Booking endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from slotbook.api.deps import (
    CurrentUser,
    get_db,
    require_admin,
    require_any_role,
    require_user,
)
from slotbook.core.middleware import booking_limiter
from slotbook.models.booking import Booking
from slotbook.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
)
from slotbook.services.booking_service import booking_service

router = APIRouter()


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    booking_data: BookingCreate,
    current_user: Annotated[CurrentUser, Depends(require_user)],
    _: Annotated[None, Depends(booking_limiter)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Reserve slots on a resource; the booking starts PENDING until paid."""
    return await booking_service.create_booking(
        db,
        user_id=current_user.id,
        resource_id=booking_data.resource_id,
        start_time=booking_data.start_time,
        end_time=booking_data.end_time,
        slots=booking_data.slots,
    )


@router.get("/", response_model=BookingListResponse)
async def list_bookings(
    current_user: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default=""),
) -> BookingListResponse:
    """List all bookings (admin only)."""
    bookings, total = await booking_service.list_bookings(
        db, page=page, limit=limit, search=search
    )
    return BookingListResponse(
        bookings=[BookingDetailResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/me", response_model=BookingListResponse)
async def list_my_bookings(
    current_user: Annotated[CurrentUser, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str = Query(default=""),
) -> BookingListResponse:
    """List the caller's bookings."""
    bookings, total = await booking_service.list_bookings(
        db, page=page, limit=limit, search=search, user_id=current_user.id
    )
    return BookingListResponse(
        bookings=[BookingDetailResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
    )


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_any_role)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Get a booking by ID. Users only see their own bookings."""
    return await booking_service.get_booking(
        db, booking_id, user_id=None if current_user.is_admin else current_user.id
    )


@router.post("/{booking_id}/pay", response_model=BookingResponse)
async def pay_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Pay for a pending booking, confirming it."""
    return await booking_service.pay_booking(db, booking_id, current_user.id)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: UUID,
    current_user: Annotated[CurrentUser, Depends(require_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Booking:
    """Cancel a pending booking, releasing its slots."""
    return await booking_service.cancel_booking(db, booking_id, current_user.id)
