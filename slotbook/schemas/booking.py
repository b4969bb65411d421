"""Booking-related Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    resource_id: UUID
    start_time: datetime
    end_time: datetime
    # Range checked in BookingService.validate_request
    slots: int


class ResourceSummary(BaseModel):
    """Resource fields embedded in booking listings."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    capacity: int
    price: int


class BookingResponse(BaseModel):
    """Schema for booking response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    resource_id: UUID
    user_id: UUID

    # Window
    start_time: datetime
    end_time: datetime
    slots: int

    # Status
    status: str
    payment_status: str

    # Pricing
    price_at_booking: int
    total_amount: int

    # Timestamps
    payment_at: datetime | None
    expired_at: datetime
    created_at: datetime
    updated_at: datetime


class BookingDetailResponse(BookingResponse):
    """Booking with its resource."""

    resource: ResourceSummary


class BookingListResponse(BaseModel):
    """Paginated booking list."""

    bookings: list[BookingDetailResponse]
    total: int
    page: int
    limit: int


class ExpirySweepResponse(BaseModel):
    """Counts from one expiry sweep run."""

    cancelled_count: int
    completed_count: int
    ran_at: datetime
