"""Pydantic schemas for API validation."""

from slotbook.schemas.booking import (
    BookingCreate,
    BookingDetailResponse,
    BookingListResponse,
    BookingResponse,
    ExpirySweepResponse,
    ResourceSummary,
)

__all__ = [
    "BookingCreate",
    "BookingDetailResponse",
    "BookingListResponse",
    "BookingResponse",
    "ExpirySweepResponse",
    "ResourceSummary",
]
