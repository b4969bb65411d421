"""Main API router that includes all endpoint routers."""

from fastapi import APIRouter

from slotbook.api.v1 import bookings, internal

api_router = APIRouter()

# Bookings
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])

# Internal
api_router.include_router(internal.router, prefix="/internal", tags=["Internal"])
