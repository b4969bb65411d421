"""Database models."""

from slotbook.core.immutability import register_immutability_enforcement
from slotbook.models.booking import Booking
from slotbook.models.resource import Resource

register_immutability_enforcement()

__all__ = [
    "Booking",
    "Resource",
]
