"""Booking state machine."""

from enum import Enum

from slotbook.core.exceptions import InvalidBookingStatus


class BookingStatus(str, Enum):
    """Lifecycle status of a booking."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    """Payment status of a booking."""

    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


# Statuses that hold capacity on the resource
ACTIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED},
    BookingStatus.CANCELLED: set(),
    BookingStatus.COMPLETED: set(),
}


def can_transition(current: str, target: str) -> bool:
    try:
        return BookingStatus(target) in BOOKING_TRANSITIONS[BookingStatus(current)]
    except ValueError:
        return False


def assert_booking_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidBookingStatus(
            f"Booking is {_label(current)}, cannot move to {_label(target)}"
        )


def _label(status: str) -> str:
    return status.value if isinstance(status, BookingStatus) else str(status)
