"""Booking state machine rules."""

import pytest

from slotbook.core.exceptions import InvalidBookingStatus
from slotbook.domain.booking_state import (
    ACTIVE_STATUSES,
    BookingStatus,
    assert_booking_transition,
    can_transition,
)


@pytest.mark.parametrize(
    "current, target",
    [
        (BookingStatus.PENDING, BookingStatus.CONFIRMED),
        (BookingStatus.PENDING, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    assert_booking_transition(current.value, target.value)


@pytest.mark.parametrize(
    "current, target",
    [
        (BookingStatus.PENDING, BookingStatus.COMPLETED),
        (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
        (BookingStatus.CONFIRMED, BookingStatus.CONFIRMED),
        (BookingStatus.CANCELLED, BookingStatus.CONFIRMED),
        (BookingStatus.COMPLETED, BookingStatus.CANCELLED),
    ],
)
def test_forbidden_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidBookingStatus) as exc_info:
        assert_booking_transition(current, target)
    assert exc_info.value.status_code == 409
    assert current.value in exc_info.value.detail


def test_unknown_status_cannot_transition():
    assert not can_transition("ARCHIVED", BookingStatus.CONFIRMED.value)


def test_only_pending_and_confirmed_hold_capacity():
    assert set(ACTIVE_STATUSES) == {"PENDING", "CONFIRMED"}
