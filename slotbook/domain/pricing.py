"""Booking pricing and deadline rules.

Rules:
- Billing is per started hour: a 61 minute booking bills two hours
- Amounts are integers in the smallest currency unit
- An unpaid booking expires a fixed grace period after its end time
"""

from datetime import datetime, timedelta

ONE_HOUR = timedelta(hours=1)


def billable_hours(start_time: datetime, end_time: datetime) -> int:
    """Number of hours to bill for a window, rounded up to the next full hour.

    Args:
        start_time: Start of the booked window
        end_time: End of the booked window (exclusive)

    Returns:
        int: Billable hours (at least 1 for a non-empty window)
    """
    hours, remainder = divmod(end_time - start_time, ONE_HOUR)
    if remainder:
        hours += 1
    return hours


def calculate_total_amount(start_time: datetime, end_time: datetime, unit_price: int) -> int:
    """Total charge for a window at ``unit_price`` per hour."""
    return billable_hours(start_time, end_time) * unit_price


def calculate_expiry(end_time: datetime, grace_period_minutes: int) -> datetime:
    """Deadline after which an unpaid booking is cancelled by the sweeper."""
    return end_time + timedelta(minutes=grace_period_minutes)
