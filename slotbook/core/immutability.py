"""Immutability enforcement for booking records using SQLAlchemy events."""

import logging
from datetime import UTC, datetime

from sqlalchemy import event, inspect

from slotbook.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

# Columns fixed at admission time
IMMUTABLE_BOOKING_FIELDS = (
    "resource_id",
    "user_id",
    "start_time",
    "end_time",
    "slots",
    "price_at_booking",
    "total_amount",
    "expired_at",
)


class ImmutabilityViolationError(ValidationError):
    """Raised when attempting to modify a field fixed at booking creation."""

    def __init__(self, model_name: str, field: str, record_id: str):
        self.model_name = model_name
        self.record_id = record_id
        super().__init__(
            f"Immutability violation: Cannot change {field} of {model_name} record {record_id}.",
            field=field,
        )


def _changed_fields(target, fields: tuple[str, ...]) -> list[str]:
    state = inspect(target)
    return [name for name in fields if state.attrs[name].history.has_changes()]


def _prevent_booking_update(mapper, connection, target) -> None:
    changed = _changed_fields(target, IMMUTABLE_BOOKING_FIELDS)
    if not changed:
        return
    logger.error(
        f"IMMUTABILITY_VIOLATION: Attempted to change {', '.join(changed)} on Booking "
        f"record_id={target.id} at {datetime.now(UTC).isoformat()}"
    )
    raise ImmutabilityViolationError("Booking", changed[0], str(target.id))


def register_immutability_enforcement() -> None:
    """Register SQLAlchemy event listeners for immutability enforcement.

    Idempotent; must be called after models are imported but before session use.
    """
    from slotbook.models.booking import Booking

    if event.contains(Booking, "before_update", _prevent_booking_update):
        return
    event.listen(Booking, "before_update", _prevent_booking_update)
    logger.info("Immutability enforcement registered for booking records")
