"""In-process scheduler for the booking expiry sweep."""

import asyncio
import logging

from slotbook.config import settings
from slotbook.services.expiry_service import ExpirySweeper, expiry_sweeper

logger = logging.getLogger(__name__)

# Set to stop the scheduler loop
_stop_event: asyncio.Event | None = None


async def start_expiry_sweep_scheduler(
    sweeper: ExpirySweeper | None = None,
    interval_seconds: float | None = None,
) -> None:
    """Background task that runs the expiry sweep on a fixed interval.

    A failed run is logged and the next tick runs as usual; a late tick only
    delays expiry since every run re-evaluates the current time.
    """
    global _stop_event
    _stop_event = asyncio.Event()
    stop_event = _stop_event
    sweeper = sweeper or expiry_sweeper
    interval = interval_seconds or settings.expiry_sweep_interval_seconds

    logger.info(f"Expiry sweep scheduler started (interval={interval}s)")

    while not stop_event.is_set():
        try:
            await sweeper.run()
        except Exception as e:
            logger.error(f"Scheduled expiry sweep error: {e}")

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue

    logger.info("Expiry sweep scheduler stopped")


def stop_expiry_sweep_scheduler() -> None:
    """Signal the expiry sweep scheduler to stop."""
    if _stop_event is not None:
        _stop_event.set()
