"""Celery background tasks."""

import asyncio
import logging

from celery import shared_task

from slotbook.database import create_engine, create_session_maker
from slotbook.services.expiry_service import ExpirySweeper

logger = logging.getLogger(__name__)


async def _expire_stale_bookings() -> dict[str, int]:
    """Async implementation of the expiry sweep.

    Each task run gets its own engine: the event loop is new on every call,
    and pooled asyncpg connections cannot cross loops.
    """
    engine = create_engine()
    try:
        sweeper = ExpirySweeper(session_factory=create_session_maker(engine))
        result = await sweeper.run()
        return result.as_dict()
    finally:
        await engine.dispose()


@shared_task(bind=True, max_retries=3)
def expire_stale_bookings(self):
    """Cancel unpaid expired bookings and complete finished ones.

    Scheduled by Celery beat every ``expiry_sweep_interval_seconds``.
    """
    try:
        counts = asyncio.run(_expire_stale_bookings())
        return {"status": "success", **counts}
    except Exception as exc:
        logger.error(f"Expiry sweep task failed: {exc}")
        raise self.retry(exc=exc, countdown=30)
