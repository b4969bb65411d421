"""Celery worker configuration.

Runs the booking expiry sweep for deployments that use a dedicated worker
instead of (or alongside) the API's in-process scheduler. Overlapping runs
are safe: the sweep never transitions a booking twice.
"""

from celery import Celery

from slotbook.config import settings

# Create Celery app
celery_app = Celery(
    "slotbook_tasks",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["slotbook.tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=300,  # 5 minutes max
    task_soft_time_limit=240,  # Soft limit at 4 minutes

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour

    # Retry settings
    task_default_retry_delay=60,  # 1 minute
    task_max_retries=3,

    # Beat schedule for periodic tasks
    beat_schedule={
        "expire-stale-bookings": {
            "task": "slotbook.tasks.expire_stale_bookings",
            "schedule": float(settings.expiry_sweep_interval_seconds),
        },
    },
)


if __name__ == "__main__":
    celery_app.start()
