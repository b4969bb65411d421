"""Per-resource admission locks.

The database row lock taken during admission is always in force. These locks
add an outer critical section keyed by resource id for deployments where the
row lock alone is not enough:

- local: in-process asyncio lock (single instance, or stores without FOR UPDATE)
- redis: distributed lock shared by every instance
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from uuid import UUID

import redis.asyncio as redis
from redis.exceptions import LockError

from slotbook.config import settings
from slotbook.core.exceptions import ResourceBusy

logger = logging.getLogger(__name__)


class ResourceLocks:
    """No outer lock; admission relies on the database row lock."""

    @asynccontextmanager
    async def hold(self, resource_id: UUID) -> AsyncIterator[None]:
        yield


class LocalResourceLocks(ResourceLocks):
    """In-process mutex per resource id."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self._locks: dict[UUID, asyncio.Lock] = {}
        self._waiters: dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, resource_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(resource_id, asyncio.Lock())
        self._waiters[resource_id] = self._waiters.get(resource_id, 0) + 1
        try:
            try:
                async with asyncio.timeout(self.timeout):
                    await lock.acquire()
            except TimeoutError:
                logger.warning(f"Timed out waiting for admission lock on resource {resource_id}")
                raise ResourceBusy()
            try:
                yield
            finally:
                lock.release()
        finally:
            self._waiters[resource_id] -= 1
            # Drop idle locks so the registry does not grow with every resource seen
            if self._waiters[resource_id] == 0:
                del self._waiters[resource_id]
                self._locks.pop(resource_id, None)

    def __len__(self) -> int:
        return len(self._locks)


class RedisResourceLocks(ResourceLocks):
    """Distributed mutex per resource id backed by Redis."""

    def __init__(
        self,
        redis_url: str | None = None,
        timeout: float = 10.0,
        key_prefix: str = "admission",
    ):
        self.redis_url = redis_url or settings.redis_url
        self.timeout = timeout
        self.key_prefix = key_prefix
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    @asynccontextmanager
    async def hold(self, resource_id: UUID) -> AsyncIterator[None]:
        redis_client = await self.get_redis()
        # Lock expiry bounds how long a crashed holder can block a resource
        lock = redis_client.lock(
            f"{self.key_prefix}:{resource_id}",
            timeout=self.timeout * 3,
            blocking_timeout=self.timeout,
        )
        acquired = await lock.acquire()
        if not acquired:
            logger.warning(f"Timed out waiting for admission lock on resource {resource_id}")
            raise ResourceBusy()
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                logger.error(f"Admission lock on resource {resource_id} expired before release")


def build_resource_locks(backend: str | None = None) -> ResourceLocks:
    """Create the lock strategy named by ``backend`` (defaults to settings)."""
    backend = backend or settings.admission_lock
    if backend == "local":
        return LocalResourceLocks(timeout=settings.admission_lock_timeout_seconds)
    if backend == "redis":
        return RedisResourceLocks(timeout=settings.admission_lock_timeout_seconds)
    return ResourceLocks()
