"""Custom middleware for the application."""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

import redis.asyncio as redis

from slotbook.config import settings
from slotbook.core.exceptions import RateLimitExceeded

logger = logging.getLogger(__name__)

SLOW_REQUEST_SECONDS = 1.0


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and response times."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Log request details and timing.

        Args:
            request: Incoming request
            call_next: Next middleware/route handler

        Returns:
            Response: Route response
        """
        start_time = time.time()

        # Add request ID
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        if duration > SLOW_REQUEST_SECONDS:
            logger.warning(
                f"SLOW REQUEST: {request.method} {request.url.path} took {duration:.3f}s "
                f"(request_id={request_id})"
            )
        else:
            logger.debug(
                f"{request.method} {request.url.path} -> {response.status_code} "
                f"in {duration:.3f}s (request_id={request_id})"
            )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RateLimiter:
    """Per-caller rate limiter for specific endpoints using dependency injection."""

    def __init__(
        self,
        requests_per_minute: int = 10,
        key_prefix: str = "api",
    ):
        """Initialize rate limiter.

        Args:
            requests_per_minute: Max requests allowed
            key_prefix: Redis key prefix
        """
        self.requests_per_minute = requests_per_minute
        self.key_prefix = key_prefix
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    async def __call__(self, request: Request) -> None:
        """Check rate limit for request.

        Args:
            request: Incoming request

        Raises:
            RateLimitExceeded: If rate limit exceeded
        """
        try:
            redis_client = await self.get_redis()

            # Prefer the authenticated caller over the client address
            client_id = request.client.host if request.client else "unknown"
            if hasattr(request.state, "user_id"):
                client_id = str(request.state.user_id)

            key = f"rate:{self.key_prefix}:{client_id}"
            now_ns = time.time_ns()
            window_start = now_ns - 60 * 1_000_000_000

            async with redis_client.pipeline(transaction=True) as pipe:
                await pipe.zremrangebyscore(key, 0, window_start)
                await pipe.zcard(key)
                await pipe.zadd(key, {str(now_ns): now_ns})
                await pipe.expire(key, 60)
                results = await pipe.execute()

            if results[1] >= self.requests_per_minute:
                raise RateLimitExceeded()

        except redis.RedisError as e:
            # Allow request if Redis is unavailable
            logger.warning(f"Rate limiter unavailable, allowing request: {e}")


booking_limiter = RateLimiter(
    requests_per_minute=settings.booking_rate_limit_per_minute,
    key_prefix="booking",
)
