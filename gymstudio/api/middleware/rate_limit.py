# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting.

Two mechanisms live here:

- A slowapi ``Limiter`` for per-route decorator limits such as login.
- A ``RateLimiter`` abstraction for enrollment submissions, injected into
  the endpoint so it can be backed by process memory on a single instance
  or by Redis when the API is scaled out.

Example:
    >>> limiter = InMemoryRateLimiter(max_requests=3, window_seconds=900)
    >>> await limiter.check("ip:203.0.113.7")
    True
"""

import asyncio
import logging
import time
from collections import deque
from typing import Callable, Protocol

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from gymstudio.core.config import Settings, get_settings
from gymstudio.infrastructure.cache import RedisClient, get_redis

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Uses user ID if authenticated, otherwise the IP address.
    """
    user = getattr(request.state, "user", None)
    if user:
        return f"user:{user.id}"
    return f"ip:{get_remote_address(request)}"


def get_ip_only(request: Request) -> str:
    """Get the client IP address only.

    Used for public endpoints where the caller is not authenticated.
    """
    return get_remote_address(request)


settings = get_settings()
limiter = Limiter(
    key_func=get_client_identifier,
    default_limits=[f"{settings.rate_limit.requests_per_minute}/minute"],
    storage_uri=settings.rate_limit.storage_uri,
)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Return 429 Too Many Requests with retry information."""
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    return Response(
        content='{"detail": "Too many requests. Please try again later."}',
        status_code=429,
        media_type="application/json",
        headers={"Retry-After": str(getattr(exc, "retry_after", 60))},
    )


# Common rate limit configurations
RATE_LIMIT_AUTH = "20/minute"  # Login and registration attempts


class RateLimiter(Protocol):
    """Admission check for a client key."""

    window_seconds: int

    async def check(self, client_key: str) -> bool:
        """Record a request and report whether it is allowed."""
        ...


class InMemoryRateLimiter:
    """Sliding-window limiter held in process memory.

    Each key keeps the timestamps of its admitted requests inside the
    window. Refused requests are not recorded. Keys whose window has
    emptied are dropped on the next check.

    Attributes:
        max_requests: Requests admitted per key per window.
        window_seconds: Window length.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()

    async def check(self, client_key: str) -> bool:
        now = self._clock()
        async with self._lock:
            self._prune(now)
            hits = self._hits.setdefault(client_key, deque())
            if len(hits) >= self.max_requests:
                return False
            hits.append(now)
            return True

    def _prune(self, now: float) -> None:
        cutoff = now - self.window_seconds
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def __len__(self) -> int:
        return len(self._hits)


class RedisRateLimiter:
    """Fixed-window limiter shared through Redis.

    Refused requests still count, so a client hammering the endpoint stays
    blocked until its window expires.

    Raises:
        RedisError: From ``check`` if Redis is unreachable.
    """

    def __init__(
        self,
        redis: RedisClient,
        max_requests: int,
        window_seconds: int,
        prefix: str = "ratelimit:enrollment",
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._redis = redis
        self._prefix = prefix

    async def check(self, client_key: str) -> bool:
        key = f"{self._prefix}:{client_key}"
        hits = await self._redis.count_hit(key, self.window_seconds)
        return hits <= self.max_requests


def build_rate_limiter(
    settings: Settings,
    redis: RedisClient | None = None,
) -> RateLimiter:
    """Build the enrollment submission limiter for the configured backend.

    Args:
        settings: Application settings.
        redis: Connected client for the redis backend. Defaults to the
            global client.
    """
    config = settings.rate_limit
    if config.backend == "redis":
        logger.info("Using Redis enrollment rate limiter")
        return RedisRateLimiter(
            redis or get_redis(),
            max_requests=config.enrollment_max_requests,
            window_seconds=config.enrollment_window_seconds,
        )
    return InMemoryRateLimiter(
        max_requests=config.enrollment_max_requests,
        window_seconds=config.enrollment_window_seconds,
    )
