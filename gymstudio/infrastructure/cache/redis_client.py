# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Redis access for counters shared between API workers.

Only the enrollment submission limiter uses Redis, so the client exposes
window counters and a health ping rather than a general cache API.

Example:
    from gymstudio.infrastructure.cache import init_redis

    counters = await init_redis(settings)
    hits = await counters.count_hit("ratelimit:enrollment:ip:203.0.113.7", 900)
"""

import logging
from typing import TYPE_CHECKING, Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError as BaseRedisError

if TYPE_CHECKING:
    from gymstudio.core.config.settings import Settings

logger = logging.getLogger(__name__)

_client: Optional["RedisClient"] = None


class RedisError(Exception):
    """Raised when Redis cannot be reached or a command fails.

    Attributes:
        message: What was being attempted.
        original_error: The redis-py error, if any.
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class RedisClient:
    """Pooled redis-py connection holding expiring hit counters."""

    def __init__(self, settings: "Settings") -> None:
        self._url = settings.redis.url
        self._max_connections = settings.redis.max_connections
        self._pool: Optional[ConnectionPool] = None
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Open the pool and verify the server answers.

        Raises:
            RedisError: If the server is unreachable.
        """
        self._pool = ConnectionPool.from_url(
            self._url,
            max_connections=self._max_connections,
            decode_responses=True,
        )
        self._redis = Redis(connection_pool=self._pool)
        try:
            await self._redis.ping()
        except BaseRedisError as e:
            await self.close()
            raise RedisError("Failed to connect to Redis", e) from e

    async def close(self) -> None:
        """Release the connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    async def count_hit(self, key: str, window_seconds: int) -> int:
        """Record one hit on a window counter.

        The first hit creates the counter and starts its expiry, so the
        count resets once the window has elapsed.

        Args:
            key: Counter key.
            window_seconds: Lifetime of a new counter.

        Returns:
            Hits recorded in the current window, this one included.

        Raises:
            RedisError: If Redis is unavailable.
        """
        if self._redis is None:
            raise RedisError("Redis client not connected")
        try:
            hits = int(await self._redis.incr(key))
            if hits == 1:
                await self._redis.expire(key, window_seconds)
        except BaseRedisError as e:
            raise RedisError(f"Failed to count hit on {key}", e) from e
        return hits

    async def ping(self) -> bool:
        """Check whether Redis answers."""
        if self._redis is None:
            return False
        try:
            return bool(await self._redis.ping())
        except BaseRedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False


async def init_redis(settings: "Settings") -> RedisClient:
    """Connect the process-wide client.

    Raises:
        RedisError: If the server is unreachable.
    """
    global _client

    client = RedisClient(settings)
    await client.connect()
    _client = client
    logger.info("Connected to Redis at %s", settings.redis.host)
    return client


async def close_redis() -> None:
    """Close the process-wide client, if any."""
    global _client

    if _client is not None:
        await _client.close()
        _client = None


def get_redis() -> RedisClient:
    """Get the process-wide client.

    Raises:
        RedisError: If ``init_redis`` has not run.
    """
    if _client is None:
        raise RedisError("Redis not initialized")
    return _client
