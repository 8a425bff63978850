# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the Redis counter client."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from gymstudio.core.config import Settings
from gymstudio.infrastructure.cache import RedisClient, RedisError, get_redis


@pytest.fixture
def client() -> RedisClient:
    """Create a client wired to a mock connection."""
    client = RedisClient(Settings())
    client._redis = AsyncMock()
    return client


class TestCountHit:
    """Tests for RedisClient.count_hit."""

    @pytest.mark.asyncio
    async def test_first_hit_starts_window(self, client):
        """Test the first hit sets the counter expiry."""
        client._redis.incr.return_value = 1

        assert await client.count_hit("k", 900) == 1

        client._redis.expire.assert_awaited_once_with("k", 900)

    @pytest.mark.asyncio
    async def test_later_hits_keep_window(self, client):
        """Test later hits do not push the expiry back."""
        client._redis.incr.return_value = 2

        assert await client.count_hit("k", 900) == 2

        client._redis.expire.assert_not_called()

    @pytest.mark.asyncio
    async def test_failure_wrapped(self, client):
        """Test redis-py errors surface as RedisError."""
        client._redis.incr.side_effect = RedisConnectionError("refused")

        with pytest.raises(RedisError):
            await client.count_hit("k", 900)

    @pytest.mark.asyncio
    async def test_not_connected(self):
        """Test counting before connect fails."""
        with pytest.raises(RedisError):
            await RedisClient(Settings()).count_hit("k", 900)


class TestPing:
    """Tests for RedisClient.ping."""

    @pytest.mark.asyncio
    async def test_unreachable(self, client):
        """Test a failed ping reports False."""
        client._redis.ping.side_effect = RedisConnectionError("refused")

        assert await client.ping() is False

    @pytest.mark.asyncio
    async def test_not_connected(self):
        """Test an unconnected client reports False."""
        assert await RedisClient(Settings()).ping() is False


def test_get_redis_requires_init():
    """Test the global client must be initialized first."""
    with pytest.raises(RedisError):
        get_redis()
