"""Tests for the Redis session backend wrapper."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from session_tags.exceptions import SessionUnavailableError
from session_tags.services.redis_client import SESSION_KEY_PREFIX, RedisClient


@pytest.fixture
def redis_client() -> RedisClient:
    """RedisClient whose connection is an AsyncMock."""
    client = RedisClient("redis://localhost:6379/0")
    client._redis = AsyncMock()
    return client


@pytest.mark.asyncio
class TestLoadSession:
    """Tests for reading sessions."""

    async def test_unknown_session(self, redis_client: RedisClient) -> None:
        redis_client._redis.get.return_value = None
        assert await redis_client.load_session("abc", 60) is None
        redis_client._redis.expire.assert_not_called()

    async def test_existing_session_refreshes_ttl(self, redis_client: RedisClient) -> None:
        redis_client._redis.get.return_value = json.dumps({"sessiontags_params": {"quelle": "a"}})
        data = await redis_client.load_session("abc", 60)
        assert data == {"sessiontags_params": {"quelle": "a"}}
        redis_client._redis.get.assert_awaited_once_with(f"{SESSION_KEY_PREFIX}abc")
        redis_client._redis.expire.assert_awaited_once_with(f"{SESSION_KEY_PREFIX}abc", 60)

    async def test_corrupt_session_is_unknown(self, redis_client: RedisClient) -> None:
        redis_client._redis.get.return_value = "{not json"
        assert await redis_client.load_session("abc", 60) is None

    async def test_non_dict_session_is_unknown(self, redis_client: RedisClient) -> None:
        redis_client._redis.get.return_value = "[1, 2]"
        assert await redis_client.load_session("abc", 60) is None

    async def test_redis_error_raises(self, redis_client: RedisClient) -> None:
        redis_client._redis.get.side_effect = RedisConnectionError("refused")
        with pytest.raises(SessionUnavailableError):
            await redis_client.load_session("abc", 60)


@pytest.mark.asyncio
class TestSaveSession:
    """Tests for writing sessions."""

    async def test_setex_with_ttl(self, redis_client: RedisClient) -> None:
        await redis_client.save_session("abc", {"sessiontags_params": {"id": "7"}}, 120)
        redis_client._redis.setex.assert_awaited_once_with(
            f"{SESSION_KEY_PREFIX}abc", 120, json.dumps({"sessiontags_params": {"id": "7"}})
        )

    async def test_redis_error_raises(self, redis_client: RedisClient) -> None:
        redis_client._redis.setex.side_effect = RedisConnectionError("refused")
        with pytest.raises(SessionUnavailableError):
            await redis_client.save_session("abc", {}, 120)


class TestNotConnected:
    """Tests for use before connect()."""

    def test_raises_runtime_error(self) -> None:
        with pytest.raises(RuntimeError):
            RedisClient("redis://localhost:6379/0")._r
