"""Async Redis client wrapper holding visitor sessions."""

from __future__ import annotations

import json
from typing import Any

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError

from session_tags.exceptions import SessionUnavailableError

logger = structlog.get_logger(__name__)

SESSION_KEY_PREFIX = "sessiontags:session:"


class RedisClient:
    """Thin wrapper around ``redis.asyncio.Redis`` storing sessions as JSON.

    Args:
        url: Redis connection URL, e.g. ``"redis://localhost:6379/0"``.
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._redis: Redis | None = None

    async def connect(self) -> None:
        """Open the connection pool."""
        self._redis = Redis.from_url(self._url, decode_responses=True)
        logger.info("redis.connected", url=self._url)

    async def disconnect(self) -> None:
        """Close the connection pool gracefully."""
        if self._redis:
            await self._redis.aclose()
            logger.info("redis.disconnected")

    @property
    def _r(self) -> Redis:
        if self._redis is None:
            raise RuntimeError("RedisClient not connected; call connect() first.")
        return self._redis

    async def ping(self) -> bool:
        """Return True if Redis responds to PING."""
        return await self._r.ping()

    # ------------------------------------------------------------------
    # Session helpers
    # ------------------------------------------------------------------

    async def load_session(self, session_id: str, ttl_seconds: int) -> dict[str, Any] | None:
        """Fetch the session dict for *session_id* and refresh its TTL.

        Args:
            session_id:  Opaque id from the session cookie.
            ttl_seconds: Sliding expiry applied on every access.

        Returns:
            The stored dict, or ``None`` for unknown or corrupt sessions so
            the caller can issue a fresh id.

        Raises:
            SessionUnavailableError: If Redis cannot be reached.
        """
        key = f"{SESSION_KEY_PREFIX}{session_id}"
        try:
            raw = await self._r.get(key)
            if raw is None:
                return None
            await self._r.expire(key, ttl_seconds)
        except RedisError as exc:
            logger.error("redis.session_load_error", error=str(exc))
            raise SessionUnavailableError("session backend unavailable") from exc

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("redis.session_corrupt", session=session_id[:8])
            return None
        return data if isinstance(data, dict) else None

    async def save_session(self, session_id: str, data: dict[str, Any], ttl_seconds: int) -> None:
        """Store the session dict with a TTL.

        Raises:
            SessionUnavailableError: If Redis rejects the write.
        """
        try:
            await self._r.setex(f"{SESSION_KEY_PREFIX}{session_id}", ttl_seconds, json.dumps(data))
        except RedisError as exc:
            logger.error("redis.session_save_error", error=str(exc))
            raise SessionUnavailableError("session backend unavailable") from exc
