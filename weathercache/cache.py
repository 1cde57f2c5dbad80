"""Cache stores: Redis for deployments, an in-process dict for local runs.

Both expose the same async surface:

* ``get(key)`` returns the stored string, or ``None`` on a clean miss.
  Any other problem raises ``StoreUnavailableError``; a store outage is
  never reported as a miss.
* ``set(key, value, ttl)`` overwrites unconditionally and resets the
  expiry. Failures raise ``StoreWriteError``.
* ``ping()`` / ``connect()`` / ``close()`` for lifecycle and health checks.
"""
from __future__ import annotations

import logging
import time
from typing import Callable

import redis.asyncio as redis
from pydantic import BaseModel
from redis.exceptions import RedisError

from weathercache.errors import StoreUnavailableError, StoreWriteError

log = logging.getLogger(__name__)


class CacheEntry(BaseModel):
    """Typed snapshot for a single cache key."""

    value: str
    stored_at: float
    expires_at: float

    def expired(self, now: float) -> bool:
        return now >= self.expires_at


class MemoryStore:
    """In-memory TTL store for a single-worker async app.

    Expired entries are dropped lazily on read. ``clock`` defaults to
    ``time.monotonic`` and can be swapped for a fake in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, CacheEntry] = {}
        self._clock = clock

    async def connect(self) -> None:
        log.info("Using in-memory cache store")

    async def close(self) -> None:
        self._store.clear()

    async def ping(self) -> bool:
        return True

    async def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.expired(self._clock()):
            del self._store[key]
            return None
        return entry.value

    async def set(self, key: str, value: str, ttl: int) -> None:
        now = self._clock()
        self._store[key] = CacheEntry(value=value, stored_at=now, expires_at=now + ttl)


class RedisStore:
    """Redis-backed store. Expiry is delegated to Redis (``SET ... EX``)."""

    def __init__(
        self,
        url: str,
        prefix: str = "",
        timeout: float = 2.0,
        client: redis.Redis | None = None,
    ) -> None:
        self.url = url
        self.prefix = prefix
        self._redis = client or redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=timeout,
            socket_timeout=timeout,
            health_check_interval=30,
        )

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def connect(self) -> None:
        """Ping once; raise ``StoreUnavailableError`` if Redis is unreachable."""
        try:
            await self._redis.ping()
        except (RedisError, OSError) as e:
            raise StoreUnavailableError(f"Could not connect to Redis: {e}") from e
        log.info("Redis cache store connected")

    async def close(self) -> None:
        await self._redis.aclose()
        log.info("Redis cache store closed")

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as e:
            log.warning("Redis ping failed: %s", e)
            return False

    async def get(self, key: str) -> str | None:
        try:
            return await self._redis.get(self._key(key))
        except (RedisError, OSError, UnicodeDecodeError) as e:
            raise StoreUnavailableError(f"Redis GET failed: {e}") from e

    async def set(self, key: str, value: str, ttl: int) -> None:
        try:
            await self._redis.set(self._key(key), value, ex=ttl)
        except (RedisError, OSError) as e:
            raise StoreWriteError(f"Redis SET failed: {e}") from e
