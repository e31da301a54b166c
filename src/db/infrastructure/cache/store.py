"""Key-value cache store backed by Redis.

The store plays two roles: it caches the tenant allow-list and it holds
per-e-mail login-attempt counters. It has no transaction concept and is
treated as best-effort by callers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from redis.asyncio import Redis

from infrastructure.observability.probes import CacheProbe, DefaultCacheProbe

if TYPE_CHECKING:
    from infrastructure.settings import RedisSettings


def create_redis_client(settings: RedisSettings) -> Redis:
    """Create an async Redis client that decodes values to str."""
    password = settings.password.get_secret_value() if settings.password else None
    return Redis(
        host=settings.host,
        port=settings.port,
        db=settings.db,
        password=password,
        decode_responses=True,
    )


class CacheStore:
    """Thin async facade over the Redis commands the toolchain needs."""

    def __init__(self, client: Redis, probe: CacheProbe | None = None) -> None:
        self._client = client
        self._probe = probe or DefaultCacheProbe()

    async def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None."""
        return await self._client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Store ``value`` under ``key``, optionally expiring."""
        await self._client.set(key, value, ex=ttl_seconds)

    async def increment(self, key: str) -> int:
        """Increment an integer counter, creating it at 1."""
        return await self._client.incr(key)

    async def expire(self, key: str, ttl_seconds: int) -> None:
        """Set the time-to-live of ``key``."""
        await self._client.expire(key, ttl_seconds)

    async def delete(self, key: str) -> None:
        """Delete ``key``; deleting a missing key is not an error."""
        await self._client.delete(key)
        self._probe.cache_key_deleted(key)

    async def flush_all(self) -> None:
        """Delete every key of the configured logical database."""
        await self._client.flushdb()
        self._probe.cache_flushed()

    async def close(self) -> None:
        """Release the client's connections."""
        await self._client.aclose()
