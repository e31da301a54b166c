"""Cache store infrastructure."""

from infrastructure.cache.store import CacheStore, create_redis_client

__all__ = [
    "CacheStore",
    "create_redis_client",
]
