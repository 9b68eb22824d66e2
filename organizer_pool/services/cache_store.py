# organizer_pool/services/cache_store.py
"""
Durable cache store used by the organizer pool.
The pool only depends on the CacheStore protocol; RedisCacheStore is the
production implementation on top of the pooled Redis client.
"""

from typing import Protocol

from organizer_pool.infrastructure.observability.logging import get_logger
from organizer_pool.services.redis_client import FastRedisClient, fast_redis

logger = get_logger(__name__)


class CacheStore(Protocol):
    """Key-value store with per-key TTL. TTL eviction is best-effort."""

    async def get(self, key: str) -> str | None: ...

    async def put(self, key: str, value: str, ttl_s: int) -> None: ...

    async def delete(self, key: str) -> None: ...


class RedisCacheStore:
    """CacheStore backed by Redis."""

    def __init__(self, client: FastRedisClient | None = None):
        self._client = client or fast_redis

    async def get(self, key: str) -> str | None:
        return await self._client.get(key)

    async def put(self, key: str, value: str, ttl_s: int) -> None:
        stored = await self._client.set_with_ttl(key, value, ttl_s)
        if not stored:
            logger.warning("Cache write was not acknowledged", key=key[:60], ttl_s=ttl_s)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def ping(self) -> bool:
        return await self._client.ping()

    async def health_check(self) -> dict:
        """Ping plus a set/get/delete round trip."""
        try:
            ping_success = await self.ping()

            if not ping_success:
                return {
                    "healthy": False,
                    "ping": False,
                    "error": "Redis ping failed",
                    "service": "cache_store",
                }

            test_key = "health_check_test"
            test_value = "test_value_123"

            set_success = await self._client.set_with_ttl(test_key, test_value, 10)
            get_result = await self.get(test_key) if set_success else None
            get_success = get_result == test_value

            if set_success:
                await self.delete(test_key)

            return {
                "healthy": set_success and get_success,
                "ping": ping_success,
                "set_get_operations": set_success and get_success,
                "service": "cache_store",
            }

        except Exception as e:
            logger.error("Cache store health check failed", error=str(e))
            return {
                "healthy": False,
                "error": f"{type(e).__name__}: {e}",
                "service": "cache_store",
            }


cache_store = RedisCacheStore()
