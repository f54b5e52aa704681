"""
Redis cache gateway for the Items Service.
"""

import asyncio
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.logging import get_logger
from shared.tracing import trace_operation
from ..errors import CacheError


class ItemCache:
    """Namespaced get/set-with-TTL over an injected redis client.

    A miss is reported as None; CacheError is reserved for transport, auth
    and timeout failures. Every failure feeds a circuit breaker so a dead
    cache fails fast instead of costing each request a full timeout.
    """

    def __init__(
        self,
        client: redis.Redis,
        timeout: float = 1.0,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.client = client
        self.timeout = timeout
        self.breaker = breaker or CircuitBreaker(failure_threshold=5, recovery_timeout=30.0, name="cache")
        self.logger = get_logger("items.cache.redis")

    @staticmethod
    def make_key(namespace: str, key: str) -> str:
        """Physical redis key for a namespaced entry."""
        return f"{namespace}:{key}"

    async def get(self, namespace: str, key: str) -> Optional[str]:
        """Return the cached value or None on a miss."""
        cache_key = self.make_key(namespace, key)
        with trace_operation("cache.get", cache_key=cache_key):
            value = await self._call("get", self.client.get, cache_key)

        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        return value

    async def set(self, namespace: str, key: str, value: str, ttl: int) -> None:
        """Store a value that the cache expires after ttl seconds."""
        cache_key = self.make_key(namespace, key)
        with trace_operation("cache.set", cache_key=cache_key, ttl=ttl):
            await self._call("set", self.client.set, cache_key, value, ex=ttl)

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await asyncio.wait_for(self.client.ping(), self.timeout)
            return True
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            self.logger.warning("Cache health check failed", error=str(exc))
            return False

    async def _call(self, operation: str, func, *args, **kwargs):
        try:
            return await self.breaker.call(self._with_timeout, func, *args, **kwargs)
        except CircuitBreakerOpenException as exc:
            raise CacheError("Cache circuit open", {"operation": operation}) from exc
        except (RedisError, OSError, asyncio.TimeoutError) as exc:
            raise CacheError(str(exc) or type(exc).__name__, {"operation": operation}) from exc

    async def _with_timeout(self, func, *args, **kwargs):
        return await asyncio.wait_for(func(*args, **kwargs), self.timeout)
