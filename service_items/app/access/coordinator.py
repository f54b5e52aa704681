"""
Cache-aside read path for items.
"""

import asyncio
import uuid
from contextlib import nullcontext
from typing import Optional, Set, TYPE_CHECKING

from shared.logging import get_logger
from ..errors import AccessError, CacheError, ItemDecodeError, StoreError
from ..models import Item

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..cache.redis_cache import ItemCache
    from ..persistence.postgres import ItemStore
    from shared.metrics import MetricsCollector


DEFAULT_CACHE_TTL = 5


class AccessCoordinator:
    """Serve item lookups from the cache, falling back to the store.

    The cache is consulted strictly before the store. A store hit is
    written back to the cache in a detached task so the response never
    waits on the cache; a store miss is not cached. Cache failures are
    logged and treated as misses, store failures are raised as AccessError.
    """

    def __init__(
        self,
        store: "ItemStore",
        cache: "ItemCache",
        cache_name: str,
        ttl_seconds: int = DEFAULT_CACHE_TTL,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.cache = cache
        self.cache_name = cache_name
        self.ttl_seconds = ttl_seconds
        self.metrics = metrics
        self.logger = get_logger("items.access")
        self._pending_writes: Set[asyncio.Task] = set()

    @property
    def pending_writes(self) -> int:
        """Number of write-backs still in flight."""
        return len(self._pending_writes)

    async def get_item(self, item_id: uuid.UUID) -> Optional[Item]:
        """Look an item up by id; None when the store has no such row."""
        key = str(item_id)

        with self._time_lookup() as timing:
            cached = await self._read_cache(key)
            if cached is not None:
                self.logger.info("Cache HIT", item_id=key)
                timing["source"] = "cache"
                return cached

            self.logger.info("Cache MISS", item_id=key)
            try:
                item = await self.store.find_by_id(item_id)
            except StoreError as exc:
                self.logger.error("Store lookup failed", item_id=key, code=exc.code, error=exc.message)
                self._count("item_store_lookups_total", result="error")
                timing["source"] = "error"
                raise AccessError(exc, item_id=key) from exc

            if item is None:
                self._count("item_store_lookups_total", result="not_found")
                return None

            self._count("item_store_lookups_total", result="found")
            self._schedule_write_back(key, item)
            return item

    async def drain(self) -> None:
        """Wait for every in-flight write-back to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def close(self) -> None:
        """Abandon in-flight write-backs."""
        pending = list(self._pending_writes)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            self.logger.info("Abandoned pending cache writes", count=len(pending))

    async def _read_cache(self, key: str) -> Optional[Item]:
        try:
            value = await self.cache.get(self.cache_name, key)
        except CacheError as exc:
            self.logger.warning("Cache read failed, falling back to store", item_id=key, error=exc.message)
            self._count("item_cache_lookups_total", result="error")
            return None
        except Exception as exc:
            self.logger.error("Unexpected cache read failure, falling back to store", item_id=key, error=str(exc))
            self._count("item_cache_lookups_total", result="error")
            return None

        if value is None:
            self._count("item_cache_lookups_total", result="miss")
            return None

        try:
            item = Item.from_cache_value(value)
        except ItemDecodeError as exc:
            self.logger.warning("Discarding malformed cache entry", item_id=key, error=exc.message)
            self._count("item_cache_lookups_total", result="decode_error")
            return None

        if str(item.id) != key:
            self.logger.warning("Discarding cache entry for another id", item_id=key, cached_id=str(item.id))
            self._count("item_cache_lookups_total", result="decode_error")
            return None

        self._count("item_cache_lookups_total", result="hit")
        return item

    def _schedule_write_back(self, key: str, item: Item) -> None:
        task = asyncio.create_task(self._write_back(key, item), name=f"cache-write:{key}")
        self._pending_writes.add(task)
        task.add_done_callback(self._on_write_done)

    async def _write_back(self, key: str, item: Item) -> None:
        await self.cache.set(self.cache_name, key, item.to_cache_value(), self.ttl_seconds)
        self.logger.debug("Cache item set", item_id=key, ttl=self.ttl_seconds)

    def _on_write_done(self, task: asyncio.Task) -> None:
        self._pending_writes.discard(task)
        if task.cancelled():
            return

        exc = task.exception()
        if exc is None:
            self._count("item_cache_writes_total", result="ok")
            return

        self._count("item_cache_writes_total", result="error")
        if isinstance(exc, CacheError):
            self.logger.warning("Cache write failed", task=task.get_name(), error=exc.message)
        else:
            self.logger.error("Unexpected cache write failure", task=task.get_name(), error=str(exc))

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)

    def _time_lookup(self):
        if self.metrics:
            return self.metrics.time_operation("item_lookup_duration_seconds", source="store")
        return nullcontext({})
