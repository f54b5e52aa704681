"""
Items service for the Read-Aside stack.
"""

import uuid
from typing import Dict, Optional, TYPE_CHECKING

from fastapi import Query, Response

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ExternalServiceError, ValidationError
from shared.circuit_breaker import CircuitBreaker
from .access.coordinator import AccessCoordinator
from .cache.redis_cache import ItemCache
from .connections import create_cache_client, create_store_pool
from .errors import ItemNotFoundError
from .persistence.postgres import ItemStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    import asyncpg
    import redis.asyncio as redis


SERVICE_NAME = "items"
SERVICE_PORT = 8020


class ItemsService(BaseService):
    """HTTP front for the cache-aside item lookup.

    Store and cache gateways may be injected (tests, embedding); otherwise
    they are built from configuration when the application starts.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        store: Optional[ItemStore] = None,
        cache: Optional[ItemCache] = None,
    ):
        super().__init__(SERVICE_NAME, SERVICE_PORT, config)

        self.store = store
        self.cache = cache
        self.coordinator: Optional[AccessCoordinator] = None
        self._pool: Optional["asyncpg.Pool"] = None
        self._cache_client: Optional["redis.Redis"] = None

        if store is not None and cache is not None:
            self.coordinator = self._build_coordinator()

        self._setup_items_routes()

    def _build_coordinator(self) -> AccessCoordinator:
        return AccessCoordinator(
            self.store,
            self.cache,
            self.config.cache_name,
            self.config.cache_ttl_seconds,
            metrics=self.metrics,
        )

    def _setup_items_routes(self):
        """Set up item routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": SERVICE_NAME,
                "message": "Read-Aside - Items Service",
                "version": "1.0.0",
                "capabilities": ["cache_aside_read"]
            }

        @self.app.get("/items")
        async def get_item(id: Optional[str] = Query(default=None, description="Item id (UUID)")):
            """Fetch an item, cache first, store on a miss."""
            item_id = self._parse_item_id(id)

            if self.coordinator is None:
                raise ExternalServiceError("SERVICE_NOT_READY", SERVICE_NAME, "Service is not started")

            item = await self.coordinator.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(str(item_id))

            return Response(content=item.model_dump_json(), media_type="application/json")

    @staticmethod
    def _parse_item_id(raw_id: Optional[str]) -> uuid.UUID:
        if not raw_id:
            raise ValidationError("Query parameter 'id' is required")
        try:
            return uuid.UUID(raw_id)
        except ValueError:
            raise ValidationError("Query parameter 'id' must be a UUID", {"id": raw_id})

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check items service dependencies."""
        dependencies = {}

        if self.cache is not None:
            dependencies["redis"] = "ok" if await self.cache.health_check() else "error"
        else:
            dependencies["redis"] = "not_started"

        if self.store is not None:
            dependencies["postgres"] = "ok" if await self.store.health_check() else "error"
        else:
            dependencies["postgres"] = "not_started"

        return dependencies

    async def start(self):
        """Open connections that were not injected."""
        if self.store is None:
            self._pool = await create_store_pool(self.config)
            self.store = ItemStore(self._pool, timeout=self.config.store_timeout_seconds)

        if self.cache is None:
            self._cache_client = create_cache_client(self.config)
            self.cache = ItemCache(
                self._cache_client,
                timeout=self.config.cache_timeout_seconds,
                breaker=CircuitBreaker(
                    failure_threshold=self.config.cache_failure_threshold,
                    recovery_timeout=self.config.cache_recovery_timeout_seconds,
                    name="cache",
                ),
            )

        if self.coordinator is None:
            self.coordinator = self._build_coordinator()

        self.logger.info("Items service started", cache_name=self.config.cache_name,
                         cache_ttl_seconds=self.config.cache_ttl_seconds)

    async def stop(self):
        """Abandon pending cache writes and close owned connections."""
        if self.coordinator is not None:
            await self.coordinator.close()

        if self._cache_client is not None:
            await self._cache_client.aclose()
            self._cache_client = None
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

        self.logger.info("Items service stopped")


def create_app():
    """Create items service application."""
    service = ItemsService()
    return service.app


if __name__ == "__main__":
    service = ItemsService()
    service.run()
