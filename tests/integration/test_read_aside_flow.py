"""
End-to-end tests for the seed-then-read flow.
"""

import asyncio
import random

import pytest
from fastapi.testclient import TestClient

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.config import get_config
from service_items.app.access.coordinator import AccessCoordinator
from service_items.app.loader import BulkLoader
from service_items.app.main import ItemsService
from service_items.tests.fakes import InMemoryItemCache, InMemoryItemStore, ManualClock


class TestReadAsideFlow:
    """Seed items with the bulk loader, then read them back."""

    @pytest.fixture
    def clock(self):
        return ManualClock()

    @pytest.fixture
    def store(self):
        return InMemoryItemStore()

    @pytest.fixture
    def cache(self, clock):
        return InMemoryItemCache(clock)

    @pytest.mark.asyncio
    async def test_every_seeded_item_reads_back(self, store, cache, clock):
        """Items inserted by the loader come back identical via store or cache."""
        summary = await BulkLoader(store).load(worker_count=5, items_per_worker=10)
        assert summary.inserted == 50

        coordinator = AccessCoordinator(store, cache, "CacheableTable", 5)
        seeded = list(store.rows.values())

        for item in seeded:
            result = await coordinator.get_item(item.id)
            assert (result.id, result.first_name, result.last_name) == (item.id, item.first_name, item.last_name)
        await coordinator.drain()
        assert store.find_calls == 50

        # Second pass is served entirely from the cache
        for item in random.sample(seeded, 10):
            assert await coordinator.get_item(item.id) == item
        assert store.find_calls == 50

        # After expiry every lookup goes back to the store
        clock.advance(5)
        for item in seeded[:5]:
            assert await coordinator.get_item(item.id) == item
        await coordinator.drain()
        assert store.find_calls == 55

    @pytest.mark.asyncio
    async def test_concurrent_reads_while_cache_is_down(self, store, cache):
        """A dead cache leaves concurrent reads correct and error free."""
        await BulkLoader(store).load(worker_count=2, items_per_worker=10)
        cache.fail_gets = True
        cache.fail_sets = True
        coordinator = AccessCoordinator(store, cache, "CacheableTable", 5)

        items = list(store.rows.values())
        results = await asyncio.gather(*[coordinator.get_item(item.id) for item in items])
        await coordinator.drain()

        assert results == items
        assert store.find_calls == len(items)

    def test_http_reads_after_seeding(self, store, cache):
        """Items seeded into the store are served over HTTP."""
        asyncio.run(BulkLoader(store).load(worker_count=3, items_per_worker=3))
        service = ItemsService(get_config("items", 8020), store=store, cache=cache)

        with TestClient(service.app) as client:
            for item in store.rows.values():
                response = client.get("/items", params={"id": str(item.id)})
                assert response.status_code == 200
                data = response.json()
                assert data["id"] == str(item.id)
                assert data["first_name"] == item.first_name
                assert data["last_name"] == item.last_name
