"""
In-memory doubles for the store and cache gateways.
"""

import asyncio
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from service_items.app.errors import CacheError, StoreConflictError, StoreError
from service_items.app.models import Item


class ManualClock:
    """Clock advanced explicitly by tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryItemStore:
    """Store double with call counters and injectable failures."""

    def __init__(self, reject: Optional[Callable[[int, Item], Optional[StoreError]]] = None):
        self.rows: Dict[uuid.UUID, Item] = {}
        self.reject = reject
        self.insert_calls = 0
        self.find_calls = 0
        self.find_error: Optional[StoreError] = None
        self.find_delay = 0.0
        self.healthy = True

    async def insert(self, item: Item) -> None:
        self.insert_calls += 1
        call_number = self.insert_calls
        await asyncio.sleep(0)
        if self.reject is not None:
            error = self.reject(call_number, item)
            if error is not None:
                raise error
        if item.id in self.rows:
            raise StoreConflictError(details={"item_id": str(item.id)})
        self.rows[item.id] = item

    async def find_by_id(self, item_id: uuid.UUID) -> Optional[Item]:
        self.find_calls += 1
        if self.find_delay:
            await asyncio.sleep(self.find_delay)
        else:
            await asyncio.sleep(0)
        if self.find_error is not None:
            raise self.find_error
        return self.rows.get(item_id)

    async def health_check(self) -> bool:
        return self.healthy


class InMemoryItemCache:
    """Cache double honouring TTLs against an injectable clock."""

    def __init__(self, clock: Optional[ManualClock] = None):
        self.clock = clock or ManualClock()
        self.entries: Dict[Tuple[str, str], Tuple[str, float]] = {}
        self.get_calls = 0
        self.set_calls: List[Tuple[str, str, str, int]] = []
        self.fail_gets = False
        self.fail_sets = False
        self.healthy = True

    async def get(self, namespace: str, key: str) -> Optional[str]:
        self.get_calls += 1
        await asyncio.sleep(0)
        if self.fail_gets:
            raise CacheError("cache down", {"operation": "get"})
        entry = self.entries.get((namespace, key))
        if entry is None:
            return None
        value, expires_at = entry
        if self.clock() >= expires_at:
            del self.entries[(namespace, key)]
            return None
        return value

    async def set(self, namespace: str, key: str, value: str, ttl: int) -> None:
        self.set_calls.append((namespace, key, value, ttl))
        await asyncio.sleep(0)
        if self.fail_sets:
            raise CacheError("cache down", {"operation": "set"})
        self.entries[(namespace, key)] = (value, self.clock() + ttl)

    def put_raw(self, namespace: str, key: str, value: str, ttl: int = 60) -> None:
        self.entries[(namespace, key)] = (value, self.clock() + ttl)

    def has(self, namespace: str, key: str) -> bool:
        entry = self.entries.get((namespace, key))
        return entry is not None and self.clock() < entry[1]

    async def health_check(self) -> bool:
        return self.healthy


def make_item(first_name: str = "Ada", last_name: str = "Lovelace") -> Item:
    """Build an item with fixed names and a fresh id."""
    return Item(first_name=first_name, last_name=last_name)
