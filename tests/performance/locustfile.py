"""
Load testing for the Items Service read path using Locust.

Known ids are read from the file named by ITEMS_LOCUST_IDS_FILE (one UUID
per line, e.g. exported with
`psql -Atc "SELECT id FROM cacheable_items LIMIT 1000"`). Repeated reads of
a small hot set exercise the cache; random UUIDs exercise the store miss
path.
"""

import os
import random
import uuid
from typing import List

from locust import HttpUser, task, between, events


def _load_known_ids() -> List[str]:
    path = os.getenv("ITEMS_LOCUST_IDS_FILE")
    if not path:
        return []
    with open(path) as handle:
        return [line.strip() for line in handle if line.strip()]


KNOWN_IDS = _load_known_ids()
HOT_SET_SIZE = 20


class ItemsReadUser(HttpUser):
    """Simulated client of GET /items."""

    wait_time = between(0.1, 0.5)
    host = "http://localhost:8020"

    @task(6)
    def read_hot_item(self):
        """Read from a small hot set; mostly cache hits within the TTL."""
        if not KNOWN_IDS:
            return
        item_id = random.choice(KNOWN_IDS[:HOT_SET_SIZE])
        self._read(item_id, name="/items [hot]")

    @task(3)
    def read_cold_item(self):
        """Read any seeded id; mostly store reads and write-backs."""
        if not KNOWN_IDS:
            return
        self._read(random.choice(KNOWN_IDS), name="/items [cold]")

    @task(1)
    def read_missing_item(self):
        """Read an id that does not exist; always a store miss."""
        with self.client.get("/items", params={"id": str(uuid.uuid4())},
                             name="/items [missing]", catch_response=True) as response:
            if response.status_code == 404:
                response.success()
            else:
                response.failure(f"Unexpected status code: {response.status_code}")

    def _read(self, item_id: str, name: str):
        with self.client.get("/items", params={"id": item_id}, name=name, catch_response=True) as response:
            if response.status_code == 200:
                if response.json().get("id") == item_id:
                    response.success()
                else:
                    response.failure("Response id does not match request")
            else:
                response.failure(f"Unexpected status code: {response.status_code}")


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    """Warn when there are no known ids to read."""
    if not KNOWN_IDS:
        print("ITEMS_LOCUST_IDS_FILE not set; only the missing-item task will issue requests")
