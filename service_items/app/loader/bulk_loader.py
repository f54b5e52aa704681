"""
Concurrent bulk loader that seeds the items table with synthetic rows.
"""

import asyncio
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from shared.errors import ValidationError
from shared.logging import get_logger
from ..errors import StoreConflictError, StoreError
from ..models import Item

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..persistence.postgres import ItemStore
    from shared.metrics import MetricsCollector


DEFAULT_WORKERS = 100
DEFAULT_ITEMS_PER_WORKER = 1000


@dataclass
class WorkerResult:
    """Outcome counts for one worker's batch."""
    worker_id: int
    attempted: int = 0
    inserted: int = 0
    conflicts: int = 0
    failures: int = 0


@dataclass
class LoadSummary:
    """Aggregate outcome of a bulk load."""
    workers: int
    items_per_worker: int
    attempted: int = 0
    inserted: int = 0
    conflicts: int = 0
    failures: int = 0
    duration_seconds: float = 0.0
    worker_results: List[WorkerResult] = field(default_factory=list)

    @property
    def rejected(self) -> int:
        return self.conflicts + self.failures

    def to_dict(self, include_workers: bool = False) -> Dict[str, Any]:
        data = asdict(self)
        if not include_workers:
            data.pop("worker_results")
        return data


class BulkLoader:
    """Insert generated items through one shared store gateway.

    Workers run concurrently; within a worker inserts are sequential and
    in generation order. A failed insert is logged and counted, and the
    worker moves on to its next item, so one bad row never stops a worker
    and one worker never stops another.
    """

    def __init__(
        self,
        store: "ItemStore",
        item_factory: Callable[[], Item] = Item.generate,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.store = store
        self.item_factory = item_factory
        self.metrics = metrics
        self.logger = get_logger("items.loader")

    async def load(
        self,
        worker_count: int = DEFAULT_WORKERS,
        items_per_worker: int = DEFAULT_ITEMS_PER_WORKER,
    ) -> LoadSummary:
        """Run all workers to completion and return the aggregate counts."""
        if worker_count < 1:
            raise ValidationError("worker_count must be at least 1", {"worker_count": worker_count})
        if items_per_worker < 0:
            raise ValidationError("items_per_worker must not be negative", {"items_per_worker": items_per_worker})

        self.logger.info("Bulk load started", workers=worker_count, items_per_worker=items_per_worker)
        start_time = time.time()

        tasks = [
            asyncio.create_task(self._run_worker(worker_id, items_per_worker), name=f"loader-worker:{worker_id}")
            for worker_id in range(worker_count)
        ]
        results = await asyncio.gather(*tasks)

        summary = LoadSummary(workers=worker_count, items_per_worker=items_per_worker, worker_results=list(results))
        for result in results:
            summary.attempted += result.attempted
            summary.inserted += result.inserted
            summary.conflicts += result.conflicts
            summary.failures += result.failures
        summary.duration_seconds = round(time.time() - start_time, 3)

        self.logger.info(
            "Bulk load finished",
            attempted=summary.attempted,
            inserted=summary.inserted,
            conflicts=summary.conflicts,
            failures=summary.failures,
            duration_seconds=summary.duration_seconds
        )
        return summary

    async def _run_worker(self, worker_id: int, items_per_worker: int) -> WorkerResult:
        result = WorkerResult(worker_id=worker_id)

        for _ in range(items_per_worker):
            result.attempted += 1
            try:
                item = self.item_factory()
                await self.store.insert(item)
            except StoreConflictError as exc:
                result.conflicts += 1
                self._count("conflict")
                self.logger.warning("Duplicate item skipped", worker_id=worker_id, error=exc.message)
                continue
            except StoreError as exc:
                result.failures += 1
                self._count("failed")
                self.logger.error("Error saving item", worker_id=worker_id, code=exc.code, error=exc.message)
                continue
            except Exception as exc:
                result.failures += 1
                self._count("failed")
                self.logger.error("Unexpected error saving item", worker_id=worker_id, error=str(exc))
                continue

            result.inserted += 1
            self._count("inserted")
            self.logger.debug("Item saved", worker_id=worker_id, item_id=str(item.id))

        return result

    def _count(self, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("item_inserts_total", outcome=outcome)
