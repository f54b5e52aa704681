#!/usr/bin/env python3
"""
Seed the items table with synthetic rows for load testing the read path.

Spawns a fixed number of concurrent workers that each insert a batch of
generated items through one shared connection pool. Individual insert
failures are counted and skipped; the summary is printed as JSON.
"""

import argparse
import asyncio
import json
from pathlib import Path
from typing import Optional
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))

from shared.config import BaseConfig  # noqa: E402
from shared.logging import configure_logging, get_logger  # noqa: E402
from shared.metrics import get_metrics_collector  # noqa: E402
from service_items.app.connections import create_store_pool  # noqa: E402
from service_items.app.loader import BulkLoader  # noqa: E402
from service_items.app.persistence.postgres import ItemStore  # noqa: E402


async def seed(
    *,
    config: BaseConfig,
    workers: int,
    items_per_worker: int,
    pool_size: Optional[int],
    create_schema: bool,
) -> dict:
    """Run the bulk loader and return its summary."""
    # Every worker holds a connection for its whole batch
    pool = await create_store_pool(config, max_size=max(pool_size or 0, workers))
    try:
        store = ItemStore(pool, timeout=config.store_timeout_seconds)
        if create_schema:
            await store.ensure_schema()

        loader = BulkLoader(store, metrics=get_metrics_collector("seeder"))
        summary = await loader.load(workers, items_per_worker)
    finally:
        await pool.close()

    return summary.to_dict()


def _parse_args(config: BaseConfig) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the items table with synthetic rows.")
    parser.add_argument("--dsn", default=None, help="PostgreSQL DSN (defaults to ITEMS_POSTGRES_DSN)")
    parser.add_argument("--workers", type=int, default=config.loader_workers, help="Concurrent workers")
    parser.add_argument("--items-per-worker", type=int, default=config.loader_items_per_worker, help="Items inserted by each worker")
    parser.add_argument("--pool-size", type=int, default=None, help="Connection pool size (at least the worker count)")
    parser.add_argument("--create-schema", action="store_true", help="Create the items table if missing")
    parser.add_argument("--output", type=Path, default=None, help="Optional path to write JSON summary")
    return parser.parse_args()


def main() -> int:
    config = BaseConfig()
    args = _parse_args(config)
    if args.dsn:
        config = config.model_copy(update={"postgres_dsn": args.dsn})

    configure_logging("seeder", config.log_level)
    logger = get_logger("seeder.cli")

    try:
        summary = asyncio.run(
            seed(
                config=config,
                workers=args.workers,
                items_per_worker=args.items_per_worker,
                pool_size=args.pool_size,
                create_schema=args.create_schema,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as exc:  # pragma: no cover - CLI surface
        logger.error("Seeding failed", error=str(exc))
        print(f"[seed-items] failed: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))

    if args.output:
        args.output.write_text(json.dumps(summary, indent=2))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
