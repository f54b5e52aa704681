"""
Connection handles for the store and the cache.

Handles are created once at process start, passed explicitly into the
gateways, and closed at shutdown.
"""

from typing import Optional

import asyncpg
import redis.asyncio as redis

from shared.config import BaseConfig
from shared.errors import ReadAsideException
from shared.logging import get_logger


logger = get_logger("items.connections")


async def create_store_pool(config: BaseConfig, max_size: Optional[int] = None) -> asyncpg.Pool:
    """Open the shared asyncpg pool.

    The store password (for example a short-lived auth token) must be valid
    for as long as the pool keeps opening connections; refreshing it is an
    operational concern outside this process.
    """
    pool_max = max(max_size or config.store_pool_max_size, config.store_pool_min_size)
    try:
        pool = await asyncpg.create_pool(
            config.postgres_dsn,
            password=config.postgres_password,
            min_size=config.store_pool_min_size,
            max_size=pool_max,
            command_timeout=config.store_timeout_seconds,
        )
    except Exception as exc:
        logger.error("Failed to open store pool", error=str(exc))
        raise ReadAsideException("POSTGRES_START_FAILED", str(exc)) from exc

    logger.info("Store pool opened", min_size=config.store_pool_min_size, max_size=pool_max)
    return pool


def create_cache_client(config: BaseConfig) -> redis.Redis:
    """Build the redis client used by the cache gateway."""
    client = redis.from_url(
        config.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=config.cache_timeout_seconds,
        socket_timeout=config.cache_timeout_seconds,
        health_check_interval=30,
    )
    logger.info("Cache client created", cache_name=config.cache_name)
    return client
