"""
PostgreSQL store gateway for the Items Service.
"""

import asyncio
import uuid
from typing import Optional

import asyncpg
from asyncpg import exceptions as pg_exceptions

from shared.logging import get_logger
from shared.tracing import trace_operation
from ..errors import StoreError, StoreConflictError, StoreUnavailableError
from ..models import Item


TABLE_NAME = "cacheable_items"

CREATE_TABLE_SQL = f"""
    CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
        id UUID PRIMARY KEY,
        first_name TEXT NOT NULL,
        last_name TEXT NOT NULL,
        created_at TIMESTAMP WITH TIME ZONE NOT NULL,
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL
    )
"""

INSERT_SQL = f"""
    INSERT INTO {TABLE_NAME} (id, first_name, last_name, created_at, updated_at)
    VALUES ($1, $2, $3, $4, $5)
"""

SELECT_BY_ID_SQL = f"""
    SELECT id, first_name, last_name, created_at, updated_at
    FROM {TABLE_NAME}
    WHERE id = $1
"""

# Failures that mean the store could not be reached or would not let us in
UNAVAILABLE_ERRORS = (
    pg_exceptions.PostgresConnectionError,
    pg_exceptions.InvalidAuthorizationSpecificationError,
    pg_exceptions.CannotConnectNowError,
    pg_exceptions.TooManyConnectionsError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)


class ItemStore:
    """Point insert and point lookup against the items table.

    The pool is created once at process start and shared by every caller,
    so its max size must cover the bulk loader's worker count.
    """

    def __init__(self, pool: asyncpg.Pool, timeout: float = 5.0):
        self.pool = pool
        self.timeout = timeout
        self.logger = get_logger("items.persistence.postgres")

    async def ensure_schema(self) -> None:
        """Create the items table if it does not exist."""
        try:
            await asyncio.wait_for(self.pool.execute(CREATE_TABLE_SQL), self.timeout)
        except Exception as exc:
            raise self._translate(exc, "ensure_schema") from exc
        self.logger.info("Items table ready", table=TABLE_NAME)

    async def insert(self, item: Item) -> None:
        """Insert one item, binding its attributes by position."""
        with trace_operation("store.insert", item_id=str(item.id)):
            try:
                await asyncio.wait_for(self.pool.execute(INSERT_SQL, *item.as_row()), self.timeout)
            except Exception as exc:
                raise self._translate(exc, "insert", item_id=str(item.id)) from exc

    async def find_by_id(self, item_id: uuid.UUID) -> Optional[Item]:
        """Fetch an item by primary key; None when no row matches."""
        with trace_operation("store.read", item_id=str(item_id)):
            try:
                row = await asyncio.wait_for(self.pool.fetchrow(SELECT_BY_ID_SQL, item_id), self.timeout)
            except Exception as exc:
                raise self._translate(exc, "find_by_id", item_id=str(item_id)) from exc

        if row is None:
            return None
        return Item.from_record(row)

    async def health_check(self) -> bool:
        """Check database health."""
        try:
            await asyncio.wait_for(self.pool.fetchval("SELECT 1"), self.timeout)
            return True
        except Exception as exc:
            self.logger.warning("Store health check failed", error=str(exc))
            return False

    def _translate(self, exc: Exception, operation: str, **context) -> StoreError:
        """Map a driver exception onto the store error taxonomy."""
        details = {"operation": operation, **context}
        if isinstance(exc, pg_exceptions.UniqueViolationError):
            return StoreConflictError(str(exc) or "Duplicate item id", details)
        if isinstance(exc, UNAVAILABLE_ERRORS):
            message = str(exc) or type(exc).__name__
            return StoreUnavailableError(message, details)
        if isinstance(exc, asyncpg.PostgresError):
            return StoreError(str(exc), details)
        # Unknown failures are still store failures to the caller
        return StoreError(f"{type(exc).__name__}: {exc}", details)
