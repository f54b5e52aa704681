"""
Error taxonomy for the Items Service.

Cache failures are best-effort and never reach a client; store failures are
authoritative and surface as AccessError from the read path.
"""

from typing import Any, Dict, Optional

from shared.errors import ReadAsideException, ExternalServiceError, NotFoundError


class CacheError(ExternalServiceError):
    """Transport, auth or timeout failure talking to the cache."""

    def __init__(self, message: str = "Cache unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_ERROR", "cache", message, details)


class ItemDecodeError(ReadAsideException):
    """A cached value could not be turned back into an Item."""

    def __init__(self, message: str = "Malformed cached item", details: Optional[Dict[str, Any]] = None):
        super().__init__("ITEM_DECODE_ERROR", message, details)


class StoreError(ExternalServiceError):
    """Store failure that is neither a conflict nor an outage."""

    def __init__(self, message: str = "Store error", details: Optional[Dict[str, Any]] = None,
                 code: str = "STORE_ERROR"):
        super().__init__(code, "store", message, details)


class StoreConflictError(StoreError):
    """Insert rejected because the id already exists."""

    def __init__(self, message: str = "Duplicate item id", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="STORE_CONFLICT")


class StoreUnavailableError(StoreError):
    """Connectivity, authentication or timeout failure talking to the store."""

    def __init__(self, message: str = "Store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="STORE_UNAVAILABLE")


class AccessError(ExternalServiceError):
    """Raised by the read path when the store cannot serve the lookup."""

    def __init__(self, cause: StoreError, item_id: Optional[str] = None):
        details = {"store_code": cause.code}
        if item_id is not None:
            details["item_id"] = item_id
        super().__init__("ACCESS_ERROR", "store", cause.message, details)
        self.store_error = cause


class ItemNotFoundError(NotFoundError):
    """No store row exists for the requested id."""

    def __init__(self, item_id: str):
        super().__init__("ITEM_NOT_FOUND", "Item not found", {"item_id": item_id})
