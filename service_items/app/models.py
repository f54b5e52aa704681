"""
Item data model shared by the read path and the bulk loader.
"""

import random
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ItemDecodeError


FIRST_NAMES = (
    "Ada", "Alan", "Barbara", "Claude", "Donald", "Edsger", "Frances", "Grace",
    "Guido", "Hedy", "Ken", "Leslie", "Linus", "Margaret", "Niklaus", "Radia",
)

LAST_NAMES = (
    "Allen", "Dijkstra", "Hamilton", "Hopper", "Knuth", "Lamarr", "Lamport",
    "Liskov", "Lovelace", "Perlman", "Ritchie", "Shannon", "Thompson",
    "Torvalds", "Turing", "Wirth",
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Item(BaseModel):
    """A row of the cacheable items table.

    Items are immutable once built: the bulk loader creates them and the
    read path only ever copies them between the store, the cache and the
    response body.
    """

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    first_name: str
    last_name: str
    created_at: AwareDatetime = Field(default_factory=_utcnow)
    updated_at: AwareDatetime = Field(default_factory=_utcnow)

    @classmethod
    def generate(cls, rng: Optional[random.Random] = None) -> "Item":
        """Build a synthetic item with a fresh id and random names."""
        rng = rng or random
        now = _utcnow()
        return cls(
            first_name=rng.choice(FIRST_NAMES),
            last_name=rng.choice(LAST_NAMES),
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Item":
        """Build an item from an asyncpg record (or any mapping)."""
        return cls(
            id=record["id"],
            first_name=record["first_name"],
            last_name=record["last_name"],
            created_at=record["created_at"],
            updated_at=record["updated_at"],
        )

    def as_row(self) -> Tuple[uuid.UUID, str, str, datetime, datetime]:
        """Positional parameters for the insert statement."""
        return (self.id, self.first_name, self.last_name, self.created_at, self.updated_at)

    def to_cache_value(self) -> str:
        """Serialize to the JSON text stored in the cache."""
        return self.model_dump_json()

    @classmethod
    def from_cache_value(cls, value: Any) -> "Item":
        """Decode a cached value, raising ItemDecodeError when malformed."""
        if isinstance(value, bytes):
            try:
                value = value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise ItemDecodeError("Cached value is not valid UTF-8") from exc
        if not isinstance(value, str):
            raise ItemDecodeError("Cached value is not text", {"type": type(value).__name__})

        try:
            return cls.model_validate_json(value)
        except PydanticValidationError as exc:
            raise ItemDecodeError(
                "Cached value is not a valid item",
                {"errors": exc.error_count()}
            ) from exc
