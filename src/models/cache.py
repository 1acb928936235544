"""Cache-core data models: entries, breaker state, invalidation targets.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph -- no imports from upper layers).
#
# ``CacheEntry`` is the mutable record stored inside the TTL store; it is a
# slotted dataclass because it is created on every successful fetch.
# ``HealthSnapshot`` is an immutable read-out of the circuit breaker for
# logging and diagnostics.  ``InvalidationTarget`` turns a
# ``(prefix, entity_id)`` pair into the concrete key prefixes to delete.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Separator between the segments of every cache key, e.g. "disease.gout.uz".
KEY_SEPARATOR = "."


@dataclass(slots=True)
class CacheEntry:
    """A cached payload and the monotonic time after which it is stale."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class BreakerState(str, Enum):
    """Lifecycle states of the backend health circuit breaker."""

    UNKNOWN = "UNKNOWN"
    HEALTHY = "HEALTHY"
    UNHEALTHY = "UNHEALTHY"


class HealthSnapshot(BaseModel):
    """Point-in-time view of the circuit breaker."""

    model_config = ConfigDict(frozen=True)

    state: BreakerState
    healthy: bool
    last_tripped_at: float | None = None
    cooldown_seconds: float = Field(gt=0)
    consecutive_failures: int = Field(default=0, ge=0)
    last_error: str | None = None


@dataclass(frozen=True)
class InvalidationTarget:
    """A namespace prefix, optionally narrowed to one entity.

    ``related`` lists additional namespace prefixes (typically list views)
    whose entries are derived from the entity and must go with it.
    """

    prefix: str
    entity_id: str | None = None
    related: tuple[str, ...] = field(default=())

    def exact_keys(self) -> tuple[str, ...]:
        """Keys that must be removed by exact match."""
        if self.entity_id is None:
            return ()
        return (f"{self.prefix}{KEY_SEPARATOR}{self.entity_id}",)

    def key_prefixes(self) -> tuple[str, ...]:
        """Prefixes whose every key must be removed."""
        if self.entity_id is None:
            own = self.prefix
        else:
            # Trailing separator so entity "4" never matches "42".
            own = f"{self.prefix}{KEY_SEPARATOR}{self.entity_id}{KEY_SEPARATOR}"
        return (own, *self.related)
