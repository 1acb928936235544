"""In-memory TTL store using cachetools.TLRUCache.

Each entry carries its own absolute expiry (``CacheEntry.expires_at``), so
list views, detail views and static reference data can live side by side with
different TTLs.  The store is bounded by time only: ``maxsize`` is
infinite, nothing is ever evicted for capacity reasons.
"""

from __future__ import annotations

import fnmatch
import math
import time
from typing import Any, Callable

import structlog
from cachetools import TLRUCache

from src.interfaces.cache_provider import ICacheProvider
from src.models.cache import CacheEntry

logger = structlog.get_logger(logger_name=__name__)


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    """Time-to-use callback for ``TLRUCache``: the entry's own deadline."""
    return entry.expires_at


class MemoryCacheProvider(ICacheProvider):
    """Process-local TTL store backed by ``cachetools.TLRUCache``.

    Parameters
    ----------
    clock:
        Zero-argument callable returning the current time in seconds.
        Defaults to ``time.monotonic``; tests inject a fake clock.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=math.inf, ttu=_entry_expiry, timer=clock
        )

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        """Return the live value for *key*; evict it and return *default* if stale."""
        entry = self._cache.get(key)
        if entry is None or entry.is_expired(self._clock()):
            self._cache.expire()
            logger.debug("cache_miss", key=key)
            return default
        logger.debug("cache_hit", key=key)
        return entry.value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store *value* under *key* for *ttl* seconds, overwriting any entry."""
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        self._cache[key] = CacheEntry(value=value, expires_at=self._clock() + ttl)
        logger.debug("cache_set", key=key, ttl=ttl)

    def delete(self, key: str) -> None:
        """Remove *key* from the store (no-op if absent)."""
        self._cache.pop(key, None)
        self._cache.expire()
        logger.debug("cache_delete", key=key)

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every live key that starts with *prefix*."""
        return self._delete_where(lambda key: key.startswith(prefix))

    def delete_matching(self, pattern: str) -> int:
        """Remove every live key matching the glob *pattern* (``fnmatchcase``)."""
        return self._delete_where(lambda key: fnmatch.fnmatchcase(key, pattern))

    def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        entry = self._cache.get(key)
        return entry is not None and not entry.is_expired(self._clock())

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        self._cache.expire()
        return len(self._cache)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _delete_where(self, predicate: Callable[[str], bool]) -> int:
        self._cache.expire()
        doomed = [key for key in list(self._cache.keys()) if predicate(key)]
        for key in doomed:
            self._cache.pop(key, None)
        if doomed:
            logger.debug("cache_bulk_delete", removed=len(doomed))
        return len(doomed)
