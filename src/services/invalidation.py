"""Invalidation cascade: drop cached reads after a confirmed write.

Every mutating data-access operation calls :meth:`InvalidationCascade.invalidate`
synchronously, right after the backend confirms success and before
returning to its caller.  Each invalidation removes the stored entries and
forgets the matching single-flight registrations in the same step: a fetch
that started before the write can still answer the callers already waiting
on it, but it will not write its result back, and every later read starts
a fresh fetch.

Related namespaces tie an entity to the list views derived from it, e.g.
invalidating ``("answers", question_id)`` also clears ``questions.*``
listings, whose ``answers_count`` just changed.
"""

from __future__ import annotations

from typing import Mapping, Sequence

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.models.cache import InvalidationTarget
from src.services.single_flight import SingleFlight

logger = structlog.get_logger(logger_name=__name__)


class InvalidationCascade:
    """Prefix and identifier based bulk removal from the TTL store.

    Parameters
    ----------
    store:
        The shared TTL store.
    related:
        Maps a namespace to the extra prefixes that must be cleared whenever
        an entity of that namespace is invalidated.
    flights:
        The single-flight registry shared with the read-through cache.
        In-flight fetches for invalidated keys are forgotten so their
        results are never stored.
    """

    def __init__(
        self,
        store: ICacheProvider,
        related: Mapping[str, Sequence[str]] | None = None,
        flights: SingleFlight | None = None,
    ) -> None:
        self._store = store
        self._flights = flights
        self._related: dict[str, tuple[str, ...]] = {
            prefix: tuple(targets) for prefix, targets in (related or {}).items()
        }

    def target(self, prefix: str, entity_id: str | int | None = None) -> InvalidationTarget:
        """Build the :class:`InvalidationTarget` for *prefix* / *entity_id*."""
        if not prefix:
            raise ValueError("invalidation prefix must be non-empty")
        return InvalidationTarget(
            prefix=prefix,
            entity_id=None if entity_id is None else str(entity_id),
            related=self._related.get(prefix, ()),
        )

    def invalidate(self, prefix: str, entity_id: str | int | None = None) -> int:
        """Remove the entries selected by *prefix* (and *entity_id*).

        Without *entity_id* every key starting with *prefix* goes.  With it,
        only that entity's own keys go, plus every key under the related
        list prefixes.  Idempotent; returns the number of entries removed.
        """
        target = self.target(prefix, entity_id)
        removed = 0
        for key in target.exact_keys():
            if self._store.exists(key):
                removed += 1
            self._store.delete(key)
            if self._flights is not None:
                self._flights.discard(key)
        for key_prefix in target.key_prefixes():
            removed += self._store.delete_by_prefix(key_prefix)
            if self._flights is not None:
                self._flights.forget(key_prefix)

        logger.info(
            "cache_invalidated",
            prefix=prefix,
            entity_id=target.entity_id,
            removed=removed,
        )
        return removed

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every key matching the shell-style glob *pattern*."""
        removed = self._store.delete_matching(pattern)
        if self._flights is not None:
            self._flights.forget_matching(pattern)
        logger.info("cache_invalidated", pattern=pattern, removed=removed)
        return removed

    def invalidate_all(self) -> None:
        self._store.clear()
        if self._flights is not None:
            self._flights.forget_all()
        logger.info("cache_cleared")
