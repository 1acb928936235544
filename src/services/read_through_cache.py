"""Read-through cache wrapper for async data-access functions.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
# Depends on: ICacheProvider (TTL store), SingleFlight, CircuitBreaker.
#
# Every cached data-access function is declared once as a raw async fetch
# and wrapped here with a key generator and a TTL.  Callers invoke the
# wrapped function exactly like the raw one.  Per call:
#
#   1. KEY         -- key_fn(*args, **kwargs); failure is a CacheKeyError.
#   2. STORE       -- a live entry is returned with no network traffic.
#   3. GATE        -- breaker open: fallback(*args) or BackendUnavailableError.
#   4. COALESCE    -- SingleFlight joins any in-flight fetch for the key.
#   5. FETCH       -- raw fetch; success is stored, then returned.
#   6. FAIL        -- transport failures trip the breaker; every error is
#                     re-raised and nothing is stored.
#
# The store write happens inside the shared single-flight task, before the
# key is deregistered, so there is no moment where a key is neither cached
# nor in flight after a successful fetch.  A fetch whose registration was
# forgotten by an invalidation still answers its own waiters but is not
# stored: its result may predate the write that caused the invalidation.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import functools
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from src.interfaces.cache_provider import ICacheProvider
from src.services.circuit_breaker import CircuitBreaker
from src.services.single_flight import SingleFlight
from src.utils.errors import CacheKeyError

_T = TypeVar("_T")

Fetch = Callable[..., Awaitable[Any]]
KeyFn = Callable[..., str]

logger = structlog.get_logger(logger_name=__name__)

_MISSING = object()


class ReadThroughCache:
    """Composes the TTL store, the single-flight coordinator and the breaker.

    All collaborators are constructor-injected so that every data-access
    module in a process shares the same instances.
    """

    def __init__(
        self,
        store: ICacheProvider,
        breaker: CircuitBreaker,
        flights: SingleFlight | None = None,
    ) -> None:
        self._store = store
        self._breaker = breaker
        self._flights = flights if flights is not None else SingleFlight()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "fetches": 0,
            "fallbacks": 0,
            "errors": 0,
            "discarded": 0,
        }

    @property
    def store(self) -> ICacheProvider:
        return self._store

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def flights(self) -> SingleFlight:
        return self._flights

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def cached(
        self,
        key_fn: KeyFn,
        ttl_seconds: float,
        fallback: Fetch | None = None,
    ) -> Callable[[Fetch], Fetch]:
        """Decorator form of :meth:`wrap`."""

        def decorator(fetch: Fetch) -> Fetch:
            return self.wrap(fetch, key_fn, ttl_seconds, fallback=fallback)

        return decorator

    def wrap(
        self,
        fetch: Fetch,
        key_fn: KeyFn,
        ttl_seconds: float,
        fallback: Fetch | None = None,
    ) -> Fetch:
        """Return a cached version of *fetch*.

        Parameters
        ----------
        fetch:
            The raw async data-access function.
        key_fn:
            Pure, deterministic function of the same arguments returning
            the cache key.
        ttl_seconds:
            Lifetime of a successful result.  Must be positive.
        fallback:
            Optional async function with the same signature, called instead
            of *fetch* while the backend is marked unhealthy.  Its result is
            never cached.
        """
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds!r}")

        @functools.wraps(fetch)
        async def wrapped(*args: Any, **kwargs: Any) -> Any:
            key = self._make_key(key_fn, args, kwargs)

            value = self._store.get(key, _MISSING)
            if value is not _MISSING:
                self._stats["hits"] += 1
                return value
            self._stats["misses"] += 1

            if not self._breaker.is_healthy():
                self._stats["fallbacks"] += 1
                return await self._breaker.degrade(fetch, fallback, *args, **kwargs)

            async def load() -> Any:
                return await self._load(key, fetch, ttl_seconds, args, kwargs)

            return await self._flights.do(key, load)

        def cache_key(*args: Any, **kwargs: Any) -> str:
            return self._make_key(key_fn, args, kwargs)

        def invalidate(*args: Any, **kwargs: Any) -> None:
            key = self._make_key(key_fn, args, kwargs)
            self._store.delete(key)
            self._flights.discard(key)

        wrapped.cache_key = cache_key  # type: ignore[attr-defined]
        wrapped.invalidate = invalidate  # type: ignore[attr-defined]
        wrapped.ttl_seconds = ttl_seconds  # type: ignore[attr-defined]
        return wrapped

    def stats(self) -> dict[str, int]:
        """Return hit/miss/fetch/fallback/error counters plus live sizes."""
        return {
            **self._stats,
            "entries": len(self._store),
            "in_flight": len(self._flights),
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _make_key(key_fn: KeyFn, args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
        name = getattr(key_fn, "__qualname__", repr(key_fn))
        try:
            key = key_fn(*args, **kwargs)
        except Exception as exc:
            raise CacheKeyError(
                message=f"key generator {name} failed: {exc}",
                provider_name="read_through_cache",
            ) from exc
        if not isinstance(key, str) or not key:
            raise CacheKeyError(
                message=f"key generator {name} returned {key!r}, expected a non-empty str",
                provider_name="read_through_cache",
            )
        return key

    async def _load(
        self,
        key: str,
        fetch: Fetch,
        ttl_seconds: float,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Any:
        self._stats["fetches"] += 1
        try:
            result = await fetch(*args, **kwargs)
        except Exception as exc:
            self._stats["errors"] += 1
            tripped = self._breaker.report(exc)
            logger.warning(
                "cache_fetch_failed",
                key=key,
                error=str(exc),
                error_type=type(exc).__name__,
                breaker_tripped=tripped,
            )
            raise
        self._breaker.record_success()
        if self._flights.is_current(key):
            self._store.set(key, result, ttl_seconds)
        else:
            self._stats["discarded"] += 1
            logger.info("cache_write_skipped", key=key, reason="invalidated_in_flight")
        return result
