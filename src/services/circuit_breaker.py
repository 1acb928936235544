"""Backend health circuit breaker.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.  One instance per process, constructed in
# ``src/main.py`` and injected into the read-through cache and every
# data-access service.
#
# State machine:
#
#     UNKNOWN ──success──▶ HEALTHY ◀──success── UNHEALTHY
#        │                    │                    ▲  │
#        └──transport failure─┴────────────────────┘  │
#        ▲                                            │
#        └────────────── cooldown elapsed ────────────┘
#
# UNKNOWN is optimistic: calls are attempted.  Once tripped, the breaker
# stays UNHEALTHY until either ``cooldown_seconds`` have passed since the
# last trip (passive recovery) or some call site reports a successful
# round-trip (active recovery).  After the cooldown the breaker drops back
# to UNKNOWN, so the very next call is allowed to try the network and
# its outcome decides the new state.
#
# Only transport failures trip the breaker.  A backend that answers with
# a structured error is reachable; see ``src.utils.errors.is_transport_failure``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import time
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from src.models.cache import BreakerState, HealthSnapshot
from src.utils.errors import BackendUnavailableError, is_transport_failure

_T = TypeVar("_T")

logger = structlog.get_logger(logger_name=__name__)


class CircuitBreaker:
    """Process-wide health flag with cooldown-based self-healing.

    Parameters
    ----------
    cooldown_seconds:
        How long a trip blocks network attempts.  Must be positive.
    clock:
        Zero-argument callable returning seconds; ``time.monotonic`` by default.
    name:
        Identifier used in log events and error messages.
    """

    def __init__(
        self,
        cooldown_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "backend",
    ) -> None:
        if cooldown_seconds <= 0:
            raise ValueError(f"cooldown_seconds must be positive, got {cooldown_seconds!r}")
        self._cooldown = cooldown_seconds
        self._clock = clock
        self._name = name
        self._state = BreakerState.UNKNOWN
        self._last_tripped_at: float | None = None
        self._consecutive_failures = 0
        self._last_error: str | None = None

    @property
    def state(self) -> BreakerState:
        self._maybe_recover()
        return self._state

    @property
    def cooldown_seconds(self) -> float:
        return self._cooldown

    # ------------------------------------------------------------------
    # Query / update
    # ------------------------------------------------------------------

    def is_healthy(self) -> bool:
        """Return ``True`` unless tripped within the last ``cooldown_seconds``."""
        self._maybe_recover()
        return self._state is not BreakerState.UNHEALTHY

    def set_health(self, value: bool, error: str | None = None) -> None:
        """Force the health flag.

        ``False`` (re)trips the breaker and restarts the cooldown;
        ``True`` marks the backend healthy and forgets past failures.
        """
        if value:
            if self._state is not BreakerState.HEALTHY:
                logger.info("circuit_breaker_healthy", breaker=self._name)
            self._state = BreakerState.HEALTHY
            self._consecutive_failures = 0
            self._last_error = None
            return

        self._state = BreakerState.UNHEALTHY
        self._last_tripped_at = self._clock()
        self._consecutive_failures += 1
        self._last_error = error
        logger.warning(
            "circuit_breaker_tripped",
            breaker=self._name,
            consecutive_failures=self._consecutive_failures,
            cooldown_seconds=self._cooldown,
            error=error,
        )

    def record_success(self) -> None:
        """Report a successful round-trip to the backend."""
        self.set_health(True)

    def record_failure(self, exc: BaseException) -> None:
        """Trip the breaker for *exc* regardless of its type."""
        self.set_health(False, error=str(exc) or type(exc).__name__)

    def report(self, exc: BaseException) -> bool:
        """Trip the breaker if *exc* is a transport failure.

        Returns ``True`` when the breaker was tripped.
        """
        if not is_transport_failure(exc):
            return False
        self.record_failure(exc)
        return True

    def snapshot(self) -> HealthSnapshot:
        self._maybe_recover()
        return HealthSnapshot(
            state=self._state,
            healthy=self._state is not BreakerState.UNHEALTHY,
            last_tripped_at=self._last_tripped_at,
            cooldown_seconds=self._cooldown,
            consecutive_failures=self._consecutive_failures,
            last_error=self._last_error,
        )

    # ------------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------------

    async def call(
        self,
        primary: Callable[..., Awaitable[_T]],
        *args: Any,
        fallback: Callable[..., Awaitable[_T]] | None = None,
        **kwargs: Any,
    ) -> _T:
        """Run *primary* through the gate, or *fallback* when unhealthy.

        Used by uncached network-touching operations (mutations, health checks).
        Errors from *primary* are reported and re-raised; the fallback is
        only taken when the breaker is open, never to mask an error.
        """
        if not self.is_healthy():
            return await self.degrade(primary, fallback, *args, **kwargs)

        try:
            result = await primary(*args, **kwargs)
        except Exception as exc:
            self.report(exc)
            raise
        self.record_success()
        return result

    async def degrade(
        self,
        primary: Callable[..., Any],
        fallback: Callable[..., Awaitable[_T]] | None,
        *args: Any,
        **kwargs: Any,
    ) -> _T:
        """Take the caller's fallback path without touching the network."""
        operation = getattr(primary, "__qualname__", repr(primary))
        if fallback is None:
            logger.info("circuit_breaker_rejected", breaker=self._name, operation=operation)
            raise BackendUnavailableError(
                message=f"{operation} skipped: backend is unhealthy",
                provider_name=self._name,
            )
        logger.info("circuit_breaker_fallback", breaker=self._name, operation=operation)
        return await fallback(*args, **kwargs)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _maybe_recover(self) -> None:
        if self._state is not BreakerState.UNHEALTHY or self._last_tripped_at is None:
            return
        if self._clock() - self._last_tripped_at >= self._cooldown:
            self._state = BreakerState.UNKNOWN
            logger.info("circuit_breaker_cooldown_elapsed", breaker=self._name)
