"""Custom exception hierarchy for the Revmohelp data layer.

All application exceptions inherit from :class:`RevmohelpError`, which
carries an optional ``provider_name`` so error handlers can identify which
collaborator (e.g. "postgrest", "read_through_cache") raised the failure.

The hierarchy follows the failure taxonomy of the cache core:

    RevmohelpError  (base -- catch-all for any Revmohelp error)
    +-- TransportError           (backend unreachable: DNS, connect, timeout)
    +-- ApplicationError         (backend reachable but rejected the request)
    +-- BackendUnavailableError  (circuit breaker open, no fallback supplied)
    +-- CacheKeyError            (key generator failed -- a programming error)
    +-- ConfigurationError       (startup / invalid config)

Only :class:`TransportError` (and raw low-level I/O exceptions that were not
converted at the client boundary) trips the circuit breaker.  See
:func:`is_transport_failure`.
"""

from __future__ import annotations

import httpx


class RevmohelpError(Exception):
    """Base exception for all Revmohelp errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[postgrest] connection refused``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Backend errors
# ---------------------------------------------------------------------------

class TransportError(RevmohelpError):
    """Raised when the backend cannot be reached at all.

    Never cached.  Trips the circuit breaker so subsequent calls take
    their fallback path until the cooldown elapses.
    """

    def __init__(
        self,
        message: str = "Backend transport failure",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ApplicationError(RevmohelpError):
    """Raised when the backend answered with a structured error.

    The backend is reachable, the request was simply rejected (malformed,
    unauthorized, not found), so the circuit breaker is left alone.
    """

    def __init__(
        self,
        message: str = "Backend rejected the request",
        provider_name: str | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._status_code = status_code
        self._code = code

    @property
    def status_code(self) -> int | None:
        return self._status_code

    @property
    def code(self) -> str | None:
        return self._code


class BackendUnavailableError(RevmohelpError):
    """Raised when the circuit breaker is open and the caller gave no fallback."""

    def __init__(
        self,
        message: str = "Backend is marked unhealthy",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Programming / configuration errors
# ---------------------------------------------------------------------------

class CacheKeyError(RevmohelpError):
    """Raised when a key generator throws or returns an unusable key.

    This is always a bug in the wrapped operation's key function; it is
    propagated immediately and never retried.
    """

    def __init__(
        self,
        message: str = "Cache key generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(RevmohelpError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

# Low-level exception types that mean "the request never reached the backend".
# ConnectionError and TimeoutError are both OSError subclasses.
_RAW_TRANSPORT_TYPES: tuple[type[BaseException], ...] = (
    httpx.TransportError,
    OSError,
)


def is_transport_failure(exc: BaseException) -> bool:
    """Return ``True`` if *exc* indicates the backend was unreachable.

    :class:`ApplicationError` is checked first so a rejected request is
    never misread as a network outage.
    """
    if isinstance(exc, ApplicationError):
        return False
    if isinstance(exc, TransportError):
        return True
    return isinstance(exc, _RAW_TRANSPORT_TYPES)
