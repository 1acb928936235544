"""Utility modules for the Revmohelp data layer.

- **errors** -- Exception hierarchy rooted at RevmohelpError, plus the
  transport-failure classification the circuit breaker relies on.
- **concurrency** -- Semaphore-bounded ``asyncio.gather`` used by the
  cache warm-up.
- **logging** -- structlog setup driven by the resolved configuration:
  console output in development, JSON lines in production.
"""

from src.utils.concurrency import throttled_gather
from src.utils.errors import (
    ApplicationError,
    BackendUnavailableError,
    CacheKeyError,
    ConfigurationError,
    RevmohelpError,
    TransportError,
    is_transport_failure,
)
from src.utils.logging import configure_from_config, configure_logging

__all__ = [
    "ApplicationError",
    "BackendUnavailableError",
    "CacheKeyError",
    "ConfigurationError",
    "RevmohelpError",
    "TransportError",
    "configure_from_config",
    "configure_logging",
    "is_transport_failure",
    "throttled_gather",
]
