"""Cache warm-up for the most visited public pages.

Pings the backend first: when the ping fails the breaker is tripped and
the warm-up is skipped entirely, so a cold start during an outage costs one
request instead of one per preloaded list.  Otherwise the critical lists
are fetched concurrently through their cached wrappers; individual failures
are logged, never raised.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import structlog

from src.interfaces.backend_client import IBackendClient
from src.services.circuit_breaker import CircuitBreaker
from src.utils.concurrency import throttled_gather

logger = structlog.get_logger(logger_name=__name__)

Preload = Callable[[], Awaitable[Any]]


async def preload_critical_data(
    backend: IBackendClient,
    breaker: CircuitBreaker,
    loaders: list[Preload],
) -> int:
    """Warm the cache; return how many loaders succeeded."""
    if not breaker.is_healthy():
        logger.warning("preload_skipped", reason="breaker_open")
        return 0

    if not await backend.ping():
        breaker.set_health(False, error="preload health check failed")
        logger.warning("preload_skipped", reason="ping_failed")
        return 0
    breaker.record_success()

    results = await throttled_gather([loader() for loader in loaders])
    succeeded = 0
    for index, result in enumerate(results):
        if isinstance(result, BaseException):
            logger.warning("preload_failed", loader_index=index, error=str(result))
        else:
            succeeded += 1

    logger.info("preload_complete", succeeded=succeeded, total=len(loaders))
    return succeeded
