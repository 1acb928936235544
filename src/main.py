"""Revmohelp data-layer entry point.

Wires together the shared cache core and the data-access services via
explicit construction: one TTL store, one single-flight registry, one
circuit breaker and one invalidation cascade per process, injected into
every service.  Nothing here is a hidden module-level singleton; callers
hold the returned :class:`DataLayer` and close it on shutdown.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable

import httpx
import structlog

from src.config.loader import load_config
from src.interfaces.backend_client import IBackendClient
from src.providers.backend.postgrest_client import PostgrestBackendClient
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services import cache_keys
from src.services.category_service import CategoryService
from src.services.circuit_breaker import CircuitBreaker
from src.services.disease_service import DiseaseService
from src.services.invalidation import InvalidationCascade
from src.services.preloader import preload_critical_data
from src.services.question_service import QuestionService
from src.services.read_through_cache import ReadThroughCache
from src.services.single_flight import SingleFlight
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_from_config

_logger = structlog.get_logger(logger_name=__name__)


@dataclass
class DataLayer:
    """Every shared component of the data layer, constructed once."""

    config: dict[str, Any]
    store: MemoryCacheProvider
    flights: SingleFlight
    breaker: CircuitBreaker
    cache: ReadThroughCache
    invalidation: InvalidationCascade
    backend: IBackendClient
    diseases: DiseaseService
    questions: QuestionService
    categories: CategoryService
    http_client: httpx.AsyncClient | None = None

    async def preload(self) -> int:
        """Warm the cache with the lists the home page renders first."""
        return await preload_critical_data(
            self.backend,
            self.breaker,
            [
                lambda: self.diseases.get_diseases("uz", {"active": True}),
                lambda: self.questions.get_questions({"limit": 20}),
                self.categories.get_categories,
            ],
        )

    async def aclose(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _ttl(config: dict[str, Any], bucket: str, override: str | None = None) -> float:
    cache_cfg = config["cache"]
    overrides = cache_cfg.get("overrides") or {}
    if override and override in overrides:
        return float(overrides[override])
    return float(cache_cfg["ttl"][bucket])


def _build_backend(config: dict[str, Any]) -> tuple[IBackendClient, httpx.AsyncClient]:
    backend_cfg = config["backend"]
    if not backend_cfg.get("url"):
        raise ConfigurationError(
            "BACKEND_URL is not set; pass a backend explicitly or configure one",
            provider_name="postgrest",
        )
    http_client = httpx.AsyncClient(
        base_url=backend_cfg["url"],
        timeout=httpx.Timeout(float(backend_cfg["timeout_seconds"])),
    )
    return PostgrestBackendClient(http_client, api_key=backend_cfg.get("api_key", "")), http_client


def build_data_layer(
    config: dict[str, Any] | None = None,
    backend: IBackendClient | None = None,
    clock: Callable[[], float] = time.monotonic,
    configure_logs: bool = True,
) -> DataLayer:
    """Construct the shared cache core and every data-access service.

    Args:
        config: Resolved configuration; ``load_config()`` when omitted.
        backend: Pre-built backend client (tests, alternative transports).
            Built from ``config["backend"]`` when omitted.
        clock: Time source shared by the store and the breaker.
        configure_logs: Apply ``config["logging"]`` to structlog.

    Raises:
        ConfigurationError: If no backend is given and none is configured.
    """
    config = config if config is not None else load_config()
    if configure_logs:
        configure_from_config(config)

    http_client: httpx.AsyncClient | None = None
    if backend is None:
        backend, http_client = _build_backend(config)

    store = MemoryCacheProvider(clock=clock)
    flights = SingleFlight()
    breaker = CircuitBreaker(
        cooldown_seconds=float(config["breaker"]["cooldown_seconds"]),
        clock=clock,
        name=backend.get_provider_name(),
    )
    cache = ReadThroughCache(store, breaker, flights)
    invalidation = InvalidationCascade(
        store, related=cache_keys.RELATED_NAMESPACES, flights=flights
    )

    diseases = DiseaseService(
        backend,
        cache,
        invalidation,
        list_ttl=_ttl(config, "list", "diseases_list"),
        detail_ttl=_ttl(config, "detail"),
    )
    questions = QuestionService(
        backend,
        cache,
        invalidation,
        list_ttl=_ttl(config, "list"),
        detail_ttl=_ttl(config, "detail", "question_detail"),
    )
    categories = CategoryService(
        backend, cache, invalidation, static_ttl=_ttl(config, "static")
    )

    _logger.info(
        "data_layer_built",
        backend=backend.get_provider_name(),
        cooldown_seconds=breaker.cooldown_seconds,
    )
    return DataLayer(
        config=config,
        store=store,
        flights=flights,
        breaker=breaker,
        cache=cache,
        invalidation=invalidation,
        backend=backend,
        diseases=diseases,
        questions=questions,
        categories=categories,
        http_client=http_client,
    )
