"""Shared pytest fixtures for the Revmohelp data-layer test suite."""

from __future__ import annotations

import asyncio
import itertools
from typing import Any, Mapping, Sequence

import pytest

from src.interfaces.backend_client import IBackendClient, Row
from src.main import DataLayer, build_data_layer
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services import cache_keys
from src.services.circuit_breaker import CircuitBreaker
from src.services.invalidation import InvalidationCascade
from src.services.read_through_cache import ReadThroughCache
from src.services.single_flight import SingleFlight

# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend(IBackendClient):
    """In-memory IBackendClient with call recording and failure injection.

    ``fail_with`` is raised by every call while set.  ``gate`` (when set)
    makes every select wait until the event is released, which lets tests
    pile up concurrent callers behind one in-flight fetch.
    """

    def __init__(self, tables: Mapping[str, list[Row]] | None = None) -> None:
        self.tables: dict[str, list[Row]] = {k: list(v) for k, v in (tables or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self.fail_with: BaseException | None = None
        self.gate: asyncio.Event | None = None
        self.reachable = True
        self._ids = itertools.count(100)

    def count(self, method: str, table: str | None = None) -> int:
        return sum(1 for m, t in self.calls if m == method and (table is None or t == table))

    async def _enter(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            raise self.fail_with

    @staticmethod
    def _matches(row: Row, filters: Mapping[str, Any] | None) -> bool:
        return all(row.get(column) == value for column, value in (filters or {}).items())

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
        order: Sequence[tuple[str, bool]] = (),
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[Row]:
        await self._enter("select", table)
        rows = [dict(r) for r in self.tables.get(table, []) if self._matches(r, filters)]
        start = offset or 0
        end = None if limit is None else start + limit
        return rows[start:end]

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
    ) -> Row | None:
        await self._enter("select_one", table)
        for row in self.tables.get(table, []):
            if self._matches(row, filters):
                return dict(row)
        return None

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        await self._enter("insert", table)
        stored = {"id": str(next(self._ids)), **row}
        self.tables.setdefault(table, []).append(stored)
        return dict(stored)

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> list[Row]:
        await self._enter("update", table)
        updated = []
        for row in self.tables.get(table, []):
            if self._matches(row, filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        await self._enter("delete", table)
        self.tables[table] = [r for r in self.tables.get(table, []) if not self._matches(r, filters)]

    async def ping(self) -> bool:
        self.calls.append(("ping", ""))
        return self.reachable

    def get_provider_name(self) -> str:
        return "fake"


# ---------------------------------------------------------------------------
# Sample rows
# ---------------------------------------------------------------------------


def disease_row(disease_id: str, slug: str, **overrides: Any) -> Row:
    row: Row = {
        "id": disease_id,
        "name": slug.replace("-", " ").title(),
        "slug": slug,
        "active": True,
        "featured": False,
        "order_index": int(disease_id),
        "translations": [],
    }
    row.update(overrides)
    return row


def question_row(question_id: str, slug: str, **overrides: Any) -> Row:
    row: Row = {
        "id": question_id,
        "title": slug.replace("-", " ").capitalize(),
        "content": "Savol matni",
        "slug": slug,
        "author_id": "user1",
        "status": "open",
    }
    row.update(overrides)
    return row


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> MemoryCacheProvider:
    return MemoryCacheProvider(clock=clock)


@pytest.fixture
def breaker(clock: FakeClock) -> CircuitBreaker:
    return CircuitBreaker(cooldown_seconds=30.0, clock=clock)


@pytest.fixture
def flights() -> SingleFlight:
    return SingleFlight()


@pytest.fixture
def cache(store: MemoryCacheProvider, breaker: CircuitBreaker, flights: SingleFlight) -> ReadThroughCache:
    return ReadThroughCache(store, breaker, flights)


@pytest.fixture
def invalidation(store: MemoryCacheProvider, flights: SingleFlight) -> InvalidationCascade:
    return InvalidationCascade(store, related=cache_keys.RELATED_NAMESPACES, flights=flights)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend(
        {
            "diseases": [
                disease_row("1", "aksiyal-spondiloartrit"),
                disease_row(
                    "2",
                    "revmatoid-artrit",
                    featured=True,
                    translations=[
                        {
                            "disease_id": "2",
                            "language": "ru",
                            "name": "Ревматоидный артрит",
                            "slug": "revmatoidniy-artrit",
                            "description": "Описание",
                        }
                    ],
                ),
            ],
            "questions": [
                question_row("1", "revmatoid-artrit-belgilari", answers_count=1),
                question_row("2", "osteoartroz-mashqlar"),
            ],
            "answers": [
                {"id": "a1", "content": "Javob", "question_id": "1", "author_id": "doc1"},
            ],
        }
    )


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Minimal resolved configuration, as load_config() would return it."""
    return {
        "app": {"env": "test"},
        "backend": {"url": "http://backend.test", "api_key": "", "timeout_seconds": 5.0},
        "breaker": {"cooldown_seconds": 30.0},
        "cache": {
            "ttl": {"list": 120.0, "detail": 600.0, "static": 900.0},
            "overrides": {"diseases_list": 300.0, "question_detail": 300.0},
        },
        "logging": {"level": "WARNING"},
    }


@pytest.fixture
def data_layer(mock_config: dict[str, Any], backend: FakeBackend, clock: FakeClock) -> DataLayer:
    return build_data_layer(mock_config, backend=backend, clock=clock, configure_logs=False)
