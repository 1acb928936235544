"""Unit tests for the backend health CircuitBreaker."""

from __future__ import annotations

from unittest.mock import AsyncMock

import httpx
import pytest

from src.models.cache import BreakerState
from src.services.circuit_breaker import CircuitBreaker
from src.utils.errors import ApplicationError, BackendUnavailableError, TransportError
from tests.conftest import FakeClock


class TestStateMachine:
    def test_starts_unknown_and_optimistic(self, breaker: CircuitBreaker) -> None:
        assert breaker.state is BreakerState.UNKNOWN
        assert breaker.is_healthy() is True

    def test_set_health_false_trips(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        breaker.set_health(False, error="fetch failed")
        snapshot = breaker.snapshot()
        assert breaker.is_healthy() is False
        assert snapshot.state is BreakerState.UNHEALTHY
        assert snapshot.last_tripped_at == clock.now
        assert snapshot.consecutive_failures == 1
        assert snapshot.last_error == "fetch failed"

    def test_stays_unhealthy_within_cooldown(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        breaker.set_health(False)
        clock.advance(29.9)
        assert breaker.is_healthy() is False

    def test_passive_recovery_after_cooldown(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        breaker.set_health(False)
        clock.advance(30)
        assert breaker.is_healthy() is True
        assert breaker.state is BreakerState.UNKNOWN

    def test_active_recovery(self, breaker: CircuitBreaker) -> None:
        breaker.set_health(False)
        breaker.set_health(True)
        assert breaker.is_healthy() is True
        assert breaker.state is BreakerState.HEALTHY
        assert breaker.snapshot().consecutive_failures == 0

    def test_retrip_restarts_cooldown(self, breaker: CircuitBreaker, clock: FakeClock) -> None:
        breaker.set_health(False)
        clock.advance(20)
        breaker.set_health(False)
        clock.advance(20)
        assert breaker.is_healthy() is False
        assert breaker.snapshot().consecutive_failures == 2

    def test_invalid_cooldown_rejected(self) -> None:
        with pytest.raises(ValueError):
            CircuitBreaker(cooldown_seconds=0)


class TestReport:
    @pytest.mark.parametrize(
        "exc",
        [
            TransportError("connection refused"),
            httpx.ConnectError("dns failure"),
            ConnectionResetError("reset by peer"),
            TimeoutError(),
        ],
    )
    def test_transport_failures_trip(self, breaker: CircuitBreaker, exc: BaseException) -> None:
        assert breaker.report(exc) is True
        assert breaker.is_healthy() is False

    @pytest.mark.parametrize(
        "exc",
        [
            ApplicationError("permission denied", status_code=401),
            ValueError("bad option"),
            KeyError("slug"),
        ],
    )
    def test_other_failures_do_not_trip(self, breaker: CircuitBreaker, exc: BaseException) -> None:
        assert breaker.report(exc) is False
        assert breaker.is_healthy() is True


class TestCall:
    @pytest.mark.asyncio
    async def test_success_marks_healthy(self, breaker: CircuitBreaker) -> None:
        primary = AsyncMock(return_value={"id": "1"})
        result = await breaker.call(primary, "diseases", {"name": "x"})
        assert result == {"id": "1"}
        primary.assert_awaited_once_with("diseases", {"name": "x"})
        assert breaker.state is BreakerState.HEALTHY

    @pytest.mark.asyncio
    async def test_transport_error_trips_and_propagates(self, breaker: CircuitBreaker) -> None:
        primary = AsyncMock(side_effect=TransportError("timeout"))
        with pytest.raises(TransportError):
            await breaker.call(primary)
        assert breaker.is_healthy() is False

    @pytest.mark.asyncio
    async def test_application_error_propagates_without_trip(self, breaker: CircuitBreaker) -> None:
        primary = AsyncMock(side_effect=ApplicationError("duplicate slug", status_code=409))
        with pytest.raises(ApplicationError):
            await breaker.call(primary)
        assert breaker.is_healthy() is True

    @pytest.mark.asyncio
    async def test_unhealthy_skips_primary_and_uses_fallback(self, breaker: CircuitBreaker) -> None:
        breaker.set_health(False)
        primary = AsyncMock()
        fallback = AsyncMock(return_value=["offline"])

        result = await breaker.call(primary, "uz", fallback=fallback)

        assert result == ["offline"]
        primary.assert_not_awaited()
        fallback.assert_awaited_once_with("uz")

    @pytest.mark.asyncio
    async def test_unhealthy_without_fallback_raises(self, breaker: CircuitBreaker) -> None:
        breaker.set_health(False)
        primary = AsyncMock()
        with pytest.raises(BackendUnavailableError):
            await breaker.call(primary)
        primary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_first_call_after_cooldown_tries_network(
        self, breaker: CircuitBreaker, clock: FakeClock
    ) -> None:
        breaker.set_health(False)
        clock.advance(30)
        primary = AsyncMock(return_value="fresh")
        assert await breaker.call(primary) == "fresh"
        primary.assert_awaited_once()
        assert breaker.state is BreakerState.HEALTHY
