"""PostgREST backend client implementing IBackendClient.

Talks to the portal's hosted backend through its ``/rest/v1/<table>``
endpoints using an injected ``httpx.AsyncClient``.  This module is the
error-classification boundary of the data layer:

- ``httpx.TransportError`` (connect, read timeout, DNS, protocol) becomes
  :class:`TransportError` and will trip the circuit breaker;
- any 4xx/5xx response becomes :class:`ApplicationError` carrying the
  status code and PostgREST error code, and leaves the breaker alone.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import httpx
import structlog

from src.interfaces.backend_client import IBackendClient, Row
from src.utils.errors import ApplicationError, TransportError

logger = structlog.get_logger(logger_name=__name__)

_REST_PATH = "/rest/v1"
# Table used by ping(); any small, publicly readable table works.
_PING_TABLE = "categories"


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def build_filter_params(filters: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """Translate equality filters into PostgREST query parameters."""
    params: list[tuple[str, str]] = []
    for column, value in (filters or {}).items():
        operator = "is" if value is None else "eq"
        params.append((column, f"{operator}.{_format_value(value)}"))
    return params


class PostgrestBackendClient(IBackendClient):
    """Hosted-backend client over PostgREST.

    Parameters
    ----------
    http_client:
        Client whose ``base_url`` points at the backend project URL.
        Timeouts are the client's own; the cache core imposes none.
    api_key:
        Anonymous/public API key sent as ``apikey`` and bearer token.
    """

    def __init__(self, http_client: httpx.AsyncClient, api_key: str = "") -> None:
        self._client = http_client
        self._headers: dict[str, str] = {"Accept": "application/json"}
        if api_key:
            self._headers["apikey"] = api_key
            self._headers["Authorization"] = f"Bearer {api_key}"

    # ------------------------------------------------------------------
    # IBackendClient implementation
    # ------------------------------------------------------------------

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
        params: list[tuple[str, str]] = [("select", columns), *build_filter_params(filters)]
        if order:
            params.append(
                ("order", ",".join(f"{col}.{'asc' if asc else 'desc'}" for col, asc in order))
            )
        if limit is not None:
            params.append(("limit", str(limit)))
        if offset is not None:
            params.append(("offset", str(offset)))

        response = await self._request("GET", table, params=params)
        rows = response.json()
        logger.debug("backend_select", table=table, row_count=len(rows))
        return rows

    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
    ) -> Row | None:
        rows = await self.select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        response = await self._request(
            "POST",
            table,
            json=dict(row),
            headers={"Prefer": "return=representation"},
        )
        created = response.json()
        return created[0] if isinstance(created, list) else created

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> list[Row]:
        response = await self._request(
            "PATCH",
            table,
            params=build_filter_params(filters),
            json=dict(values),
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        await self._request("DELETE", table, params=build_filter_params(filters))

    async def ping(self) -> bool:
        """Return ``True`` if the backend answered; raises only for programming errors."""
        try:
            await self._request("GET", _PING_TABLE, params=[("select", "id"), ("limit", "1")])
        except (TransportError, ApplicationError) as exc:
            logger.warning("backend_ping_failed", error=str(exc))
            return False
        return True

    def get_provider_name(self) -> str:
        return "postgrest"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method,
                f"{_REST_PATH}/{table}",
                params=params,
                json=json,
                headers={**self._headers, **(headers or {})},
            )
        except httpx.TransportError as exc:
            raise TransportError(
                message=f"{method} {table} failed: {str(exc) or type(exc).__name__}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.is_error:
            raise self._application_error(method, table, response)
        return response

    def _application_error(self, method: str, table: str, response: httpx.Response) -> ApplicationError:
        code: str | None = None
        detail = response.text
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code")
            detail = body.get("message") or detail
        return ApplicationError(
            message=f"{method} {table} rejected ({response.status_code}): {detail}",
            provider_name=self.get_provider_name(),
            status_code=response.status_code,
            code=code,
        )
