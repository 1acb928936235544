"""Abstract base class for the hosted backend client.

Defines the narrow table-oriented contract the data-access services use
to talk to the portal's hosted backend (a PostgREST-style REST API).
Implementations must convert every failure into one of two structured
errors at this boundary:

- :class:`~src.utils.errors.TransportError` when the backend could not be
  reached (DNS, connect, timeout, dropped connection);
- :class:`~src.utils.errors.ApplicationError` when it answered with an
  error response.

The read-through cache and circuit breaker dispatch on those types, never
on message text.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

Row = dict[str, Any]


class IBackendClient(ABC):
    """Contract for table reads and writes against the hosted backend."""

    @abstractmethod
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
        """Return the rows of *table* matching *filters*.

        Parameters
        ----------
        table:
            Table or view name.
        columns:
            Column/embedding selector, e.g. ``"*,translations:disease_translations(*)"``.
        filters:
            Equality filters, column name to value.
        order:
            ``(column, ascending)`` pairs applied in sequence.
        limit, offset:
            Optional pagination window.
        """

    @abstractmethod
    async def select_one(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: Mapping[str, Any] | None = None,
    ) -> Row | None:
        """Return the single row matching *filters*, or ``None``."""

    @abstractmethod
    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert *row* and return the stored representation."""

    @abstractmethod
    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        filters: Mapping[str, Any],
    ) -> list[Row]:
        """Update matching rows and return their new representation."""

    @abstractmethod
    async def delete(self, table: str, filters: Mapping[str, Any]) -> None:
        """Delete the rows matching *filters*."""

    @abstractmethod
    async def ping(self) -> bool:
        """Issue a lightweight request; ``True`` if the backend answered."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier used in logs and error messages."""
