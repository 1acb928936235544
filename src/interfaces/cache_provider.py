"""Abstract base class for the TTL store behind the read-through cache.

Defines the contract for the key-value store shared by every cached
data-access function.  The default implementation is an in-process
``cachetools`` map; the adapter pattern allows another backend to be
swapped in without touching the services that use it.

Unlike most provider interfaces in this package, every operation here is
**synchronous**.  The single-flight coordinator relies on store reads and
writes never suspending: on one event loop a synchronous ``get``/``set``
pair is atomic with respect to every other coroutine.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for TTL-bounded key-value stores."""

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.
        default:
            Returned when the key is absent or expired.  Callers that may
            legitimately cache ``None`` pass a sentinel here.

        Returns
        -------
        Any
            The cached value if present and not expired; *default* otherwise.
            An expired entry is removed as a side effect.
        """

    @abstractmethod
    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store *value* under *key*, replacing any existing entry.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The payload; opaque to the store.
        ttl:
            Time-to-live in seconds.  Must be strictly positive.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry stored under *key*; no-op if absent."""

    @abstractmethod
    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every key starting with *prefix* and return how many were removed."""

    @abstractmethod
    def delete_matching(self, pattern: str) -> int:
        """Remove every key matching the shell-style glob *pattern*."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of live (non-expired) entries."""
