"""Single-flight coordinator: collapse concurrent identical requests.

While a fetch for a key is in flight the cache has not been populated yet,
so a naive "check cache, else fetch" would issue one backend call per
concurrent caller.  ``SingleFlight`` closes that window: the first caller
for a key starts the fetch as an ``asyncio.Task``; every caller that
arrives before it settles awaits the same task.

Deregistration happens inside the task itself (``finally``), so by the time
any caller observes the result or the exception the key is already free
and the next call starts a fresh fetch.  Failures are therefore never
retained.

A registration can also be dropped early with :meth:`SingleFlight.forget`
(the invalidation cascade does this after a write).  The forgotten task
keeps running for the callers already waiting on it, but it is no longer
*current* for its key: later callers start a fresh fetch, and
:meth:`SingleFlight.is_current` tells the task's own thunk that its result
predates the invalidation and must not be stored.
"""

from __future__ import annotations

import asyncio
import fnmatch
from typing import Any, Awaitable, Callable, TypeVar

import structlog

_T = TypeVar("_T")

logger = structlog.get_logger(logger_name=__name__)


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Every waiter may have been cancelled; retrieve the exception anyway so
    # asyncio never reports it as unretrieved.
    if not task.cancelled():
        task.exception()


class SingleFlight:
    """Per-key registry of in-flight fetch tasks.

    Not thread-safe; intended for a single event loop, where registration
    and lookup never interleave with another coroutine.
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    async def do(self, key: str, thunk: Callable[[], Awaitable[_T]]) -> _T:
        """Run *thunk* once for all concurrent callers of *key*.

        Parameters
        ----------
        key:
            Identity of the logical request.
        thunk:
            Zero-argument callable returning the awaitable to run.  Only
            invoked when no fetch for *key* is already in flight.

        Returns
        -------
        The thunk's result; every concurrent caller receives the same value
        or the same exception.
        """
        task = self._in_flight.get(key)
        if task is not None:
            logger.debug("single_flight_joined", key=key)
        else:
            task = asyncio.ensure_future(self._run(key, thunk))
            task.add_done_callback(_consume_exception)
            self._in_flight[key] = task
            logger.debug("single_flight_started", key=key)

        # shield: a cancelled caller must not cancel the fetch other callers await.
        return await asyncio.shield(task)

    def in_flight(self, key: str) -> bool:
        """Return ``True`` while a current fetch for *key* has not settled."""
        return key in self._in_flight

    def is_current(self, key: str) -> bool:
        """Return ``True`` if the running task is still the registered fetch for *key*.

        Only meaningful when called from inside a thunk passed to :meth:`do`.
        """
        task = asyncio.current_task()
        return task is not None and self._in_flight.get(key) is task

    def discard(self, key: str) -> bool:
        """Drop the registration for exactly *key*."""
        return self._forget_where(lambda candidate: candidate == key) > 0

    def forget(self, prefix: str) -> int:
        """Drop the registration of every key starting with *prefix*."""
        return self._forget_where(lambda key: key.startswith(prefix))

    def forget_matching(self, pattern: str) -> int:
        """Drop the registration of every key matching the glob *pattern*."""
        return self._forget_where(lambda key: fnmatch.fnmatchcase(key, pattern))

    def forget_all(self) -> int:
        return self._forget_where(lambda key: True)

    def __len__(self) -> int:
        return len(self._in_flight)

    def _forget_where(self, predicate: Callable[[str], bool]) -> int:
        doomed = [key for key in self._in_flight if predicate(key)]
        for key in doomed:
            del self._in_flight[key]
        if doomed:
            logger.debug("single_flight_forgotten", keys=doomed)
        return len(doomed)

    async def _run(self, key: str, thunk: Callable[[], Awaitable[_T]]) -> _T:
        try:
            return await thunk()
        finally:
            # A forgotten key may already belong to a newer fetch.
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]
