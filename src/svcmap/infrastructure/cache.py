"""RemoteCallCache — keyed memoizer for asynchronous remote calls.

Every invocation with a key that is already pending or already succeeded
awaits the same ``asyncio`` task, so at most one outbound call is in
flight per key. Each caller gets its own shield around that task:
cancelling one caller (a ``wait_for`` timeout, a cancelled ``gather``)
leaves the shared call running for everyone else.

A task that fails evicts its own entry when it settles; the next
invocation with that key starts a fresh call. There is no TTL and no
other eviction. Check-then-insert is atomic under the single-threaded
event loop; this class is not safe to share across threads.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


class RemoteCallCache:
    """Holds in-flight and completed remote calls keyed by caller-chosen strings."""

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Task[Any]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def clear(self) -> None:
        """Drop every entry. Pending tasks keep running for their current awaiters."""
        self._entries.clear()

    def memoize(
        self,
        call: Callable[P, Coroutine[Any, Any, T]],
        key_of: Callable[P, str],
    ) -> Callable[P, asyncio.Future[T]]:
        """Wrap *call* so that invocations sharing a key share one task.

        *key_of* receives the same arguments as *call* and must map every
        distinct set of arguments that matters to a distinct key. The
        returned function must be invoked with a running event loop.
        """

        @functools.wraps(call)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> asyncio.Future[T]:
            key = key_of(*args, **kwargs)
            task = self._entries.get(key)
            if task is not None:
                logger.debug("Cache hit for %s", key)
            else:
                task = asyncio.ensure_future(call(*args, **kwargs))
                task.add_done_callback(functools.partial(self._evict_on_failure, key))
                self._entries[key] = task
            return asyncio.shield(task)

        return wrapper

    def _evict_on_failure(self, key: str, task: asyncio.Task[Any]) -> None:
        if not task.cancelled() and task.exception() is None:
            return
        if self._entries.get(key) is task:
            del self._entries[key]
            logger.debug("Evicted failed call for %s", key)
