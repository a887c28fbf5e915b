"""Async single-flight memoization.

Concurrent lookups of the same key share one in-flight computation; the
first caller runs it and the others await the same Future.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Hashable


def consume_future_exception(fut: asyncio.Future[Any]) -> None:
    """Avoid 'Future exception was never retrieved' for coordination futures."""
    if not fut.cancelled():
        fut.exception()


class SingleFlight[K: Hashable, V]:
    """Per-key memo of async computations.

    Values are kept for the lifetime of the instance. A failure reaches every
    caller waiting on that key and is then forgotten, so the next call runs
    the computation again.
    """

    def __init__(self) -> None:
        self._values: dict[K, V] = {}
        self._inflight: dict[K, asyncio.Future[V]] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    async def get(self, key: K, work: Callable[[], Awaitable[V]]) -> V:
        """Return the value for *key*, running *work* only if nobody else is.

        A caller waiting on a leader that gets cancelled runs *work* itself
        instead of inheriting the cancellation.
        """
        while True:
            if key in self._values:
                return self._values[key]

            # No await between the lookup and the registration below, so
            # exactly one caller becomes the leader for a key.
            pending = self._inflight.get(key)
            if pending is None:
                break
            try:
                return await asyncio.shield(pending)
            except asyncio.CancelledError:
                current = asyncio.current_task()
                if not pending.cancelled() or (current and current.cancelling()):
                    raise

        fut: asyncio.Future[V] = asyncio.get_running_loop().create_future()
        fut.add_done_callback(consume_future_exception)
        self._inflight[key] = fut
        try:
            value = await work()
        except asyncio.CancelledError:
            fut.cancel()
            raise
        except Exception as exc:
            fut.set_exception(exc)
            raise
        else:
            self._values[key] = value
            fut.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)
