"""Asynchronous results with separate domain-error and system-failure channels.

A :class:`WikiResult` is a one-shot asynchronous computation. Once it completes
it holds exactly one outcome, and every ``await`` returns that same object:

- ``Ok(value)``: the computation succeeded.
- ``Err(errors)``: one or more recoverable domain errors, in order.
- ``SystemFailure(cause)``: an unexpected exception; fatal to composition.

Every block the class schedules runs under the capture rule: an ``Exception``
raised while it runs becomes a ``SystemFailure`` instead of propagating.
Cancellation is never captured.

Pending results are backed by tasks on the running event loop, so results must
be created from async code. Already-resolved results (``successful``,
``domain_error``, ``system_failure``) need no loop.

Example:
    result = client.search_id("Scala").flat_map(client.links_from)
    match await result:
        case Ok(links):
            ...
        case Err(errors):
            ...
        case SystemFailure(cause):
            ...
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from typing import TYPE_CHECKING, Any

from wikigraph import validated
from wikigraph.validated import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Generator, Iterable, Sequence

    from wikigraph.types import WikiError
    from wikigraph.validated import Validated

logger = logging.getLogger(__name__)

# The event loop only keeps weak references to tasks. Branches nobody awaits
# any more (an aggregate resolved early) must still run to completion.
_running: set[asyncio.Task[Any]] = set()


@dataclasses.dataclass(frozen=True, slots=True)
class SystemFailure:
    """An unexpected failure that short-circuits composition."""

    cause: Exception


type Outcome[A] = Ok[A] | Err[WikiError] | SystemFailure


async def _capture[A](source: Awaitable[Outcome[A]]) -> Outcome[A]:
    try:
        return await source
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        logger.debug("Captured %s as a system failure: %s", type(exc).__name__, exc)
        return SystemFailure(exc)


def _schedule[A](source: Awaitable[Outcome[A]]) -> asyncio.Task[Outcome[A]]:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        if inspect.iscoroutine(source):
            source.close()
        raise RuntimeError(
            "WikiResult needs a running event loop; create it from async code"
        ) from None
    task = loop.create_task(_capture(source))
    _running.add(task)
    task.add_done_callback(_running.discard)
    return task


class WikiResult[A]:
    """The eventual outcome of an asynchronous computation that may fail."""

    __slots__ = ("_source",)

    def __init__(self, source: Awaitable[Outcome[A]]) -> None:
        """Schedule *source* on the running loop under the capture rule."""
        self._source: Outcome[A] | asyncio.Task[Outcome[A]] = _schedule(source)

    @staticmethod
    def _resolved[B](outcome: Outcome[B]) -> WikiResult[B]:
        result: WikiResult[B] = WikiResult.__new__(WikiResult)
        result._source = outcome
        return result

    # --- Factories ---

    @staticmethod
    def successful[B](value: B) -> WikiResult[B]:
        """Return a result already resolved to ``Ok(value)``."""
        return WikiResult._resolved(Ok(value))

    @staticmethod
    def domain_error(error: WikiError) -> WikiResult[Any]:
        """Return a result already resolved to a single domain error."""
        return WikiResult._resolved(Err((error,)))

    @staticmethod
    def system_failure(cause: Exception) -> WikiResult[Any]:
        """Return a result already resolved to a system failure."""
        return WikiResult._resolved(SystemFailure(cause))

    @staticmethod
    def start[B](block: Callable[[], B]) -> WikiResult[B]:
        """Run the blocking callable *block* on a worker thread."""

        async def _run() -> Outcome[B]:
            return Ok(await asyncio.to_thread(block))

        return WikiResult(_run())

    # --- Observation ---

    def done(self) -> bool:
        """Return True once the outcome is available."""
        source = self._source
        return not isinstance(source, asyncio.Task) or source.done()

    async def outcome(self) -> Outcome[A]:
        """Wait for and return the outcome."""
        source = self._source
        if isinstance(source, asyncio.Task):
            # Shielded: a cancelled observer must not cancel the shared computation.
            return await asyncio.shield(source)
        return source

    def __await__(self) -> Generator[Any, None, Outcome[A]]:
        return self.outcome().__await__()

    def __repr__(self) -> str:
        source = self._source
        if not isinstance(source, asyncio.Task):
            return f"WikiResult({source!r})"
        if source.done() and not source.cancelled():
            return f"WikiResult({source.result()!r})"
        return "WikiResult(<pending>)"

    # --- Combinators ---

    def map[B](self, f: Callable[[A], B]) -> WikiResult[B]:
        """Transform the successful value; errors and failures pass through."""

        async def _map() -> Outcome[B]:
            match await self:
                case Ok(value):
                    return Ok(f(value))
                case other:
                    return other

        return WikiResult(_map())

    def flat_map[B](self, f: Callable[[A], WikiResult[B]]) -> WikiResult[B]:
        """Chain another computation on the successful value.

        *f* is never called when this result is a domain error or a system
        failure; that outcome propagates unchanged.
        """

        async def _flat_map() -> Outcome[B]:
            match await self:
                case Ok(value):
                    return await f(value)
                case other:
                    return other

        return WikiResult(_flat_map())

    def zip[B](self, that: WikiResult[B]) -> WikiResult[tuple[A, B]]:
        """Wait for both results concurrently and pair their values.

        A system failure on either side wins. Otherwise domain errors from both
        sides accumulate, this side's first.
        """

        async def _zip() -> Outcome[tuple[A, B]]:
            joined = await _join((self, that))
            if isinstance(joined, SystemFailure):
                return joined
            left, right = joined
            return validated.zip(left, right)

        return WikiResult(_zip())

    def or_else(self, solution: A) -> WikiResult[A]:
        """Recover from domain errors with *solution*; failures are kept."""

        async def _or_else() -> Outcome[A]:
            match await self:
                case Err():
                    return Ok(solution)
                case other:
                    return other

        return WikiResult(_or_else())

    def fallback_to(self, alternative: Callable[[], WikiResult[A]]) -> WikiResult[A]:
        """Replace domain errors with the outcome of ``alternative()``.

        *alternative* is only called when this result is a domain error. If
        both fail with domain errors only the alternative's errors are kept.
        """

        async def _fallback_to() -> Outcome[A]:
            outcome = await self
            if isinstance(outcome, Err):
                return await alternative()
            return outcome

        return WikiResult(_fallback_to())

    @staticmethod
    def traverse[T, B](
        items: Iterable[T], f: Callable[[T], WikiResult[B]]
    ) -> WikiResult[tuple[B, ...]]:
        """Apply *f* to every item concurrently and collect the values in order.

        - All branches succeed: ``Ok`` with values in input order.
        - Some branches have domain errors: ``Err`` with every error of every
          failing branch, in input order.
        - Any branch fails: that ``SystemFailure``, as soon as it is observed.
        """
        pending = tuple(items)

        async def _traverse() -> Outcome[tuple[B, ...]]:
            branches = [f(item) for item in pending]
            joined = await _join(branches)
            if isinstance(joined, SystemFailure):
                return joined
            return validated.sequence(joined)

        return WikiResult(_traverse())


async def _join(
    results: Sequence[WikiResult[Any]],
) -> list[Validated[WikiError, Any]] | SystemFailure:
    """Await *results* concurrently.

    Returns the first system failure observed in completion order, or every
    outcome in input order. Branches still running after an early return are
    left alone.
    """
    slots: list[Any] = [None] * len(results)
    waiting: dict[asyncio.Task[Outcome[Any]], list[int]] = {}
    for index, result in enumerate(results):
        source = result._source
        if isinstance(source, asyncio.Task):
            waiting.setdefault(source, []).append(index)
        elif isinstance(source, SystemFailure):
            return source
        else:
            slots[index] = source

    while waiting:
        done, _ = await asyncio.wait(
            waiting.keys(), return_when=asyncio.FIRST_COMPLETED
        )
        for task in done:
            outcome = task.result()
            if isinstance(outcome, SystemFailure):
                return outcome
            for index in waiting.pop(task):
                slots[index] = outcome
    return slots
