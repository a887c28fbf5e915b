"""Bounded retries for idempotent API reads.

Only failures that a client explicitly marks as transient are retried, so
retry decisions never depend on matching error message text.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING, TypeVar

import httpx

from wikigraph._http import RETRYABLE_STATUS_CODES
from wikigraph.errors import ClientError, _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with optional full jitter and an elapsed-time cap."""

    # A search issues many small requests, so retries should help without
    # stretching tail latency.
    max_attempts: int = 3
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True
    max_elapsed_s: float | None = 15.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")

    def backoff(self, retry_index: int) -> float:
        """Return the sleep before retry number *retry_index* (1-based)."""
        base = self.initial_delay_s * self.backoff_multiplier ** max(0, retry_index - 1)
        base = min(self.max_delay_s, base)
        if base <= 0:
            return 0.0
        if not self.jitter:
            return base
        return random.random() * base  # noqa: S311


def should_retry_request(exc: BaseException) -> bool:
    """Return True when a failed read request should be retried.

    Cancellation is never retried. A ClientError is retried when it is marked
    retryable or carries a retryable HTTP status. Any other error is retried
    only when a timeout or transport failure appears in its chain.
    """
    if isinstance(exc, asyncio.CancelledError):
        return False

    if isinstance(exc, ClientError):
        return bool(exc.retryable) or exc.status_code in RETRYABLE_STATUS_CODES

    return any(
        isinstance(e, (TimeoutError, httpx.TimeoutException, httpx.TransportError))
        for e in _walk_exception_chain(exc)
    )


def _next_delay(policy: RetryPolicy, exc: BaseException, attempt: int) -> float:
    delay = policy.backoff(attempt)
    if isinstance(exc, ClientError) and exc.retry_after_s is not None:
        delay = max(delay, exc.retry_after_s)
    return delay


async def retry_async(
    factory: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[BaseException], bool] = should_retry_request,
) -> T:
    """Await ``factory()`` until it succeeds or *policy* gives up.

    The last error is re-raised unchanged when attempts run out, the elapsed
    budget is spent, or *should_retry* rejects it.
    """
    start = time.monotonic()
    attempt = 1
    while True:
        try:
            return await factory()
        except Exception as exc:
            if attempt >= policy.max_attempts or not should_retry(exc):
                raise
            delay = _next_delay(policy, exc, attempt)
            if policy.max_elapsed_s is not None:
                remaining = policy.max_elapsed_s - (time.monotonic() - start)
                if remaining <= 0:
                    raise
                delay = min(delay, remaining)
            logger.debug(
                "Attempt %d/%d failed (%s); retrying in %.2fs",
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
        if delay > 0:
            await asyncio.sleep(delay)
        attempt += 1
