"""Exception hierarchy for wikigraph.

These are system failures: they travel inside ``SystemFailure`` outcomes and
are never accumulated. Recoverable domain errors are plain data, see
:mod:`wikigraph.types`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class WikigraphError(Exception):
    """Base exception for all wikigraph errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(WikigraphError):
    """Configuration validation or resolution failed."""


class ClientError(WikigraphError):
    """A request to the article service failed.

    Clients attach retry metadata so the retry loop can make bounded,
    deterministic decisions without substring matching.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        operation: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.operation = operation


class RateLimitError(ClientError):
    """Rate limit exceeded (HTTP 429 or a ``ratelimited`` API error)."""


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and every exception reachable through its cause or context."""
    seen: set[int] = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if id(current) not in seen:
            seen.add(id(current))
            yield current
            pending.extend(
                linked
                for linked in (current.__context__, current.__cause__)
                if linked is not None
            )
