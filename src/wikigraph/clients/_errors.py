"""Client-side error helpers.

Clients attach retry metadata via ClientError so core retry logic can be
bounded and deterministic without brittle substring matching.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from wikigraph._http import RETRYABLE_STATUS_CODES
from wikigraph.errors import ClientError, RateLimitError, _walk_exception_chain


def extract_status_code(exc: BaseException) -> int | None:
    """Walk the exception chain to find an HTTP status code."""
    for e in _walk_exception_chain(exc):
        value = getattr(e, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
        response = getattr(e, "response", None)
        value = getattr(response, "status_code", None)
        if isinstance(value, int) and 100 <= value <= 599:
            return value
    return None


def extract_retry_after_s(exc: BaseException) -> float | None:
    """Walk the exception chain to find a ``Retry-After`` delay in seconds."""
    for e in _walk_exception_chain(exc):
        response = getattr(e, "response", None)
        headers: Any = getattr(response, "headers", None)
        if headers is None:
            continue
        raw = headers.get("Retry-After")
        if not isinstance(raw, str) or not raw.strip():
            continue
        try:
            seconds = float(raw)
        except ValueError:
            continue
        if seconds >= 0:
            return seconds
    return None


def _status_hint(status_code: int | None) -> str | None:
    if status_code == 403:
        return "The API refused the request; set WIKIGRAPH_USER_AGENT to a descriptive agent with contact details."
    if status_code == 404:
        return "Check WIKIGRAPH_API_URL points at a MediaWiki api.php endpoint."
    if status_code == 429:
        return "Rate limit exceeded; lower request_concurrency or retry later."
    return None


def wrap_client_error(
    exc: BaseException,
    *,
    operation: str,
    message: str | None = None,
    hint: str | None = None,
) -> ClientError:
    """Map httpx and parsing exceptions into ClientError with retry metadata."""
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    # Already wrapped: fill in missing context only.
    if isinstance(exc, ClientError):
        if exc.operation is None:
            exc.operation = operation
        if hint is not None and exc.hint is None:
            exc.hint = hint
        return exc

    status_code = extract_status_code(exc)
    retry_after_s = extract_retry_after_s(exc)

    retryable = retry_after_s is not None
    if isinstance(status_code, int):
        retryable = retryable or status_code in RETRYABLE_STATUS_CODES
    else:
        for e in _walk_exception_chain(exc):
            if isinstance(e, (httpx.TimeoutException, httpx.TransportError)):
                retryable = True
                break

    err_cls: type[ClientError] = RateLimitError if status_code == 429 else ClientError
    msg = message or f"{operation} failed"
    status_note = f" (status={status_code})" if isinstance(status_code, int) else ""
    cause = str(exc)
    return err_cls(
        f"{msg}{status_note}: {cause}" if cause else f"{msg}{status_note}",
        hint=hint if hint is not None else _status_hint(status_code),
        retryable=retryable,
        status_code=status_code,
        retry_after_s=retry_after_s,
        operation=operation,
    )
