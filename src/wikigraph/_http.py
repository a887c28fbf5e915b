"""Small HTTP-related constants shared across wikigraph.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

# Retryable status codes shared by client error mapping and core retry.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

# MediaWiki API error codes that signal a temporary condition.
RETRYABLE_API_CODES: frozenset[str] = frozenset({"maxlag", "ratelimited", "readonly"})
