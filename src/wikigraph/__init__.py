"""wikigraph: distances in the article link graph, computed asynchronously.

Public API:
    - Wikigraph: named_links(), breadth_first_search(), distance_matrix()
    - WikiResult: asynchronous result with Ok / Err / SystemFailure outcomes
    - MediaWikiClient / InMemoryWikipedia: article lookup clients
    - Config: client configuration
"""

from __future__ import annotations

import logging

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("wikigraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

from wikigraph.clients import InMemoryWikipedia, MediaWikiClient, Wikipedia
from wikigraph.config import Config
from wikigraph.errors import (
    ClientError,
    ConfigurationError,
    RateLimitError,
    WikigraphError,
)
from wikigraph.graph import Wikigraph
from wikigraph.result import Outcome, SystemFailure, WikiResult
from wikigraph.retry import RetryPolicy
from wikigraph.types import (
    AmbiguousTitle,
    ArticleId,
    ArticleNotFound,
    TitleNotFound,
    WikiError,
)
from wikigraph.validated import Err, Ok, Validated

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("wikigraph").addHandler(logging.NullHandler())

__all__ = [
    "AmbiguousTitle",
    "ArticleId",
    "ArticleNotFound",
    "ClientError",
    "Config",
    "ConfigurationError",
    "Err",
    "InMemoryWikipedia",
    "MediaWikiClient",
    "Ok",
    "Outcome",
    "RateLimitError",
    "RetryPolicy",
    "SystemFailure",
    "TitleNotFound",
    "Validated",
    "WikiError",
    "WikiResult",
    "Wikigraph",
    "WikigraphError",
    "Wikipedia",
]
