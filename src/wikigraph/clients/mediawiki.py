"""MediaWiki Action API client.

Talks to ``api.php`` with ``formatversion=2`` JSON. Lookups that find nothing
are domain errors; HTTP, transport, API-level and parsing failures raise
:class:`~wikigraph.errors.ClientError`, which the result layer turns into a
system failure.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field

from wikigraph._http import RETRYABLE_API_CODES
from wikigraph._singleflight import SingleFlight
from wikigraph.clients._errors import wrap_client_error
from wikigraph.config import Config
from wikigraph.errors import ClientError, RateLimitError
from wikigraph.result import WikiResult
from wikigraph.retry import retry_async, should_retry_request
from wikigraph.types import AmbiguousTitle, ArticleId, ArticleNotFound, TitleNotFound
from wikigraph.validated import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

    from wikigraph.result import Outcome

logger = logging.getLogger(__name__)

_BASE_PARAMS: dict[str, str] = {
    "action": "query",
    "format": "json",
    "formatversion": "2",
}


# --- Response schema ---


class Page(BaseModel):
    """One entry of ``query.pages``."""

    model_config = ConfigDict(extra="ignore")

    pageid: int | None = None
    title: str = ""
    missing: bool = False
    invalid: bool = False
    pageprops: dict[str, Any] = Field(default_factory=dict)


class Query(BaseModel):
    model_config = ConfigDict(extra="ignore")

    pages: list[Page] = Field(default_factory=list)


class ApiErrorBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    code: str
    info: str = ""


class QueryResponse(BaseModel):
    """Top-level ``action=query`` response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    query: Query | None = None
    continuation: dict[str, Any] | None = Field(default=None, alias="continue")
    error: ApiErrorBody | None = None

    def first_page(self) -> Page | None:
        if self.query is None or not self.query.pages:
            return None
        return self.query.pages[0]


def _api_error(body: ApiErrorBody, operation: str) -> ClientError:
    err_cls: type[ClientError] = (
        RateLimitError if body.code == "ratelimited" else ClientError
    )
    return err_cls(
        f"MediaWiki {operation} failed: {body.code}: {body.info}",
        retryable=body.code in RETRYABLE_API_CODES,
        operation=operation,
    )


class MediaWikiClient:
    """Article lookups against a MediaWiki installation.

    Title and name lookups are memoized for the lifetime of the client, and
    concurrent identical lookups share one request. Link lists are always
    fetched fresh.

    Example:
        async with MediaWikiClient(Config()) as client:
            graph = Wikigraph(client)
            outcome = await graph.distance_matrix(["Scala", "Python"], max_depth=3)
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client; an injected *http_client* is not closed by ``aclose``."""
        self.config = config if config is not None else Config()
        self._owns_http = http_client is None
        self._http = (
            http_client
            if http_client is not None
            else httpx.AsyncClient(timeout=self.config.timeout_s)
        )
        self._semaphore = asyncio.Semaphore(self.config.request_concurrency)
        self._lookups: SingleFlight[tuple[str, object], Any] = SingleFlight()

    # --- Wikipedia protocol ---

    def links_from(self, article_id: ArticleId) -> WikiResult[frozenset[ArticleId]]:
        """Return the ids of main-namespace articles linked from *article_id*.

        Links to pages that do not exist are ignored. When no links come back
        the article itself is looked up, so an unknown *article_id* resolves
        to ``ArticleNotFound``.
        """
        return WikiResult(self._links_from(article_id))

    def name_of_article(self, article_id: ArticleId) -> WikiResult[str]:
        """Return the title of *article_id*."""
        return WikiResult(
            self._memoized(
                ("name", article_id), lambda: self._name_of_article(article_id)
            )
        )

    def search_id(self, title: str) -> WikiResult[ArticleId]:
        """Return the id of *title*, following redirects."""
        return WikiResult(self._memoized(("id", title), lambda: self._search_id(title)))

    # --- Lifecycle ---

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    # --- Lookups ---

    async def _links_from(self, article_id: ArticleId) -> Outcome[frozenset[ArticleId]]:
        params = {
            "generator": "links",
            "pageids": str(article_id),
            "gplnamespace": "0",
            "gpllimit": "max",
        }
        links: set[ArticleId] = set()
        continuation: dict[str, str] = {}
        while True:
            response = await self._query({**params, **continuation}, "links_from")
            if response.query is not None:
                links.update(
                    ArticleId(page.pageid)
                    for page in response.query.pages
                    if page.pageid is not None and not page.missing
                )
            if not response.continuation:
                break
            continuation = {k: str(v) for k, v in response.continuation.items()}
        if not links:
            # A generator query cannot tell a missing page from one without links.
            match await self._memoized(
                ("name", article_id), lambda: self._name_of_article(article_id)
            ):
                case Err() as missing:
                    return missing
        logger.debug("Article %s links to %d article(s)", article_id, len(links))
        return Ok(frozenset(links))

    async def _name_of_article(self, article_id: ArticleId) -> Outcome[str]:
        response = await self._query({"pageids": str(article_id)}, "name_of_article")
        page = response.first_page()
        if page is None or page.missing or page.invalid:
            return Err((ArticleNotFound(article_id),))
        return Ok(page.title)

    async def _search_id(self, title: str) -> Outcome[ArticleId]:
        response = await self._query(
            {
                "titles": title,
                "redirects": "1",
                "prop": "pageprops",
                "ppprop": "disambiguation",
            },
            "search_id",
        )
        page = response.first_page()
        if page is None or page.missing or page.invalid or page.pageid is None:
            return Err((TitleNotFound(title),))
        if "disambiguation" in page.pageprops:
            return Err((AmbiguousTitle(title),))
        return Ok(ArticleId(page.pageid))

    async def _memoized[A](
        self, key: tuple[str, object], work: Callable[[], Awaitable[Outcome[A]]]
    ) -> Outcome[A]:
        return await self._lookups.get(key, work)

    async def _query(self, params: dict[str, str], operation: str) -> QueryResponse:
        async def _send() -> QueryResponse:
            async with self._semaphore:
                try:
                    response = await self._http.get(
                        self.config.api_url or "",
                        params={**_BASE_PARAMS, **params},
                        headers={"User-Agent": self.config.user_agent or ""},
                    )
                    response.raise_for_status()
                    payload = QueryResponse.model_validate(response.json())
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    raise wrap_client_error(
                        exc,
                        operation=operation,
                        message=f"MediaWiki {operation} failed",
                    ) from exc
            if payload.error is not None:
                raise _api_error(payload.error, operation)
            return payload

        policy = self.config.retry
        if policy.max_attempts <= 1:
            return await _send()
        return await retry_async(
            _send, policy=policy, should_retry=should_retry_request
        )
