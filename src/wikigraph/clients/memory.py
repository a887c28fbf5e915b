"""In-memory client serving a fixed article graph."""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import TYPE_CHECKING

from wikigraph.result import WikiResult
from wikigraph.types import ArticleNotFound, TitleNotFound
from wikigraph.validated import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from wikigraph.result import Outcome
    from wikigraph.types import ArticleId


class InMemoryWikipedia:
    """Client over a fixed adjacency mapping, without network access.

    Every id that appears as a key of *links* or *titles* is a known article;
    known articles without an entry in *links* have no outgoing links. Lookups
    of unknown ids or titles are domain errors. Each call is counted in
    ``calls`` by method name.
    """

    def __init__(
        self,
        links: Mapping[ArticleId, Iterable[ArticleId]],
        titles: Mapping[ArticleId, str] | None = None,
        *,
        latency_s: float = 0.0,
    ) -> None:
        """Create a client; *latency_s* delays every response."""
        self._links = {article: frozenset(targets) for article, targets in links.items()}
        self._titles = dict(titles or {})
        self._ids = {title: article for article, title in self._titles.items()}
        self._known = self._links.keys() | self._titles.keys()
        self.latency_s = latency_s
        self.calls: Counter[str] = Counter()

    def links_from(self, article_id: ArticleId) -> WikiResult[frozenset[ArticleId]]:
        """Return the ids linked from *article_id*."""
        self.calls["links_from"] += 1
        if article_id not in self._known:
            return self._respond(Err((ArticleNotFound(article_id),)))
        return self._respond(Ok(self._links.get(article_id, frozenset())))

    def name_of_article(self, article_id: ArticleId) -> WikiResult[str]:
        """Return the title of *article_id*."""
        self.calls["name_of_article"] += 1
        title = self._titles.get(article_id)
        if title is None:
            return self._respond(Err((ArticleNotFound(article_id),)))
        return self._respond(Ok(title))

    def search_id(self, title: str) -> WikiResult[ArticleId]:
        """Return the id of the article titled *title*."""
        self.calls["search_id"] += 1
        article_id = self._ids.get(title)
        if article_id is None:
            return self._respond(Err((TitleNotFound(title),)))
        return self._respond(Ok(article_id))

    def _respond[A](self, outcome: Outcome[A]) -> WikiResult[A]:
        async def _deliver() -> Outcome[A]:
            await asyncio.sleep(self.latency_s)
            return outcome

        return WikiResult(_deliver())
