"""Client protocol: the three lookups the graph algorithms depend on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wikigraph.result import WikiResult
    from wikigraph.types import ArticleId


@runtime_checkable
class Wikipedia(Protocol):
    """Minimal article service: outgoing links, titles and title search."""

    def links_from(self, article_id: ArticleId) -> WikiResult[frozenset[ArticleId]]:
        """Return the ids of the articles linked from *article_id*."""
        ...

    def name_of_article(self, article_id: ArticleId) -> WikiResult[str]:
        """Return the title of the article *article_id*."""
        ...

    def search_id(self, title: str) -> WikiResult[ArticleId]:
        """Return the id of the article titled *title*."""
        ...
