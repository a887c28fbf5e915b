"""Graph algorithms over the article link graph.

The graph is never loaded up front: edges are discovered one article at a time
through the client's ``links_from`` lookup, so every algorithm here is an
asynchronous computation returning a :class:`~wikigraph.result.WikiResult`.
"""

from __future__ import annotations

from collections import deque
import logging
from typing import TYPE_CHECKING

from wikigraph.result import SystemFailure, WikiResult
from wikigraph.validated import Err, Ok

if TYPE_CHECKING:
    from collections.abc import Iterable

    from wikigraph.clients.base import Wikipedia
    from wikigraph.result import Outcome
    from wikigraph.types import ArticleId

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50

Distance = tuple[str, str, int | None]


class Wikigraph:
    """Analyze the graph of articles served by *client*."""

    def __init__(self, client: Wikipedia) -> None:
        self._client = client

    def named_links(self, of: ArticleId) -> WikiResult[frozenset[str]]:
        """Return the titles of the articles linked from *of*."""
        client = self._client
        return (
            client.links_from(of)
            .flat_map(lambda links: WikiResult.traverse(links, client.name_of_article))
            .map(frozenset)
        )

    def breadth_first_search(
        self, start: ArticleId, target: ArticleId, max_depth: int
    ) -> WikiResult[int | None]:
        """Compute the number of hops from *start* to *target*.

        Resolves to ``Ok(None)`` when *target* is not reached within
        *max_depth* hops. A domain error while fetching the links of one
        article only removes that article from the search; a system failure
        ends the search with that failure.
        """
        if start == target:
            return WikiResult.successful(0)
        return WikiResult(self._search(start, target, max_depth))

    async def _search(
        self, start: ArticleId, target: ArticleId, max_depth: int
    ) -> Outcome[int | None]:
        frontier: deque[tuple[int, ArticleId]] = deque([(1, start)])
        visited: set[ArticleId] = {start}

        while frontier:
            distance, article = frontier.popleft()
            if distance > max_depth:
                break
            if article == target:
                return Ok(distance)

            match await self._client.links_from(article):
                case Ok(links):
                    if target in links:
                        logger.debug(
                            "Reached %s from %s in %d hop(s), %d article(s) seen",
                            target,
                            start,
                            distance,
                            len(visited),
                        )
                        return Ok(distance)
                    visited.update(links)
                    # Neighbors are enqueued even when already visited.
                    frontier.extend((distance + 1, link) for link in links)
                case Err(errors):
                    logger.debug("Skipping article %s: %s", article, errors)
                case SystemFailure() as failure:
                    return failure

        logger.debug(
            "No path from %s to %s within %d hop(s), %d article(s) seen",
            start,
            target,
            max_depth,
            len(visited),
        )
        return Ok(None)

    def distance_matrix(
        self, titles: Iterable[str], max_depth: int = DEFAULT_MAX_DEPTH
    ) -> WikiResult[tuple[Distance, ...]]:
        """Compute the distance between every ordered pair of distinct titles.

        Pairs are ordered by source title, then target title, following the
        order of *titles*. Each entry is ``(from_title, to_title, distance)``.
        """
        titles = list(titles)
        pairs = [
            (from_title, to_title)
            for from_title in titles
            for to_title in titles
            if from_title != to_title
        ]
        return WikiResult.traverse(
            pairs,
            lambda pair: self.distance(pair[0], pair[1], max_depth).map(
                lambda distance: (pair[0], pair[1], distance)
            ),
        )

    def distance(
        self, from_title: str, to_title: str, max_depth: int = DEFAULT_MAX_DEPTH
    ) -> WikiResult[int | None]:
        """Compute the number of hops between the articles titled as given.

        Both titles are looked up concurrently, but an unknown *from_title*
        ends the search with that error alone.
        """
        client = self._client
        from_id = client.search_id(from_title)
        to_id = client.search_id(to_title)
        return from_id.flat_map(
            lambda start: to_id.flat_map(
                lambda target: self.breadth_first_search(start, target, max_depth)
            )
        )
