"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off client classes as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

from wikigraph.result import WikiResult
from wikigraph.types import AmbiguousTitle, ArticleNotFound, TitleNotFound
from wikigraph.validated import Err, Ok

_DOMAIN_ERRORS = (AmbiguousTitle, ArticleNotFound, TitleNotFound)


def delayed(outcome: Any, delay_s: float = 0.0) -> WikiResult[Any]:
    """Return a pending result resolving to *outcome* after *delay_s*.

    An exception instance is raised while the result runs instead.
    """

    async def _resolve() -> Any:
        await asyncio.sleep(delay_s)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return WikiResult(_resolve())


def gated(outcome: Any, gate: asyncio.Event) -> WikiResult[Any]:
    """Return a pending result resolving to *outcome* once *gate* is set."""

    async def _resolve() -> Any:
        await gate.wait()
        return outcome

    return WikiResult(_resolve())


@dataclass
class ScriptedWikipedia:
    """Wikipedia double with scripted lookups.

    ``links`` maps an article to its links, a domain error, or an exception
    raised while the lookup runs. Unscripted articles have no links. Titles
    double as the search index.
    """

    links: dict[Any, Any] = field(default_factory=dict)
    titles: dict[Any, str] = field(default_factory=dict)
    search_failures: dict[str, Exception] = field(default_factory=dict)
    delay_s: float = 0.0
    link_calls: list[Any] = field(default_factory=list)
    search_calls: list[str] = field(default_factory=list)

    def links_from(self, article_id: Any) -> WikiResult[frozenset[Any]]:
        self.link_calls.append(article_id)
        entry = self.links.get(article_id, ())
        return delayed(self._outcome(entry), self.delay_s)

    def name_of_article(self, article_id: Any) -> WikiResult[str]:
        title = self.titles.get(article_id)
        if title is None:
            return delayed(Err((ArticleNotFound(article_id),)), self.delay_s)
        return delayed(Ok(title), self.delay_s)

    def search_id(self, title: str) -> WikiResult[Any]:
        self.search_calls.append(title)
        if title in self.search_failures:
            return delayed(self.search_failures[title], self.delay_s)
        for article_id, known in self.titles.items():
            if known == title:
                return delayed(Ok(article_id), self.delay_s)
        return delayed(Err((TitleNotFound(title),)), self.delay_s)

    @staticmethod
    def _outcome(entry: Any) -> Any:
        if isinstance(entry, Exception):
            return entry
        if isinstance(entry, _DOMAIN_ERRORS):
            return Err((entry,))
        return Ok(frozenset(entry))
