"""Article identifiers and the domain error taxonomy.

Domain errors are expected, recoverable outcomes of a lookup (a title that
does not exist, an id that was deleted). They are data carried inside ``Err``
outcomes, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

ArticleId = NewType("ArticleId", int)


@dataclass(frozen=True, slots=True)
class ArticleNotFound:
    """No article exists with this id."""

    article_id: ArticleId

    def __str__(self) -> str:
        return f"article {self.article_id} not found"


@dataclass(frozen=True, slots=True)
class TitleNotFound:
    """No article exists with this title."""

    title: str

    def __str__(self) -> str:
        return f"no article titled {self.title!r}"


@dataclass(frozen=True, slots=True)
class AmbiguousTitle:
    """The title resolves to a disambiguation page rather than one article."""

    title: str

    def __str__(self) -> str:
        return f"title {self.title!r} is ambiguous"


WikiError = ArticleNotFound | TitleNotFound | AmbiguousTitle

__all__ = [
    "AmbiguousTitle",
    "ArticleId",
    "ArticleNotFound",
    "TitleNotFound",
    "WikiError",
]
