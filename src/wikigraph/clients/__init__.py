"""Clients implementing the :class:`Wikipedia` lookup protocol."""

from __future__ import annotations

from wikigraph.clients.base import Wikipedia
from wikigraph.clients.memory import InMemoryWikipedia
from wikigraph.clients.mediawiki import MediaWikiClient

__all__ = ["InMemoryWikipedia", "MediaWikiClient", "Wikipedia"]
