"""Catalog search clients for discovering feeds."""

from .feedly import FeedlyEntry, FeedlyResult, search_feeds
from .itunes import ItunesResult, ItunesSearchClient, PodcastResult, SearchParams, search_podcasts

__all__ = [
    "FeedlyEntry",
    "FeedlyResult",
    "search_feeds",
    "ItunesResult",
    "ItunesSearchClient",
    "PodcastResult",
    "SearchParams",
    "search_podcasts",
]
