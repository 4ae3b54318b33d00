"""Feedly search client for finding general RSS/Atom feeds."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import requests

from ..errors import FetchError

logger = logging.getLogger(__name__)

FEEDLY_SEARCH_URL = "https://cloud.feedly.com/v3/search/feeds"

# Feedly prefixes feed ids with this before the feed URL
FEED_ID_PREFIX = "feed/"


@dataclass
class FeedlyEntry:
    """A feed found in the Feedly directory."""

    title: str = ""
    website: str = ""
    feed_id: str = ""

    @property
    def feed_url(self) -> str:
        return self.feed_id.replace(FEED_ID_PREFIX, "", 1)


@dataclass
class FeedlyResult:
    """Decoded Feedly search response."""

    hint: str = ""
    results: List[FeedlyEntry] = field(default_factory=list)
    related: List[str] = field(default_factory=list)


def search_feeds(
    query: str,
    timeout: float = 10.0,
    session: Optional[requests.Session] = None,
) -> FeedlyResult:
    """Search Feedly for feeds matching a query.

    Args:
        query: Search text (a topic, site name or URL)
        timeout: Request timeout in seconds
        session: Optional requests session to reuse

    Returns:
        FeedlyResult with the matching feeds

    Raises:
        FetchError: If the request fails or the body is not JSON
    """
    logger.info(f"Searching Feedly for: {query}")
    http = session or requests

    try:
        response = http.get(FEEDLY_SEARCH_URL, params={"query": query}, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        raise FetchError(f"searching feedly: {e}") from e

    return FeedlyResult(
        hint=data.get("hint", ""),
        results=[
            FeedlyEntry(
                title=item.get("title", ""),
                website=item.get("website", ""),
                feed_id=item.get("feedId", ""),
            )
            for item in data.get("results", [])
        ],
        related=data.get("related", []),
    )
