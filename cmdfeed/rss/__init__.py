"""Feed fetching and parsing.

Provides:
- Immutable feed snapshots
- HTTP fetching with requests
- RSS/Atom parsing with feedparser
"""

from .feed_parser import Feed, FeedFetcher, Image, Item, Person, Snapshot, refresh

__all__ = [
    "Feed",
    "FeedFetcher",
    "Image",
    "Item",
    "Person",
    "Snapshot",
    "refresh",
]
