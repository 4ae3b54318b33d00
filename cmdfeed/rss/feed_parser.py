"""RSS/Atom feed fetching and parsing into immutable snapshots.

Uses requests to download a feed in a single GET and the feedparser
library to turn the body into a normalized Feed structure.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import feedparser
import requests

from ..errors import FetchError, ParseError

logger = logging.getLogger(__name__)


@dataclass
class Person:
    """An author or contributor named in a feed."""

    name: str = ""
    email: str = ""


@dataclass
class Image:
    """Artwork attached to a feed or an item."""

    url: str = ""
    title: str = ""


@dataclass
class Item:
    """One entry of a feed as parsed from the source document."""

    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    updated: Optional[datetime] = None
    published: Optional[datetime] = None
    author: Optional[Person] = None
    guid: str = ""
    image: Optional[Image] = None
    categories: List[str] = field(default_factory=list)


@dataclass
class Feed:
    """Channel-level data of a feed plus its items in document order."""

    title: str = ""
    description: str = ""
    link: str = ""
    feed_link: str = ""
    updated: Optional[datetime] = None
    published: Optional[datetime] = None
    author: Optional[Person] = None
    language: str = ""
    image: Optional[Image] = None
    copyright: str = ""
    categories: List[str] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)


@dataclass(frozen=True)
class Snapshot:
    """The result of fetching and parsing a feed URL once."""

    url: str
    hash: str
    fetch_time: datetime
    feed: Feed


class FeedFetcher:
    """Fetches feeds over HTTP and parses them into Snapshots.

    Example:
        fetcher = FeedFetcher(timeout=10)
        snapshot = fetcher.fetch("https://example.com/feed.xml")
        print(f"{snapshot.feed.title}: {len(snapshot.feed.items)} items")
    """

    USER_AGENT = "cmdfeed/0.1 (+https://github.com/cmdfeed)"
    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """Initialize the fetcher.

        Args:
            user_agent: Custom user agent string for requests
            timeout: Seconds to wait for the server before giving up
            session: Optional requests session to reuse
        """
        self.user_agent = user_agent or self.USER_AGENT
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self.user_agent})

    def fetch(self, url: str) -> Snapshot:
        """Download and parse the feed at a URL.

        Args:
            url: URL of the RSS/Atom feed

        Returns:
            Snapshot stamped with the current UTC time

        Raises:
            FetchError: If the request fails or returns a non-2xx status
            ParseError: If the body is not an RSS or Atom document
        """
        logger.info(f"Fetching feed: {url}")

        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            content = response.content
        except requests.RequestException as e:
            raise FetchError(f"failed to fetch rss feed {url}: {e}") from e

        return self.parse_bytes(content, url)

    def parse_bytes(
        self, content: bytes, url: str = "", fetch_time: Optional[datetime] = None
    ) -> Snapshot:
        """Parse a raw feed body into a Snapshot.

        Args:
            content: Raw bytes of the feed document
            url: URL the body was fetched from
            fetch_time: Time of the fetch; defaults to now (UTC)

        Returns:
            Snapshot of the parsed feed

        Raises:
            ParseError: If feedparser cannot recognize the document
        """
        digest = hashlib.md5(content).hexdigest()

        parsed = feedparser.parse(content)
        if not parsed.get("version"):
            reason = parsed.get("bozo_exception") or "unrecognized feed format"
            raise ParseError(f"failed to parse rss feed {url}: {reason}")

        if parsed.bozo and parsed.get("bozo_exception"):
            logger.warning(f"Feed parsing warning for {url}: {parsed.bozo_exception}")

        if fetch_time is None:
            fetch_time = datetime.now(timezone.utc)

        feed = self._parse_feed(parsed)
        logger.info(f"Parsed feed '{feed.title}' with {len(feed.items)} items")

        return Snapshot(url=url, hash=digest, fetch_time=fetch_time, feed=feed)

    def _parse_feed(self, parsed: feedparser.FeedParserDict) -> Feed:
        f = parsed.feed

        items = []
        for entry in parsed.entries:
            if not entry:
                continue
            items.append(self._parse_item(entry))

        return Feed(
            title=f.get("title", ""),
            description=f.get("description") or f.get("subtitle") or "",
            link=f.get("link", ""),
            feed_link=f.get("link", ""),
            updated=_parsed_time(f, "updated_parsed"),
            published=_parsed_time(f, "published_parsed"),
            author=_person(f),
            language=f.get("language", ""),
            image=_image(f.get("image")),
            copyright=f.get("rights", ""),
            categories=_categories(f),
            items=items,
        )

    def _parse_item(self, entry: feedparser.FeedParserDict) -> Item:
        content = ""
        if entry.get("content"):
            content = entry.content[0].get("value", "")

        return Item(
            title=entry.get("title", ""),
            description=entry.get("description") or entry.get("summary") or "",
            content=content,
            link=entry.get("link", ""),
            updated=_parsed_time(entry, "updated_parsed"),
            published=_parsed_time(entry, "published_parsed"),
            author=_person(entry),
            guid=entry.get("id", ""),
            image=_image(entry.get("image")),
            categories=_categories(entry),
        )


def refresh(snapshot: Snapshot, fetcher: Optional[FeedFetcher] = None) -> Snapshot:
    """Fetch the snapshot's URL again and return a new Snapshot.

    The given snapshot is left untouched.
    """
    fetcher = fetcher or FeedFetcher()
    return fetcher.fetch(snapshot.url)


def _parsed_time(node: feedparser.FeedParserDict, key: str) -> Optional[datetime]:
    # only look at keys the document actually set; feedparser may alias
    # updated_parsed to published_parsed on item access
    if key not in node:
        return None
    value = node[key]
    if not value:
        return None
    try:
        return datetime(*value[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def _person(node: feedparser.FeedParserDict) -> Optional[Person]:
    detail = node.get("author_detail")
    if detail:
        return Person(name=detail.get("name", ""), email=detail.get("email", ""))
    if node.get("author"):
        return Person(name=node.author)
    return None


def _image(value) -> Optional[Image]:
    if not value:
        return None
    if isinstance(value, dict):
        return Image(
            url=value.get("href") or value.get("url") or "",
            title=value.get("title", ""),
        )
    return Image(url=str(value))


def _categories(node: feedparser.FeedParserDict) -> List[str]:
    return [tag.get("term") for tag in node.get("tags", []) if tag.get("term")]
