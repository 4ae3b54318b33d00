"""Builders for feed data shared by the tests."""

from datetime import datetime, timezone

from cmdfeed.rss.feed_parser import Feed, Item, Snapshot

FEED_URL = "https://example.com/feed.xml"
FETCH_TIME = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def day(n: int) -> datetime:
    """Midnight UTC on the given day of January 2024."""
    return datetime(2024, 1, n, tzinfo=timezone.utc)


def make_item(title: str, guid: str = "", updated=None, published=None, **kwargs) -> Item:
    """Build an Item with a description and link derived from its title."""
    return Item(
        title=title,
        description=f"About {title}",
        link=f"https://example.com/{title.lower().replace(' ', '-')}",
        guid=guid,
        updated=updated,
        published=published,
        **kwargs,
    )


def make_snapshot(items, fetch_time=FETCH_TIME, url=FEED_URL, title="Test Feed") -> Snapshot:
    """Build a Snapshot holding the given items."""
    return Snapshot(
        url=url,
        hash=f"hash-{len(items)}-{fetch_time.isoformat()}",
        fetch_time=fetch_time,
        feed=Feed(title=title, link="https://example.com", items=list(items)),
    )
