"""Subscription-level entries derived from feed items.

An Entry is identified by its GUID when the publisher supplies one and by a
hash of its full content otherwise, so an edited entry without a GUID is a
new entry.
"""

import hashlib
import json
import logging
from dataclasses import astuple, dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from ..errors import IdentityError
from ..rss.feed_parser import Item, Snapshot

logger = logging.getLogger(__name__)


@dataclass
class Entry:
    """One feed item as tracked by a subscription."""

    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    updated: Optional[datetime] = None
    published: Optional[datetime] = None
    author_name: str = ""
    author_email: str = ""
    image_url: str = ""
    image_title: str = ""
    guid: str = ""
    categories: List[str] = field(default_factory=list)


def to_entries(snapshot: Snapshot) -> List[Entry]:
    """Convert every item of a snapshot into an Entry, in feed order.

    Missing timestamps fall back to the snapshot's fetch time.
    """
    entries = []
    for item in snapshot.feed.items:
        if item is None:
            continue
        entries.append(_to_entry(item, snapshot.fetch_time))
    return entries


def _to_entry(item: Item, fetch_time: datetime) -> Entry:
    entry = Entry(
        title=item.title,
        description=item.description,
        content=item.content,
        link=item.link,
        updated=_as_utc(item.updated) if item.updated else fetch_time,
        published=_as_utc(item.published) if item.published else fetch_time,
        guid=item.guid,
        categories=list(item.categories),
    )
    if item.author is not None:
        entry.author_name = item.author.name
        entry.author_email = item.author.email
    if item.image is not None:
        entry.image_url = item.image.url
        entry.image_title = item.image.title
    return entry


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def identity(entry: Entry) -> str:
    """Return the deduplication key of an entry.

    Args:
        entry: Entry to identify

    Returns:
        The entry's GUID, or the hex MD5 of its fields in declaration order

    Raises:
        IdentityError: If the entry's fields cannot be serialized
    """
    if entry.guid:
        return entry.guid

    try:
        canonical = json.dumps(astuple(entry), default=_encode_value, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise IdentityError(f"computing entry identity: {e}") from e

    return hashlib.md5(canonical.encode("utf-8")).hexdigest()


def _encode_value(value):
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not serializable")
