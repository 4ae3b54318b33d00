"""Encoding of podcast records to and from stored bytes.

Records are stored as compact UTF-8 JSON maps with named fields, described by
the pydantic models below. Fields still holding their default ("" for text,
False, an empty list, None for optional values) are left out and come back as
that default on decode. Decoding is strict: a value of the wrong JSON type is
an error, not a conversion.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import AliasChoices, AwareDatetime, BaseModel, ConfigDict, Field, ValidationError

from ..errors import SerializationError
from ..rss.feed_parser import Feed, Image, Item, Person, Snapshot
from ..subscription.entry import Entry
from ..subscription.state import Options, SubscriptionState
from .models import Podcast, PodcastOptions


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    return value.astimezone(timezone.utc) if value is not None else None


class _Record(BaseModel):
    """Base for stored record models; built from the in-memory dataclasses."""

    model_config = ConfigDict(from_attributes=True)


class PersonRecord(_Record):
    name: str = ""
    email: str = ""


class ImageRecord(_Record):
    url: str = ""
    title: str = ""


class ItemRecord(_Record):
    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    updated: Optional[AwareDatetime] = None
    published: Optional[AwareDatetime] = None
    author: Optional[PersonRecord] = None
    guid: str = ""
    image: Optional[ImageRecord] = None
    categories: List[str] = []

    def to_item(self) -> Item:
        return Item(
            title=self.title,
            description=self.description,
            content=self.content,
            link=self.link,
            updated=_utc(self.updated),
            published=_utc(self.published),
            author=Person(**self.author.model_dump()) if self.author else None,
            guid=self.guid,
            image=Image(**self.image.model_dump()) if self.image else None,
            categories=list(self.categories),
        )


class FeedRecord(_Record):
    title: str = ""
    description: str = ""
    link: str = ""
    feed_link: str = Field(
        default="",
        validation_alias=AliasChoices("feedLink", "feed_link"),
        serialization_alias="feedLink",
    )
    updated: Optional[AwareDatetime] = None
    published: Optional[AwareDatetime] = None
    author: Optional[PersonRecord] = None
    language: str = ""
    image: Optional[ImageRecord] = None
    copyright: str = ""
    categories: List[str] = []
    # no default, so items is written even when empty
    items: List[ItemRecord]

    def to_feed(self) -> Feed:
        return Feed(
            title=self.title,
            description=self.description,
            link=self.link,
            feed_link=self.feed_link,
            updated=_utc(self.updated),
            published=_utc(self.published),
            author=Person(**self.author.model_dump()) if self.author else None,
            language=self.language,
            image=Image(**self.image.model_dump()) if self.image else None,
            copyright=self.copyright,
            categories=list(self.categories),
            items=[item.to_item() for item in self.items],
        )


class SnapshotRecord(_Record):
    url: str = ""
    hash: str = ""
    fetch_time: AwareDatetime = Field(
        validation_alias=AliasChoices("fetchTime", "fetch_time"),
        serialization_alias="fetchTime",
    )
    feed: FeedRecord

    def to_snapshot(self) -> Snapshot:
        return Snapshot(
            url=self.url,
            hash=self.hash,
            fetch_time=_utc(self.fetch_time),
            feed=self.feed.to_feed(),
        )


class EntryRecord(_Record):
    title: str = ""
    description: str = ""
    content: str = ""
    link: str = ""
    updated: Optional[AwareDatetime] = None
    published: Optional[AwareDatetime] = None
    author_name: str = ""
    author_email: str = ""
    image_url: str = ""
    image_title: str = ""
    guid: str = ""
    categories: List[str] = []

    def to_entry(self) -> Entry:
        values = self.model_dump()
        values["updated"] = _utc(self.updated)
        values["published"] = _utc(self.published)
        return Entry(**values)


class OptionsRecord(_Record):
    include_removed_entries: bool = False


class StateRecord(_Record):
    id: str
    snapshot: SnapshotRecord
    entries: List[EntryRecord] = []
    options: OptionsRecord

    def to_state(self) -> SubscriptionState:
        return SubscriptionState(
            id=self.id,
            snapshot=self.snapshot.to_snapshot(),
            entries=[entry.to_entry() for entry in self.entries],
            options=Options(**self.options.model_dump()),
        )


class PodcastOptionsRecord(_Record):
    # None and "" are distinct: only None is left out
    download_directory: Optional[str] = None
    recent_entries: Optional[int] = None


class PodcastRecord(_Record):
    """Top-level stored form of a Podcast."""

    slug: str
    subscription: StateRecord = Field(
        validation_alias=AliasChoices("sub_state", "subscription"),
        serialization_alias="sub_state",
    )
    downloaded: Dict[str, str]
    options: PodcastOptionsRecord = Field(
        validation_alias=AliasChoices("podcast_options", "options"),
        serialization_alias="podcast_options",
    )

    def to_podcast(self) -> Podcast:
        return Podcast(
            slug=self.slug,
            subscription=self.subscription.to_state(),
            downloaded=dict(self.downloaded),
            options=PodcastOptions(**self.options.model_dump()),
        )


def encode_podcast(podcast: Podcast) -> bytes:
    """Serialize a podcast record.

    Raises:
        SerializationError: If a field cannot be represented
    """
    try:
        record = PodcastRecord.model_validate(podcast)
    except ValidationError as e:
        raise SerializationError(f"encoding podcast: {e}") from e

    return record.model_dump_json(by_alias=True, exclude_defaults=True).encode("utf-8")


def decode_podcast(data: bytes) -> Podcast:
    """Deserialize a podcast record produced by `encode_podcast`.

    Raises:
        SerializationError: If the bytes are not a valid record
    """
    try:
        record = PodcastRecord.model_validate_json(data, strict=True)
    except ValidationError as e:
        raise SerializationError(f"decoding podcast: {e}") from e

    return record.to_podcast()
