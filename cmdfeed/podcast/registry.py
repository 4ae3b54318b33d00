"""Podcast registry backed by the namespaced store.

Each podcast is one record in the "podcast" namespace, keyed by its slug.
"""

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from ..errors import CmdfeedError, RecordNotFoundError, wrap
from ..rss.feed_parser import FeedFetcher
from ..store.backend import StoreBackend
from ..subscription.entry import Entry
from ..subscription.state import Options, new_entries, new_state, update
from .codec import decode_podcast, encode_podcast
from .models import Podcast, PodcastOptions

logger = logging.getLogger(__name__)

# Namespace where podcast records live
PODCAST_NAMESPACE = "podcast"


class PodcastRegistry:
    """Create, read and update podcast subscriptions.

    Example:
        registry = PodcastRegistry(create_backend("~/.cmdfeeddb"))
        pod = registry.new_podcast("techtalk", "https://example.com/feed.xml")
        pod, fresh = registry.refresh_podcast("techtalk")
        print(f"{len(fresh)} new entries")
    """

    def __init__(self, backend: StoreBackend, fetcher: Optional[FeedFetcher] = None):
        """
        Create a registry on top of a store backend.

        Ensures the podcast namespace exists.

        Parameters:
            backend (StoreBackend): Store holding the podcast records.
            fetcher (Optional[FeedFetcher]): Fetcher used for new and refreshed subscriptions.
        """
        self.backend = backend
        self.fetcher = fetcher or FeedFetcher()
        try:
            self.backend.create_namespace(PODCAST_NAMESPACE)
        except CmdfeedError as e:
            raise wrap(e, "creating podcast registry") from e

    def new_podcast(
        self,
        slug: str,
        url: str,
        podcast_options: Optional[PodcastOptions] = None,
        subscription_options: Optional[Options] = None,
    ) -> Podcast:
        """
        Subscribe to a feed and store it under `slug`.

        Parameters:
            slug (str): Unique name for the podcast.
            url (str): RSS/Atom feed URL.
            podcast_options (Optional[PodcastOptions]): Per-podcast settings.
            subscription_options (Optional[Options]): Reconciliation settings.

        Returns:
            Podcast: The stored record, with an empty downloaded map.

        Raises:
            FetchError, IdentityError, SerializationError, StorageError: Nothing is stored when any step fails.
        """
        try:
            state = new_state(url, subscription_options, fetcher=self.fetcher)
            pod = Podcast(
                slug=slug,
                subscription=state,
                downloaded={},
                options=podcast_options or PodcastOptions(),
            )
            self.backend.put(PODCAST_NAMESPACE, slug, encode_podcast(pod))
        except CmdfeedError as e:
            raise wrap(e, "adding new podcast") from e

        logger.info(f"Added podcast '{slug}' ({url}) with {len(state.entries)} entries")
        return pod

    def podcast(self, slug: str) -> Podcast:
        """
        Load the podcast stored under `slug`.

        Raises:
            RecordNotFoundError: If no podcast has that slug.
            SerializationError: If the stored record cannot be decoded.
        """
        try:
            payload = self.backend.get(PODCAST_NAMESPACE, slug)
            if payload is None:
                raise RecordNotFoundError(f"no podcast with slug {slug!r}")
            return decode_podcast(payload)
        except CmdfeedError as e:
            raise wrap(e, "getting podcast") from e

    def all_podcasts(self) -> List[Podcast]:
        """Return every stored podcast, ordered by slug."""
        podcasts: List[Podcast] = []

        def collect(key: str, value: bytes) -> None:
            podcasts.append(decode_podcast(value))

        try:
            self.backend.for_each(PODCAST_NAMESPACE, collect)
        except CmdfeedError as e:
            raise wrap(e, "listing podcasts") from e

        return podcasts

    def write_podcast(self, pod: Podcast) -> None:
        """
        Store `pod` under its own slug, replacing any previous record.

        Callers advance the subscription state before writing; no version check is made.
        """
        try:
            self.backend.put(PODCAST_NAMESPACE, pod.slug, encode_podcast(pod))
        except CmdfeedError as e:
            raise wrap(e, "writing podcast") from e

        logger.debug(f"Wrote podcast '{pod.slug}'")

    def delete_podcast(self, slug: str) -> bool:
        """
        Remove the podcast stored under `slug` together with its subscription state.

        Returns:
            bool: `True` if a podcast was deleted, `False` if none had that slug.
        """
        try:
            deleted = self.backend.delete(PODCAST_NAMESPACE, slug)
        except CmdfeedError as e:
            raise wrap(e, "deleting podcast") from e

        if deleted:
            logger.info(f"Deleted podcast '{slug}'")
        return deleted

    def refresh_podcast(self, slug: str) -> Tuple[Podcast, List[Entry]]:
        """
        Fetch the podcast's feed again, reconcile it, and store the result.

        Returns:
            Tuple of the updated podcast and the entries it did not know before.
        """
        pod = self.podcast(slug)

        try:
            state = update(pod.subscription, fetcher=self.fetcher)
            fresh = new_entries(pod.subscription, state)
        except CmdfeedError as e:
            raise wrap(e, "refreshing podcast") from e

        updated = replace(pod, subscription=state)
        self.write_podcast(updated)

        logger.info(f"Refreshed podcast '{slug}': {len(fresh)} new entries")
        return updated, fresh
