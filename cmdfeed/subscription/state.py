"""Subscription state and its reconciliation against fresh feed snapshots.

A SubscriptionState is never changed in place: `update` fetches the feed
again and returns a new state that keeps the subscription's id and options.

Example:
    state = new_state("https://example.com/feed.xml", Options(include_removed_entries=True))
    later = update(state)
    for entry in new_entries(state, later):
        print(entry.title)
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from ..rss.feed_parser import FeedFetcher, Snapshot, refresh
from .entry import Entry, identity, to_entries

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Controls how a subscription reconciles new fetches.

    Attributes:
        include_removed_entries: Keep entries that vanished from the feed
            instead of replacing the entry list with the latest fetch.
    """

    include_removed_entries: bool = False


@dataclass(frozen=True)
class SubscriptionState:
    """A subscription to one feed: its latest snapshot and known entries."""

    id: str
    snapshot: Snapshot
    entries: List[Entry] = field(default_factory=list)
    options: Options = field(default_factory=Options)

    @property
    def url(self) -> str:
        return self.snapshot.url


def new_state(
    url: str,
    options: Optional[Options] = None,
    fetcher: Optional[FeedFetcher] = None,
) -> SubscriptionState:
    """
    Create a subscription by fetching a feed for the first time.

    Parameters:
        url (str): RSS/Atom feed URL to subscribe to.
        options (Optional[Options]): Reconciliation options; defaults to `Options()`.
        fetcher (Optional[FeedFetcher]): Fetcher to use; a default one is created if omitted.

    Returns:
        SubscriptionState: A state with a newly assigned id holding the fetched entries.

    Raises:
        FetchError: If the feed cannot be fetched or parsed. No state is produced.
        IdentityError: If an entry's identity cannot be computed.
    """
    fetcher = fetcher or FeedFetcher()
    snapshot = fetcher.fetch(url)
    entries = dedupe_entries(to_entries(snapshot))

    state = SubscriptionState(
        id=str(uuid.uuid4()),
        snapshot=snapshot,
        entries=entries,
        options=options or Options(),
    )
    logger.info(f"Created subscription {state.id} for {url} with {len(entries)} entries")
    return state


def update(state: SubscriptionState, fetcher: Optional[FeedFetcher] = None) -> SubscriptionState:
    """
    Fetch the subscription's feed again and reconcile it with the known entries.

    When `include_removed_entries` is off, the new entry list is exactly the
    deduplicated entries of the new fetch. When it is on, old and new entries
    are merged by identity and sorted by their `updated` timestamp.

    Parameters:
        state (SubscriptionState): The current state; it is not modified.
        fetcher (Optional[FeedFetcher]): Fetcher to use for the refresh.

    Returns:
        SubscriptionState: A new state with the same id and options.

    Raises:
        FetchError: If the refetch fails.
        IdentityError: If an entry's identity cannot be computed.
    """
    snapshot = refresh(state.snapshot, fetcher)
    candidates = to_entries(snapshot)

    if state.options.include_removed_entries:
        entries = merge_entries(state.entries, candidates)
    else:
        entries = dedupe_entries(candidates)

    logger.info(
        f"Updated subscription {state.id}: {len(state.entries)} -> {len(entries)} entries"
    )
    return SubscriptionState(
        id=state.id,
        snapshot=snapshot,
        entries=entries,
        options=state.options,
    )


def dedupe_entries(entries: Iterable[Entry]) -> List[Entry]:
    """Collapse entries sharing an identity.

    The last entry with a given identity wins, at the position where that
    identity was first seen.
    """
    return list(_by_identity(entries).values())


def merge_entries(old: Iterable[Entry], new: Iterable[Entry]) -> List[Entry]:
    """Union two entry lists by identity, preferring the content of `new`.

    The result is sorted ascending by `updated`; ties keep insertion order
    (old entries first, then entries only present in `new`).
    """
    merged = _by_identity(list(old) + list(new))
    return sorted(merged.values(), key=lambda entry: entry.updated)


def new_entries(previous: SubscriptionState, current: SubscriptionState) -> List[Entry]:
    """Return the entries of `current` whose identity `previous` did not have."""
    seen = {identity(entry) for entry in previous.entries}
    return [entry for entry in current.entries if identity(entry) not in seen]


def _by_identity(entries: Iterable[Entry]) -> Dict[str, Entry]:
    keyed: Dict[str, Entry] = {}
    for entry in entries:
        keyed[identity(entry)] = entry
    return keyed
