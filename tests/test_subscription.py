"""Tests for subscription state and reconciliation."""

import uuid
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from cmdfeed.errors import FetchError
from cmdfeed.rss.feed_parser import FeedFetcher
from cmdfeed.subscription.entry import Entry, identity, to_entries
from cmdfeed.subscription.state import (
    Options,
    SubscriptionState,
    dedupe_entries,
    merge_entries,
    new_entries,
    new_state,
    update,
)
from helpers import FEED_URL, day, make_item, make_snapshot

LATER = datetime(2024, 3, 2, 9, 30, tzinfo=timezone.utc)


def fetcher_returning(*snapshots):
    """Create a mock fetcher that returns the given snapshots in order."""
    fetcher = Mock(spec=FeedFetcher)
    fetcher.fetch.side_effect = list(snapshots)
    return fetcher


def identities(entries):
    return [identity(e) for e in entries]


class TestNewState:
    """Tests for creating subscriptions."""

    def test_new_state(self):
        """Test a new state holds the fetched entries and a fresh id."""
        snapshot = make_snapshot([make_item("A", guid="a"), make_item("B", guid="b")])
        fetcher = fetcher_returning(snapshot)

        state = new_state(FEED_URL, fetcher=fetcher)

        fetcher.fetch.assert_called_once_with(FEED_URL)
        assert uuid.UUID(state.id)
        assert state.snapshot is snapshot
        assert state.url == FEED_URL
        assert identities(state.entries) == ["a", "b"]
        assert state.options == Options()

    def test_new_state_keeps_options(self):
        """Test options are stored on the state."""
        fetcher = fetcher_returning(make_snapshot([]))

        state = new_state(FEED_URL, Options(include_removed_entries=True), fetcher=fetcher)

        assert state.options.include_removed_entries is True

    def test_new_state_ids_are_unique(self):
        """Test every subscription gets its own id."""
        fetcher = fetcher_returning(make_snapshot([]), make_snapshot([]))

        first = new_state(FEED_URL, fetcher=fetcher)
        second = new_state(FEED_URL, fetcher=fetcher)

        assert first.id != second.id

    def test_new_state_fetch_error(self):
        """Test a failed fetch produces no state."""
        fetcher = Mock(spec=FeedFetcher)
        fetcher.fetch.side_effect = FetchError("boom")

        with pytest.raises(FetchError, match="boom"):
            new_state(FEED_URL, fetcher=fetcher)

    def test_new_state_three_items_without_guid(self):
        """Test items without GUID are identified by content hash."""
        items = [make_item("One"), make_item("Two"), make_item("Three")]
        fetcher = fetcher_returning(make_snapshot(items))

        state = new_state(FEED_URL, fetcher=fetcher)

        assert len(state.entries) == 3
        for entry in state.entries:
            assert entry.guid == ""
            assert len(identity(entry)) == 32


class TestUpdate:
    """Tests for reconciling a state with a new fetch."""

    def test_replace_mode_matches_new_fetch(self):
        """Test without include_removed_entries the entries are exactly the new fetch."""
        first = make_snapshot([make_item("A", guid="a"), make_item("B", guid="b")])
        second = make_snapshot([make_item("B", guid="b"), make_item("C", guid="c")], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)

        state = new_state(FEED_URL, fetcher=fetcher)
        updated = update(state, fetcher=fetcher)

        assert identities(updated.entries) == identities(to_entries(second))
        assert identities(updated.entries) == ["b", "c"]

    def test_update_preserves_id_and_options(self):
        """Test id and options carry over while snapshot is replaced."""
        first = make_snapshot([make_item("A", guid="a")])
        second = make_snapshot([make_item("A", guid="a")], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)
        options = Options(include_removed_entries=True)

        state = new_state(FEED_URL, options, fetcher=fetcher)
        updated = update(state, fetcher=fetcher)

        assert updated.id == state.id
        assert updated.options == options
        assert updated.snapshot is second
        assert fetcher.fetch.call_args_list[1].args == (FEED_URL,)

    def test_update_does_not_mutate_previous_state(self):
        """Test the prior state keeps its snapshot and entries."""
        first = make_snapshot([make_item("A", guid="a")])
        second = make_snapshot([make_item("Z", guid="z")], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)

        state = new_state(FEED_URL, fetcher=fetcher)
        before = list(state.entries)
        update(state, fetcher=fetcher)

        assert state.snapshot is first
        assert state.entries == before

    def test_update_fetch_error_leaves_state(self):
        """Test a failed refetch raises and leaves the state intact."""
        first = make_snapshot([make_item("A", guid="a")])
        fetcher = fetcher_returning(first, FetchError("gone"))

        state = new_state(FEED_URL, fetcher=fetcher)

        with pytest.raises(FetchError):
            update(state, fetcher=fetcher)
        assert identities(state.entries) == ["a"]

    def test_include_removed_keeps_vanished_entries(self):
        """Test include_removed_entries produces the union of both fetches."""
        first = make_snapshot([
            make_item("A", guid="a", updated=day(1)),
            make_item("B", guid="b", updated=day(2)),
        ])
        second = make_snapshot([
            make_item("B", guid="b", updated=day(2)),
            make_item("C", guid="c", updated=day(3)),
        ], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)

        state = new_state(FEED_URL, Options(include_removed_entries=True), fetcher=fetcher)
        updated = update(state, fetcher=fetcher)

        assert identities(updated.entries) == ["a", "b", "c"]

    def test_include_removed_new_content_wins(self):
        """Test an entry present in both fetches takes the new content."""
        first = make_snapshot([make_item("Old title", guid="a", updated=day(1))])
        second = make_snapshot([make_item("New title", guid="a", updated=day(4))], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)

        state = new_state(FEED_URL, Options(include_removed_entries=True), fetcher=fetcher)
        updated = update(state, fetcher=fetcher)

        assert len(updated.entries) == 1
        assert updated.entries[0].title == "New title"
        assert updated.entries[0].updated == day(4)

    def test_include_removed_sorted_by_updated(self):
        """Test the merged list is sorted ascending by updated."""
        first = make_snapshot([
            make_item("Late", guid="late", updated=day(9)),
            make_item("Early", guid="early", updated=day(1)),
        ])
        second = make_snapshot([make_item("Middle", guid="mid", updated=day(5))], fetch_time=LATER)
        fetcher = fetcher_returning(first, second)

        state = new_state(FEED_URL, Options(include_removed_entries=True), fetcher=fetcher)
        updated = update(state, fetcher=fetcher)

        assert identities(updated.entries) == ["early", "mid", "late"]

    def test_two_updates_with_item_removed(self):
        """Test a removed item is retained across repeated updates."""
        three = [
            make_item("A", guid="a", updated=day(1)),
            make_item("B", guid="b", updated=day(2)),
            make_item("C", guid="c", updated=day(3)),
        ]
        fetcher = fetcher_returning(
            make_snapshot(three),
            make_snapshot(three, fetch_time=LATER),
            make_snapshot(three[1:], fetch_time=LATER),
        )

        state = new_state(FEED_URL, Options(include_removed_entries=True), fetcher=fetcher)
        state = update(state, fetcher=fetcher)
        state = update(state, fetcher=fetcher)

        assert len(state.entries) == 3
        assert identities(state.entries) == ["a", "b", "c"]

    def test_two_updates_with_item_removed_replace_mode(self):
        """Test without include_removed_entries the removed item disappears."""
        three = [make_item("A", guid="a"), make_item("B", guid="b"), make_item("C", guid="c")]
        fetcher = fetcher_returning(
            make_snapshot(three),
            make_snapshot(three, fetch_time=LATER),
            make_snapshot(three[1:], fetch_time=LATER),
        )

        state = new_state(FEED_URL, fetcher=fetcher)
        state = update(state, fetcher=fetcher)
        state = update(state, fetcher=fetcher)

        assert identities(state.entries) == ["b", "c"]


class TestDedupeAndMerge:
    """Tests for the identity-keyed list operations."""

    def test_dedupe_last_write_wins(self):
        """Test duplicates collapse to the last occurrence at the first position."""
        entries = [
            Entry(title="first", guid="x", updated=day(1)),
            Entry(title="other", guid="y", updated=day(1)),
            Entry(title="second", guid="x", updated=day(1)),
        ]

        result = dedupe_entries(entries)

        assert [e.title for e in result] == ["second", "other"]

    def test_dedupe_is_idempotent(self):
        """Test deduplicating twice changes nothing."""
        entries = [Entry(guid="a"), Entry(guid="a"), Entry(guid="b")]

        once = dedupe_entries(entries)

        assert dedupe_entries(once) == once

    def test_merge_with_itself(self):
        """Test merging a set with itself yields the same set."""
        entries = [
            Entry(title="a", guid="a", updated=day(1)),
            Entry(title="b", updated=day(2), published=day(2)),
        ]

        merged = merge_entries(entries, entries)

        assert identities(merged) == identities(entries)

    def test_merge_ties_keep_input_order(self):
        """Test equal updated timestamps keep old-then-new order."""
        old = [Entry(guid="o1", updated=day(1)), Entry(guid="o2", updated=day(1))]
        new = [Entry(guid="n1", updated=day(1)), Entry(guid="o1", updated=day(1))]

        merged = merge_entries(old, new)

        assert identities(merged) == ["o1", "o2", "n1"]

    def test_merge_does_not_modify_inputs(self):
        """Test merging leaves the input lists alone."""
        old = [Entry(guid="a", updated=day(2))]
        new = [Entry(guid="b", updated=day(1))]

        merge_entries(old, new)

        assert identities(old) == ["a"]
        assert identities(new) == ["b"]


class TestNewEntries:
    """Tests for reporting newly seen entries."""

    def test_new_entries(self):
        """Test only identities absent from the previous state are reported."""
        snap = make_snapshot([])
        previous = SubscriptionState(id="s", snapshot=snap, entries=[Entry(guid="a"), Entry(guid="b")])
        current = SubscriptionState(
            id="s", snapshot=snap, entries=[Entry(guid="b"), Entry(guid="c"), Entry(guid="d")]
        )

        assert identities(new_entries(previous, current)) == ["c", "d"]

    def test_no_new_entries(self):
        """Test identical states report nothing."""
        snap = make_snapshot([])
        state = SubscriptionState(id="s", snapshot=snap, entries=[Entry(guid="a")])

        assert new_entries(state, state) == []
