"""Subscription state and reconciliation."""

from .entry import Entry, identity, to_entries
from .state import (
    Options,
    SubscriptionState,
    dedupe_entries,
    merge_entries,
    new_entries,
    new_state,
    update,
)

__all__ = [
    "Entry",
    "identity",
    "to_entries",
    "Options",
    "SubscriptionState",
    "dedupe_entries",
    "merge_entries",
    "new_entries",
    "new_state",
    "update",
]
