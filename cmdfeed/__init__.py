"""cmdfeed: track RSS/Atom feed subscriptions and keep their state on disk."""

__version__ = "0.1.0"
