"""Exception types raised by cmdfeed components.

Every component wraps the underlying cause with a short label naming the
operation that failed, e.g. ``StorageError("getting podcast: ...")``.
"""


class CmdfeedError(Exception):
    """Base class for all cmdfeed errors."""


class FetchError(CmdfeedError):
    """A feed or search request failed at the network level, or its body could not be decoded."""


class ParseError(FetchError):
    """The fetched document is not a recognizable RSS or Atom feed."""


class SerializationError(CmdfeedError):
    """A record could not be encoded to or decoded from its stored form."""


class StorageError(CmdfeedError):
    """The key-value store failed or refused an operation."""


class NamespaceNotFoundError(StorageError):
    """A namespace was used before it was created."""


class RecordNotFoundError(StorageError):
    """A record was requested by key but nothing is stored under it."""


class IdentityError(CmdfeedError):
    """An entry's content hash could not be computed."""


def wrap(err: CmdfeedError, label: str) -> CmdfeedError:
    """Return an error of the same type as `err` with `label` prepended to its message."""
    return type(err)(f"{label}: {err}")
