"""Namespaced key-value storage."""

from .backend import SQLAlchemyStoreBackend, StoreBackend
from .factory import create_backend, create_backend_from_config

__all__ = [
    "StoreBackend",
    "SQLAlchemyStoreBackend",
    "create_backend",
    "create_backend_from_config",
]
