"""Store factory for creating backend instances.

Accepts either a plain file path or a full SQLAlchemy URL so the store
location is always explicit configuration.
"""

import logging
import os
from typing import Optional

from .backend import SQLAlchemyStoreBackend, StoreBackend

logger = logging.getLogger(__name__)

# Default store file for local use
DEFAULT_DATABASE_PATH = "~/.cmdfeeddb"


def create_backend(location: Optional[str] = None, echo: bool = False) -> StoreBackend:
    """
    Create a StoreBackend for the given file path or database URL.

    If `location` is not provided, it is read from the `CMDFEED_DATABASE_PATH` environment variable; if that is unset, a file in the user's home directory is used. A value without `://` is treated as a path to an SQLite file.

    Parameters:
        location (Optional[str]): File path or SQLAlchemy URL of the store.
        echo (bool): If true, enable SQL statement logging.

    Returns:
        StoreBackend: A backend bound to the resolved location.
    """
    if location is None:
        location = os.getenv("CMDFEED_DATABASE_PATH", DEFAULT_DATABASE_PATH)

    if "://" in location:
        database_url = location
    else:
        database_url = f"sqlite:///{os.path.expanduser(location)}"

    logger.info(f"Creating store backend: {database_url}")
    return SQLAlchemyStoreBackend(database_url=database_url, echo=echo)


def create_backend_from_config(config) -> StoreBackend:
    """
    Create a StoreBackend from a configuration object.

    Parameters:
        config: An object that may have `DATABASE_PATH` and `DB_ECHO` attributes.

    Returns:
        StoreBackend: A backend bound to the configured location.
    """
    return create_backend(
        getattr(config, "DATABASE_PATH", None),
        echo=getattr(config, "DB_ECHO", False),
    )
