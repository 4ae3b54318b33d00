"""Namespaced key-value storage.

Provides an abstract interface and an SQLAlchemy implementation backed by a
single embedded SQLite file. Every write is one transaction; a failed write
leaves the previous value in place.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ..errors import NamespaceNotFoundError, StorageError
from .models import Base, Namespace, Record

logger = logging.getLogger(__name__)

Visitor = Callable[[str, bytes], None]


class StoreBackend(ABC):
    """Abstract interface for a store partitioned into namespaces.

    A namespace must be created before any key inside it is read or written.
    """

    @abstractmethod
    def create_namespace(self, namespace: str) -> None:
        """
        Create a namespace if it does not exist yet; otherwise do nothing.

        Parameters:
            namespace (str): Name of the namespace.
        """
        pass

    @abstractmethod
    def put(self, namespace: str, key: str, value: bytes) -> None:
        """
        Store `value` under `key`, replacing any previous value.

        Raises:
            NamespaceNotFoundError: If the namespace has not been created.
            StorageError: If the write transaction fails.
        """
        pass

    @abstractmethod
    def get(self, namespace: str, key: str) -> Optional[bytes]:
        """
        Return the bytes stored under `key`.

        Returns:
            The stored value, or `None` if the key is unset.

        Raises:
            NamespaceNotFoundError: If the namespace has not been created.
        """
        pass

    @abstractmethod
    def for_each(self, namespace: str, visitor: Visitor) -> None:
        """
        Call `visitor(key, value)` for every pair in the namespace, in key order.

        An exception raised by the visitor stops the iteration and propagates.

        Raises:
            NamespaceNotFoundError: If the namespace has not been created.
        """
        pass

    @abstractmethod
    def delete(self, namespace: str, key: str) -> bool:
        """
        Remove `key` from the namespace.

        Returns:
            bool: `True` if a value was removed, `False` if the key was unset.
        """
        pass

    def close(self) -> None:
        """Release resources held by the backend."""
        pass


class SQLAlchemyStoreBackend(StoreBackend):
    """SQLAlchemy-based implementation of the namespaced store.

    Example:
        backend = SQLAlchemyStoreBackend("sqlite:////home/me/.cmdfeeddb")
        backend.create_namespace("podcast")
        backend.put("podcast", "techtalk", b"...")
    """

    def __init__(self, database_url: str, echo: bool = False):
        """
        Initialize the backend, configure its engine and session factory, and create the tables.

        Parameters:
            database_url (str): SQLAlchemy-compatible database URL.
            echo (bool): If true, enable SQLAlchemy SQL statement logging.
        """
        self.database_url = database_url

        if database_url.startswith("sqlite"):
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args={"check_same_thread": False},
            )
        else:
            self.engine = create_engine(database_url, echo=echo)

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)
        Base.metadata.create_all(self.engine)

        logger.info(f"Store initialized: {database_url}")

    def _get_session(self) -> Session:
        return self.SessionLocal()

    def _require_namespace(self, session: Session, namespace: str) -> None:
        if session.get(Namespace, namespace) is None:
            raise NamespaceNotFoundError(f"namespace does not exist: {namespace}")

    def create_namespace(self, namespace: str) -> None:
        try:
            with self._get_session() as session, session.begin():
                if session.get(Namespace, namespace) is None:
                    session.add(Namespace(name=namespace))
                    logger.info(f"Created namespace: {namespace}")
        except SQLAlchemyError as e:
            raise StorageError(f"creating namespace {namespace}: {e}") from e

    def put(self, namespace: str, key: str, value: bytes) -> None:
        try:
            with self._get_session() as session, session.begin():
                self._require_namespace(session, namespace)
                session.merge(Record(namespace=namespace, key=key, value=value))
        except SQLAlchemyError as e:
            raise StorageError(f"writing {namespace}/{key}: {e}") from e

        logger.debug(f"Stored {len(value)} bytes at {namespace}/{key}")

    def get(self, namespace: str, key: str) -> Optional[bytes]:
        try:
            with self._get_session() as session, session.begin():
                self._require_namespace(session, namespace)
                record = session.get(Record, (namespace, key))
                return record.value if record is not None else None
        except SQLAlchemyError as e:
            raise StorageError(f"reading {namespace}/{key}: {e}") from e

    def for_each(self, namespace: str, visitor: Visitor) -> None:
        try:
            with self._get_session() as session, session.begin():
                self._require_namespace(session, namespace)
                stmt = (
                    select(Record)
                    .where(Record.namespace == namespace)
                    .order_by(Record.key)
                )
                for record in session.scalars(stmt):
                    visitor(record.key, record.value)
        except SQLAlchemyError as e:
            raise StorageError(f"iterating {namespace}: {e}") from e

    def delete(self, namespace: str, key: str) -> bool:
        try:
            with self._get_session() as session, session.begin():
                self._require_namespace(session, namespace)
                record = session.get(Record, (namespace, key))
                if record is None:
                    return False
                session.delete(record)
        except SQLAlchemyError as e:
            raise StorageError(f"deleting {namespace}/{key}: {e}") from e

        logger.info(f"Deleted {namespace}/{key}")
        return True

    def close(self) -> None:
        """
        Dispose the SQLAlchemy engine and release database connections and resources.
        """
        self.engine.dispose()
        logger.info("Store connection closed")
