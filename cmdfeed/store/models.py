"""SQLAlchemy ORM models for the namespaced key-value store."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, LargeBinary, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Namespace(Base):
    """A named partition of the store."""

    __tablename__ = "namespaces"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Namespace(name={self.name!r})>"


class Record(Base):
    """A single key/value pair inside a namespace.

    Values are opaque bytes; callers own their encoding.
    """

    __tablename__ = "records"

    namespace: Mapped[str] = mapped_column(
        String(255), ForeignKey("namespaces.name", ondelete="CASCADE"), primary_key=True
    )
    key: Mapped[str] = mapped_column(String(1024), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<Record(namespace={self.namespace!r}, key={self.key!r})>"
