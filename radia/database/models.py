"""
Key-Value ORM Model
-------------------

SQLAlchemy mapping for the single table backing SqliteKeyValueStore.

Classes:
    - Base: Declarative base for the store's models
    - KVEntry: One opaque string blob under one string key

The store keeps every collection and every snapshot as a JSON blob under
its own key, so one narrow table is the whole schema.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import datetime, timezone

# --- Third party ---
from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# --- Base ORM class ---
class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Serves as the declarative base and provides access to the metadata
    object for table creation.
    """

    pass


class KVEntry(Base):
    """
    A stored blob.

    Attributes:
        key: Storage key (e.g. 'pref_reports', 'auto_backup_2026-...Z')
        value: Serialized JSON text
        updated_at: Last write time (UTC)
    """

    __tablename__ = "kv_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<KVEntry(key={self.key!r}, size={len(self.value or '')})>"
