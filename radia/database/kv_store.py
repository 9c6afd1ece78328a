#!/usr/bin/env python3
"""
kv_store.py
--------------------
Key-value substrate for the Radia data store.

The only capability the store needs from its host is get/set of opaque
string blobs by string key, plus enumeration and removal for snapshot
management. Writes are atomic per key; there are no cross-key
transactions. Failures are raised as StoreIOError and never swallowed
here: the repository layer decides how to degrade.

Implementations:
    - MemoryKeyValueStore: process-local dict, used by tests and embedders
    - SqliteKeyValueStore: one SQLAlchemy-mapped table in a SQLite file

Usage:
    from radia.database.kv_store import SqliteKeyValueStore

    kv = SqliteKeyValueStore(Path("data/radia_store.db"))
    kv.set("pref_reports", "[]")
    kv.get("pref_reports")       # '[]'
    kv.keys(prefix="auto_backup_")
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

# --- Third party ---
from sqlalchemy import Engine, create_engine, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

# --- Local imports ---
from radia.core.exceptions import StoreIOError
from radia.core.logging_manager import RadiaLogger, safe_logger

from .decorators import handle_store_errors
from .models import Base, KVEntry


class KeyValueStore(ABC):
    """Platform-neutral get/set of string blobs by string key."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a blob.

        Returns:
            The stored string, or None when the key is absent

        Raises:
            StoreIOError: If the read fails
        """

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """
        Write a blob, replacing any previous value.

        Raises:
            StoreIOError: If the write fails
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed

        Raises:
            StoreIOError: If the removal fails
        """

    @abstractmethod
    def keys(self, prefix: str = "") -> List[str]:
        """
        List keys starting with ``prefix``, in no guaranteed order.

        Raises:
            StoreIOError: If the listing fails
        """

    def contains(self, key: str) -> bool:
        return self.get(key) is not None

    def close(self) -> None:
        """Release resources held by the store."""


class MemoryKeyValueStore(KeyValueStore):
    """Thread-safe in-process store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StoreIOError(
                f"Values must be strings, got {type(value).__name__} for '{key}'"
            )
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return [k for k in self._data if k.startswith(prefix)]

    def snapshot(self) -> Dict[str, str]:
        """Copy of the raw contents, for inspection."""
        with self._lock:
            return dict(self._data)


class SqliteKeyValueStore(KeyValueStore):
    """
    Key-value store persisted in a SQLite file through SQLAlchemy.

    Every call runs in its own short session, so concurrent callers on
    the same key race at the database and the last write wins.
    """

    def __init__(
        self,
        db_path: Path,
        logger: Optional[RadiaLogger] = None,
    ) -> None:
        """
        Open (and create if needed) the store file.

        Args:
            db_path: Path to the SQLite file
            logger: Optional logger for store operations

        Raises:
            StoreIOError: If the engine cannot be created or the schema
                cannot be initialized
        """
        self.db_path = Path(db_path)
        self.logger = logger

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                future=True,
                pool_pre_ping=True,
                connect_args={"check_same_thread": False, "timeout": 30},
            )
            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
                future=True,
            )
            Base.metadata.create_all(self.engine)
        except (OSError, SQLAlchemyError) as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "kv_init", "db_path": str(self.db_path)}
            )
            raise StoreIOError(f"Cannot open key-value store {self.db_path}: {e}") from e

        safe_logger(self.logger).log_operation(
            "kv_store_opened", {"db_path": str(self.db_path)}
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around one key-value operation."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @handle_store_errors
    def get(self, key: str) -> Optional[str]:
        with self.session_scope() as session:
            entry = session.get(KVEntry, key)
            return entry.value if entry is not None else None

    @handle_store_errors
    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise StoreIOError(
                f"Values must be strings, got {type(value).__name__} for '{key}'"
            )
        now = datetime.now(timezone.utc)
        # Single upsert: concurrent first writes of a key cannot collide
        stmt = sqlite_insert(KVEntry).values(key=key, value=value, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[KVEntry.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        with self.session_scope() as session:
            session.execute(stmt)

    @handle_store_errors
    def delete(self, key: str) -> bool:
        with self.session_scope() as session:
            result = session.execute(delete(KVEntry).where(KVEntry.key == key))
            return (result.rowcount or 0) > 0

    @handle_store_errors
    def keys(self, prefix: str = "") -> List[str]:
        with self.session_scope() as session:
            stmt = select(KVEntry.key)
            if prefix:
                stmt = stmt.where(KVEntry.key.startswith(prefix, autoescape=True))
            rows = session.execute(stmt).scalars().all()
        # SQLite LIKE is case-insensitive; keep the prefix match exact
        return [k for k in rows if k.startswith(prefix)]

    def close(self) -> None:
        self.engine.dispose()
