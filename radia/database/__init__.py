#!/usr/bin/env python3
"""
Radia Database Package
----------------------
Local-first data store with migration, statistics and snapshot backups.

Modules:
- kv_store: key-value substrate (memory and SQLite)
- repositories: typed per-collection load/save with legacy migration
- stats: productivity tracking and derived copy windows
- snapshot_store / backup_scheduler: snapshot ring buffer and policy
- export_manager: portable export/import payloads
- manager: the DataStore handle wiring it all together
"""

from .manager import DataStore
from radia.core.exceptions import (
    RadiaError,
    StoreError,
    StoreIOError,
    MalformedPayloadError,
    MigrationError,
    BackupError,
    ValidationError,
    ConfigError,
)
from .kv_store import KeyValueStore, MemoryKeyValueStore, SqliteKeyValueStore
from .entities import (
    Category,
    Filter,
    Phrase,
    ProductivityStats,
    Report,
    SavedTranscription,
    Settings,
)
from .export_manager import (
    ExportImportCodec,
    ExportPayload,
    ImportResult,
    upgrade_legacy_payload,
)
from .migration import MigrationDecision, resolve
from .snapshot_store import Snapshot, SnapshotStore
from .backup_scheduler import BackupScheduler
from .stats import StatsAggregator
from .decorators import log_store_operation, handle_store_errors

__all__ = [
    # Main handle
    "DataStore",
    # Exceptions
    "RadiaError",
    "StoreError",
    "StoreIOError",
    "MalformedPayloadError",
    "MigrationError",
    "BackupError",
    "ValidationError",
    "ConfigError",
    # Key-value stores
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SqliteKeyValueStore",
    # Entities
    "Category",
    "Filter",
    "Phrase",
    "ProductivityStats",
    "Report",
    "SavedTranscription",
    "Settings",
    # Components
    "ExportImportCodec",
    "ExportPayload",
    "ImportResult",
    "upgrade_legacy_payload",
    "MigrationDecision",
    "resolve",
    "Snapshot",
    "SnapshotStore",
    "BackupScheduler",
    "StatsAggregator",
    # Decorators
    "log_store_operation",
    "handle_store_errors",
]
