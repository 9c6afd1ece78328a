#!/usr/bin/env python3
"""
snapshot_store.py
--------------------
Bounded ring buffer of full-store snapshots in the key-value store.

Each snapshot is an export payload stored as JSON under
``{auto|manual}_backup_<timestamp>``, where the timestamp is UTC ISO-8601
with microseconds (e.g. ``auto_backup_2026-10-19T08:30:00.123456Z``).
Snapshots are ordered by that embedded timestamp. Keys are strictly
increasing: if the clock reads a time not later than the newest existing
snapshot (two snapshots in the same microsecond, or the wall clock moved
backwards), the new key uses the newest timestamp plus one microsecond.
Eviction therefore never removes a snapshot newer than one it keeps.

Auto and manual snapshots share one bound.

Usage:
    snapshots = SnapshotStore(kv, logger=logger)
    snap = snapshots.create(payload, is_auto=False)
    snapshots.evict_excess(10)
    latest = snapshots.latest()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

# --- Local imports ---
from radia.core.exceptions import BackupError, StoreIOError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.timeutils import Clock, as_utc, iso_micros, utc_now
from radia.core.validators import DataValidator

from .kv_store import KeyValueStore

AUTO_PREFIX = "auto_backup_"
MANUAL_PREFIX = "manual_backup_"


@dataclass(frozen=True)
class Snapshot:
    """
    One stored snapshot. Never modified after it is written.

    Attributes:
        key: Storage key
        is_auto: Written by the backup scheduler rather than the user
        timestamp: UTC time embedded in the key
        payload: The export payload (wire dict)
        size_bytes: Size of the stored JSON, UTF-8 encoded
    """

    key: str
    is_auto: bool
    timestamp: datetime
    payload: Dict[str, Any]
    size_bytes: int

    @property
    def kind(self) -> str:
        return "auto" if self.is_auto else "manual"


def parse_snapshot_key(key: str) -> Optional[Tuple[bool, datetime]]:
    """
    Split a snapshot key into (is_auto, timestamp).

    Returns:
        None if the key is not a snapshot key or its timestamp is unreadable
    """
    for prefix, is_auto in ((AUTO_PREFIX, True), (MANUAL_PREFIX, False)):
        if key.startswith(prefix):
            timestamp = DataValidator.parse_datetime(key[len(prefix):])
            if timestamp is None:
                return None
            return is_auto, as_utc(timestamp)
    return None


class SnapshotStore:
    """Create, list, read, delete and evict snapshots."""

    def __init__(
        self,
        kv: KeyValueStore,
        clock: Optional[Clock] = None,
        logger: Optional[RadiaLogger] = None,
    ) -> None:
        self.kv = kv
        self.clock = clock or utc_now
        self.logger = logger
        self._lock = threading.RLock()

    def _entries(self) -> List[Tuple[datetime, bool, str]]:
        """(timestamp, is_auto, key) of every snapshot, newest first."""
        entries = []
        for prefix in (AUTO_PREFIX, MANUAL_PREFIX):
            for key in self.kv.keys(prefix):
                parsed = parse_snapshot_key(key)
                if parsed is None:
                    continue
                is_auto, timestamp = parsed
                entries.append((timestamp, is_auto, key))
        entries.sort(key=lambda entry: (entry[0], entry[2]), reverse=True)
        return entries

    def create(self, payload: Dict[str, Any], is_auto: bool) -> Snapshot:
        """
        Write a new snapshot.

        Args:
            payload: Export payload wire dict
            is_auto: Tag as an automatic snapshot

        Returns:
            The written Snapshot

        Raises:
            BackupError: If the payload cannot be serialized or written
        """
        with self._lock:
            try:
                blob = json.dumps(payload, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                raise BackupError(f"Snapshot payload is not serializable: {e}") from e

            try:
                entries = self._entries()
                timestamp = as_utc(self.clock())
                if entries and timestamp <= entries[0][0]:
                    timestamp = entries[0][0] + timedelta(microseconds=1)

                prefix = AUTO_PREFIX if is_auto else MANUAL_PREFIX
                key = f"{prefix}{iso_micros(timestamp)}"
                self.kv.set(key, blob)
            except StoreIOError as e:
                raise BackupError(f"Failed to write snapshot: {e}") from e

        snapshot = Snapshot(
            key=key,
            is_auto=is_auto,
            timestamp=timestamp,
            payload=payload,
            size_bytes=len(blob.encode("utf-8")),
        )
        safe_logger(self.logger).log_operation(
            "snapshot_created",
            {"key": key, "kind": snapshot.kind, "size_bytes": snapshot.size_bytes},
        )
        return snapshot

    def keys(self) -> List[str]:
        """Snapshot keys, newest first."""
        return [key for _, _, key in self._entries()]

    def read(self, key: str) -> Optional[Snapshot]:
        """
        Read one snapshot.

        Returns:
            The Snapshot, or None if the key is not a stored snapshot

        Raises:
            BackupError: If the stored blob is not a JSON object
            StoreIOError: If the read fails
        """
        parsed = parse_snapshot_key(key)
        if parsed is None:
            return None
        blob = self.kv.get(key)
        if blob is None:
            return None

        try:
            payload = json.loads(blob)
        except ValueError as e:
            raise BackupError(f"Snapshot '{key}' is corrupt: {e}") from e
        if not isinstance(payload, dict):
            raise BackupError(f"Snapshot '{key}' does not hold a payload object")

        is_auto, timestamp = parsed
        return Snapshot(
            key=key,
            is_auto=is_auto,
            timestamp=timestamp,
            payload=payload,
            size_bytes=len(blob.encode("utf-8")),
        )

    def list(self) -> List[Snapshot]:
        """
        All readable snapshots, newest first.

        Corrupt snapshots are logged and left out; they still count
        towards the eviction bound.
        """
        snapshots = []
        for key in self.keys():
            try:
                snapshot = self.read(key)
            except BackupError as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "list_snapshots", "key": key}
                )
                continue
            if snapshot is not None:
                snapshots.append(snapshot)
        return snapshots

    def latest(self) -> Optional[Snapshot]:
        """Newest readable snapshot, or None."""
        for key in self.keys():
            try:
                snapshot = self.read(key)
            except BackupError as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "latest_snapshot", "key": key}
                )
                continue
            if snapshot is not None:
                return snapshot
        return None

    def delete(self, key: str) -> bool:
        """
        Delete one snapshot.

        Returns:
            True if a snapshot was removed; False for unknown or
            non-snapshot keys
        """
        if parse_snapshot_key(key) is None:
            return False
        with self._lock:
            removed = self.kv.delete(key)
        if removed:
            safe_logger(self.logger).log_operation("snapshot_deleted", {"key": key})
        return removed

    def evict_excess(self, max_count: int) -> List[str]:
        """
        Delete the oldest snapshots beyond ``max_count``.

        Exactly ``len - max_count`` snapshots are removed when there are
        more than ``max_count``; nothing otherwise.

        Returns:
            Deleted keys, newest first
        """
        if max_count < 0:
            raise ValueError("max_count must not be negative")
        with self._lock:
            excess = [key for _, _, key in self._entries()[max_count:]]
            for key in excess:
                self.kv.delete(key)

        if excess:
            safe_logger(self.logger).log_operation(
                "snapshots_evicted", {"count": len(excess), "max_count": max_count}
            )
        return excess
