#!/usr/bin/env python3
"""
backup_scheduler.py
--------------------
Automatic snapshot policy.

Two triggers write auto snapshots:

    On-mutation: every notifying save of a content collection (reports,
        phrases) captures the export payload right away and hands the
        snapshot write and eviction to a single background worker. The
        save that triggered it never waits for, nor fails with, the
        snapshot.

    Periodic: run_periodic_check() takes a snapshot when auto backup is
        enabled and the last periodic snapshot is missing or at least
        autoBackupFrequencyDays whole days old, then records
        lastAutoBackupDate. It runs when the store loads, after every
        settings save, and on a timer thread when one is started.

Snapshot failures (BackupError, StoreIOError) are logged and dropped.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

# --- Local imports ---
from radia.core.exceptions import BackupError, StoreIOError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.timeutils import Clock, as_utc, iso_millis, utc_now
from radia.core.validators import DataValidator

from .entities import Settings
from .repositories import CollectionRepository, SettingsRepository
from .snapshot_store import Snapshot, SnapshotStore

PayloadFactory = Callable[[], Dict[str, Any]]


def days_since(last: datetime, now: datetime) -> int:
    """Whole days between two instants (floor); naive values count as UTC."""
    return (as_utc(now) - as_utc(last)) // timedelta(days=1)


def is_backup_due(settings: Settings, now: datetime) -> bool:
    """
    Decide whether a periodic snapshot is due.

    Returns:
        True if auto backup is enabled and no periodic snapshot was taken
        yet (or its date is unreadable), or the last one is at least
        ``auto_backup_frequency_days`` whole days old
    """
    if not settings.auto_backup_enabled:
        return False
    last = DataValidator.parse_datetime(settings.last_auto_backup_date)
    if last is None:
        return True
    return days_since(last, now) >= settings.auto_backup_frequency_days


class BackupScheduler:
    """
    Decides when to take automatic snapshots and writes them.

    Attributes:
        snapshots: Where snapshots are written
        settings: Settings repository (enabled flag, frequency, last date)
        payload_factory: Returns the current export payload wire dict
        max_snapshots: Bound enforced by eviction after every write
        snapshot_on_mutation: Enable the on-mutation trigger
    """

    def __init__(
        self,
        snapshots: SnapshotStore,
        settings: SettingsRepository,
        payload_factory: PayloadFactory,
        max_snapshots: int = 10,
        clock: Optional[Clock] = None,
        logger: Optional[RadiaLogger] = None,
        background: bool = True,
        snapshot_on_mutation: bool = True,
    ) -> None:
        self.snapshots = snapshots
        self.settings = settings
        self.payload_factory = payload_factory
        self.max_snapshots = max_snapshots
        self.clock = clock or utc_now
        self.logger = logger
        self.snapshot_on_mutation = snapshot_on_mutation

        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="radia-backup")
            if background
            else None
        )
        self._pending: List[Future] = []
        self._pending_lock = threading.Lock()
        self._check_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer: Optional[threading.Thread] = None

    # --- Wiring ---
    def attach(self, repository: CollectionRepository) -> None:
        """Watch a content repository for mutations."""
        if repository.is_content:
            repository.subscribe(self.on_content_saved)

    def watch_settings(self) -> None:
        """Re-run the periodic check after every notifying settings save."""
        self.settings.subscribe(lambda _settings: self.run_periodic_check())

    # --- On-mutation trigger ---
    def on_content_saved(self, _value: Any = None) -> Optional[Future]:
        """
        Schedule an auto snapshot of the store as it is now.

        Returns:
            Future of the background write, or None when skipped or run
            synchronously
        """
        if not self.snapshot_on_mutation:
            return None
        if not self.settings.value.auto_backup_enabled:
            return None

        payload = self.payload_factory()
        if self._executor is None:
            self._write_snapshot(payload, is_auto=True)
            return None

        future = self._executor.submit(self._write_snapshot, payload, True)
        with self._pending_lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def _write_snapshot(self, payload: Dict[str, Any], is_auto: bool) -> Optional[Snapshot]:
        try:
            snapshot = self.snapshots.create(payload, is_auto=is_auto)
            self.snapshots.evict_excess(self.max_snapshots)
        except (BackupError, StoreIOError) as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "auto_snapshot", "is_auto": is_auto}
            )
            return None
        return snapshot

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for scheduled snapshot writes to finish.

        Returns:
            True if nothing is left pending
        """
        with self._pending_lock:
            pending = list(self._pending)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        return not not_done

    # --- Periodic trigger ---
    def run_periodic_check(self) -> Optional[Snapshot]:
        """
        Take a periodic snapshot if one is due.

        Returns:
            The snapshot written, or None
        """
        with self._check_lock:
            settings = self.settings.value
            now = self.clock()
            if not is_backup_due(settings, now):
                return None

            snapshot = self._write_snapshot(self.payload_factory(), is_auto=True)
            if snapshot is None:
                return None

            # notify=False: this save must not re-enter the check
            self.settings.save(
                replace(self.settings.value, last_auto_backup_date=iso_millis(now)),
                notify=False,
            )
            safe_logger(self.logger).log_operation(
                "periodic_backup", {"key": snapshot.key}
            )
            return snapshot

    def start(self, interval_seconds: float) -> None:
        """Run the periodic check every ``interval_seconds`` on a daemon thread."""
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if self._timer is not None and self._timer.is_alive():
            return

        self._stop_event.clear()

        def loop() -> None:
            while not self._stop_event.wait(interval_seconds):
                self.run_periodic_check()

        self._timer = threading.Thread(
            target=loop, name="radia-backup-timer", daemon=True
        )
        self._timer.start()
        safe_logger(self.logger).log_debug(
            "Periodic backup timer started", {"interval_seconds": interval_seconds}
        )

    def stop(self) -> None:
        """Stop the timer thread, if running."""
        self._stop_event.set()
        if self._timer is not None:
            self._timer.join()
            self._timer = None

    def shutdown(self) -> None:
        """Stop the timer and finish pending snapshot writes."""
        self.stop()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
