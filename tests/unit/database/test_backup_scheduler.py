"""
Tests for automatic snapshot scheduling.

Covers the periodic gating rule, the on-mutation trigger (synchronous
and background) and failure isolation.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from radia.core.exceptions import BackupError
from radia.core.logging_manager import RadiaLogger
from radia.database.backup_scheduler import BackupScheduler, days_since, is_backup_due
from radia.database.entities import Report, Settings
from radia.database.repositories import ReportRepository, SettingsRepository
from radia.database.snapshot_store import SnapshotStore


def build_scheduler(kv, clock, **kwargs):
    settings = SettingsRepository(kv)
    snapshots = SnapshotStore(kv, clock=clock)
    scheduler = BackupScheduler(
        snapshots,
        settings,
        payload_factory=lambda: {"reports": [], "version": "2.2.0"},
        clock=clock,
        **kwargs,
    )
    return scheduler, settings, snapshots


@pytest.fixture
def scheduler_parts(kv, clock):
    """(scheduler, settings repository, snapshot store), synchronous."""
    scheduler, settings, snapshots = build_scheduler(kv, clock, background=False)
    yield scheduler, settings, snapshots
    scheduler.shutdown()


class TestGating:
    """Tests for the periodic-backup decision."""

    def test_days_since_floors(self):
        """Partial days do not count."""
        last = datetime(2026, 10, 16, 9, 0, tzinfo=timezone.utc)
        now = datetime(2026, 10, 19, 8, 59, tzinfo=timezone.utc)
        assert days_since(last, now) == 2

    def test_days_since_naive_is_utc(self):
        """Naive datetimes are treated as UTC."""
        last = datetime(2026, 10, 18, 8, 30)
        now = datetime(2026, 10, 19, 8, 30, tzinfo=timezone.utc)
        assert days_since(last, now) == 1

    def test_disabled_never_due(self, start_time):
        """Disabled auto backup is never due."""
        assert not is_backup_due(Settings(auto_backup_enabled=False), start_time)

    def test_first_backup_due(self, start_time):
        """No previous periodic snapshot means one is due."""
        assert is_backup_due(Settings(), start_time)

    def test_unreadable_last_date_is_due(self, start_time):
        """An unparseable last date counts as never backed up."""
        assert is_backup_due(Settings(last_auto_backup_date="soon"), start_time)

    @pytest.mark.parametrize("days, due", [(0, False), (2, False), (3, True), (10, True)])
    def test_frequency(self, start_time, days, due):
        """Due exactly when the last backup is frequency days old or more."""
        settings = Settings(
            auto_backup_frequency_days=3,
            last_auto_backup_date="2026-10-19T08:30:00.000Z",
        )
        assert is_backup_due(settings, start_time + timedelta(days=days)) is due


class TestPeriodicCheck:
    """Tests for run_periodic_check()."""

    def test_disabled_writes_nothing(self, scheduler_parts):
        """With auto backup off no snapshot is taken."""
        scheduler, settings, snapshots = scheduler_parts
        settings.save(Settings(auto_backup_enabled=False))
        assert scheduler.run_periodic_check() is None
        assert snapshots.keys() == []

    def test_frequency_three_days(self, scheduler_parts, clock):
        """No snapshot at day 2; exactly one at day 3."""
        scheduler, settings, snapshots = scheduler_parts
        settings.save(
            Settings(
                auto_backup_frequency_days=3,
                last_auto_backup_date="2026-10-19T08:30:00.000Z",
            )
        )

        clock.advance(days=2)
        assert scheduler.run_periodic_check() is None
        assert snapshots.keys() == []

        clock.advance(days=1)
        snapshot = scheduler.run_periodic_check()
        assert snapshot is not None and snapshot.is_auto
        assert snapshots.keys() == [snapshot.key]
        assert settings.load().last_auto_backup_date == "2026-10-22T08:30:00.000Z"

        assert scheduler.run_periodic_check() is None
        assert len(snapshots.keys()) == 1

    def test_recording_date_does_not_notify(self, scheduler_parts):
        """Saving lastAutoBackupDate does not re-trigger listeners."""
        scheduler, settings, _ = scheduler_parts
        listener = MagicMock()
        settings.subscribe(listener)

        scheduler.run_periodic_check()
        listener.assert_not_called()

    def test_watch_settings_reruns_check(self, scheduler_parts, clock):
        """A notifying settings save runs the check."""
        scheduler, settings, snapshots = scheduler_parts
        scheduler.watch_settings()
        settings.save(Settings(last_auto_backup_date="2026-10-19T08:30:00.000Z"))
        assert snapshots.keys() == []

        clock.advance(days=1)
        settings.save(Settings(theme="dark", last_auto_backup_date="2026-10-19T08:30:00.000Z"))
        assert len(snapshots.keys()) == 1
        assert settings.value.theme == "dark"

    def test_concurrent_settings_change_kept(self, kv, clock):
        """A settings save made while the snapshot is written survives."""
        settings = SettingsRepository(kv)

        def payload_with_user_edit():
            settings.save(Settings(theme="dark"), notify=False)
            return {"reports": []}

        scheduler = BackupScheduler(
            SnapshotStore(kv, clock=clock),
            settings,
            payload_factory=payload_with_user_edit,
            clock=clock,
            background=False,
        )

        assert scheduler.run_periodic_check() is not None
        assert settings.load().theme == "dark"
        assert settings.load().last_auto_backup_date == "2026-10-19T08:30:00.000Z"
        scheduler.shutdown()

    def test_evicts_after_write(self, kv, clock):
        """Periodic snapshots respect the bound."""
        scheduler, settings, snapshots = build_scheduler(
            kv, clock, background=False, max_snapshots=2
        )
        for _ in range(4):
            settings.save(Settings(), notify=False)
            scheduler.run_periodic_check()
            clock.advance(days=1)
        assert len(snapshots.keys()) == 2

    def test_failed_write_keeps_last_date(self, flaky_kv, clock):
        """When the snapshot fails the last date is not recorded."""
        scheduler, settings, snapshots = build_scheduler(
            flaky_kv, clock, background=False
        )
        flaky_kv.fail_all_writes = True
        assert scheduler.run_periodic_check() is None
        flaky_kv.fail_all_writes = False
        assert settings.load().last_auto_backup_date is None


class TestOnMutation:
    """Tests for the on-mutation trigger."""

    def test_content_save_takes_snapshot(self, kv, scheduler_parts):
        """Saving a content collection writes an auto snapshot."""
        scheduler, _, snapshots = scheduler_parts
        reports = ReportRepository(kv)
        scheduler.attach(reports)

        reports.save([Report(id="1")])

        assert len(snapshots.keys()) == 1
        assert snapshots.latest().is_auto

    def test_non_content_repositories_not_attached(self, kv, scheduler_parts):
        """Settings saves do not go through the mutation trigger."""
        scheduler, settings, _ = scheduler_parts
        scheduler.attach(settings)
        assert settings._listeners == []

    def test_silent_save_skipped(self, kv, scheduler_parts):
        """notify=False saves (imports, restores) take no snapshot."""
        scheduler, _, snapshots = scheduler_parts
        reports = ReportRepository(kv)
        scheduler.attach(reports)

        reports.save([Report(id="1")], notify=False)
        assert snapshots.keys() == []

    def test_disabled_setting_skips(self, kv, scheduler_parts):
        """No on-mutation snapshot while auto backup is disabled."""
        scheduler, settings, snapshots = scheduler_parts
        settings.save(Settings(auto_backup_enabled=False))
        assert scheduler.on_content_saved() is None
        assert snapshots.keys() == []

    def test_disabled_trigger_skips(self, kv, clock):
        """snapshot_on_mutation=False turns the trigger off."""
        scheduler, _, snapshots = build_scheduler(
            kv, clock, background=False, snapshot_on_mutation=False
        )
        scheduler.on_content_saved()
        assert snapshots.keys() == []

    def test_background_write(self, kv, clock):
        """Background snapshots land once the worker is idle."""
        scheduler, _, snapshots = build_scheduler(kv, clock, background=True)
        try:
            future = scheduler.on_content_saved()
            assert future is not None
            assert scheduler.wait_idle(timeout=5)
            assert len(snapshots.keys()) == 1
        finally:
            scheduler.shutdown()

    def test_payload_captured_at_save_time(self, kv, clock):
        """The snapshot holds the state as of the save."""
        state = {"reports": [{"id": "1"}]}
        scheduler = BackupScheduler(
            SnapshotStore(kv, clock=clock),
            SettingsRepository(kv),
            payload_factory=lambda: {"reports": list(state["reports"])},
            clock=clock,
            background=False,
        )
        scheduler.on_content_saved()
        state["reports"].append({"id": "2"})
        assert scheduler.snapshots.latest().payload == {"reports": [{"id": "1"}]}

    def test_failure_is_logged_not_raised(self, kv, clock):
        """A failing snapshot write is logged and dropped."""
        logger = MagicMock(spec=RadiaLogger)
        snapshots = MagicMock(spec=SnapshotStore)
        snapshots.create.side_effect = BackupError("disk full")
        scheduler = BackupScheduler(
            snapshots,
            SettingsRepository(kv),
            payload_factory=dict,
            clock=clock,
            logger=logger,
            background=False,
        )

        assert scheduler.on_content_saved() is None
        logger.log_error.assert_called_once()
        snapshots.evict_excess.assert_not_called()


class TestTimer:
    """Tests for the periodic timer thread."""

    def test_start_and_stop(self, scheduler_parts):
        """The timer thread starts and stops cleanly."""
        scheduler, _, _ = scheduler_parts
        scheduler.start(3600)
        assert scheduler._timer.is_alive()
        scheduler.stop()
        assert scheduler._timer is None

    def test_invalid_interval(self, scheduler_parts):
        """Intervals must be positive."""
        scheduler, _, _ = scheduler_parts
        with pytest.raises(ValueError):
            scheduler.start(0)
