"""
Tests for collection repositories.

Covers the load chain, save validation, error absorption and
listener notification.
"""
import json
from unittest.mock import MagicMock

from radia.core.logging_manager import RadiaLogger
from radia.database.defaults import REPORTS_KEY, SETTINGS_KEY
from radia.database.entities import Report, Settings
from radia.database.repositories import (
    PhraseCategoryRepository,
    PhraseRepository,
    ReportRepository,
    SettingsRepository,
    StatsRepository,
)


class TestLoad:
    """Tests for load()."""

    def test_seed_defaults_when_empty(self, kv):
        """Empty stores serve seeds without writing them."""
        assert ReportRepository(kv).load() == []
        categories = PhraseCategoryRepository(kv).load()
        assert [c.name for c in categories] == ["Técnica", "Descripción", "Conclusión"]
        assert kv.keys() == []

    def test_reads_current_key(self, kv):
        """Stored records are deserialized into entities."""
        kv.set(REPORTS_KEY, json.dumps([{"id": "1", "title": "RX tórax"}]))
        reports = ReportRepository(kv).load()
        assert reports == [Report(id="1", title="RX tórax")]

    def test_corrupt_current_blob_serves_seed_without_overwrite(self, kv):
        """Corrupt JSON is logged, the seed is served, the blob is kept."""
        kv.set(SETTINGS_KEY, "{{{")
        logger = MagicMock(spec=RadiaLogger)

        settings = SettingsRepository(kv, logger=logger).load()

        assert settings == Settings()
        assert kv.get(SETTINGS_KEY) == "{{{"
        logger.log_error.assert_called_once()

    def test_wrong_shape_under_current_key_serves_seed(self, kv):
        """A non-list under a list key is treated as corrupt."""
        kv.set(REPORTS_KEY, json.dumps({"id": "1"}))
        assert ReportRepository(kv).load() == []

    def test_read_failure_keeps_cached_value(self, flaky_kv):
        """A failed reload keeps what was already in memory."""
        repo = ReportRepository(flaky_kv)
        repo.save([Report(id="1")])

        flaky_kv.fail_reads = True
        assert repo.load() == [Report(id="1")]

    def test_value_loads_lazily(self, kv):
        """value triggers a load on first access."""
        kv.set(REPORTS_KEY, json.dumps([{"id": "9"}]))
        assert ReportRepository(kv).value[0].id == "9"


class TestSave:
    """Tests for save()."""

    def test_save_persists_and_caches(self, kv):
        """A valid save writes the blob and updates the cache."""
        repo = ReportRepository(kv)
        assert repo.save([Report(id="1", title="ECO abdominal")]) is True
        assert json.loads(kv.get(REPORTS_KEY))[0]["title"] == "ECO abdominal"
        assert repo.value[0].title == "ECO abdominal"

    def test_save_accepts_wire_dicts(self, kv):
        """Wire dicts are converted to entities."""
        repo = PhraseRepository(kv)
        assert repo.save([{"id": "1", "text": "Sin cambios."}]) is True
        assert repo.value[0].text == "Sin cambios."

    def test_entity_instances_are_normalized(self, kv):
        """Instances get the same clamping as wire dicts."""
        repo = ReportRepository(kv)
        assert repo.save([Report(id="1", filters="f12")]) is True
        assert repo.value[0].filters == []
        assert json.loads(kv.get(REPORTS_KEY))[0]["filters"] == []

    def test_singleton_instance_normalized(self, kv):
        """A zero or string frequency is stored as a valid day count."""
        repo = SettingsRepository(kv)
        repo.save(Settings(auto_backup_frequency_days=0))
        assert repo.value.auto_backup_frequency_days == 1

        repo.save(Settings(auto_backup_frequency_days="3"))
        assert repo.value.auto_backup_frequency_days == 3
        assert json.loads(kv.get(SETTINGS_KEY))["autoBackupFrequencyDays"] == 3

    def test_wrong_container_rejected(self, kv):
        """A non-list value is rejected and nothing is written."""
        repo = ReportRepository(kv)
        repo.save([Report(id="1")])

        assert repo.save({"id": "2"}) is False
        assert repo.value == [Report(id="1")]
        assert json.loads(kv.get(REPORTS_KEY)) == [Report(id="1").to_dict()]

    def test_invalid_item_rejected(self, kv):
        """Items that are neither entities nor dicts are rejected."""
        assert ReportRepository(kv).save(["just a string"]) is False
        assert kv.get(REPORTS_KEY) is None

    def test_singleton_rejects_list(self, kv):
        """Singleton collections need an object."""
        assert StatsRepository(kv).save([]) is False

    def test_write_failure_leaves_memory_unchanged(self, flaky_kv):
        """StoreIOError is absorbed and the cache is not touched."""
        repo = ReportRepository(flaky_kv)
        repo.save([Report(id="1")])
        flaky_kv.fail_all_writes = True

        assert repo.save([Report(id="1"), Report(id="2")]) is False
        assert repo.value == [Report(id="1")]


class TestListeners:
    """Tests for change notification."""

    def test_listener_called_on_save(self, kv):
        """Listeners receive the saved value."""
        repo = ReportRepository(kv)
        listener = MagicMock()
        repo.subscribe(listener)

        repo.save([Report(id="1")])
        listener.assert_called_once_with([Report(id="1")])

    def test_notify_false_skips_listeners(self, kv):
        """Silent saves do not notify."""
        repo = ReportRepository(kv)
        listener = MagicMock()
        repo.subscribe(listener)

        repo.save([Report(id="1")], notify=False)
        listener.assert_not_called()

    def test_failed_save_does_not_notify(self, kv):
        """Rejected saves do not notify."""
        repo = ReportRepository(kv)
        listener = MagicMock()
        repo.subscribe(listener)

        repo.save("garbage")
        listener.assert_not_called()

    def test_listener_error_does_not_fail_save(self, kv):
        """A raising listener is logged; the save still succeeds."""
        logger = MagicMock(spec=RadiaLogger)
        repo = ReportRepository(kv, logger=logger)
        repo.subscribe(MagicMock(side_effect=RuntimeError("boom")))

        assert repo.save([Report(id="1")]) is True
        logger.log_error.assert_called_once()

    def test_content_flags(self, kv):
        """Only reports and phrases are content collections."""
        assert ReportRepository(kv).is_content
        assert PhraseRepository(kv).is_content
        assert not SettingsRepository(kv).is_content
