"""
Tests for the migration decision and legacy-key loading.
"""
import json

import pytest

from radia.database.defaults import (
    LEGACY_CATEGORIES_KEY,
    LEGACY_FILTERS_KEY,
    REPORT_CATEGORIES_KEY,
    REPORT_FILTERS_KEY,
)
from radia.database.migration import MigrationDecision, resolve
from radia.database.repositories import (
    ReportCategoryRepository,
    ReportFilterRepository,
)

LEGACY_CATEGORIES = [
    {
        "id": "cat_a",
        "name": "Urgencias",
        "isVisible": True,
        "color": "#F44336",
        "icon": "Alert",
        "createdAt": "2023-05-01T10:00:00.000Z",
    }
]


class TestResolve:
    """Tests for the pure decision function."""

    @pytest.mark.parametrize(
        "current, legacy, expected",
        [
            (True, True, MigrationDecision.USE_CURRENT),
            (True, False, MigrationDecision.USE_CURRENT),
            (False, True, MigrationDecision.MIGRATE_FROM_LEGACY),
            (False, False, MigrationDecision.SEED_DEFAULT),
        ],
    )
    def test_decision_table(self, current, legacy, expected):
        """Current key wins, then legacy, then seed."""
        assert resolve(current, legacy) is expected


class TestLegacyMigration:
    """Loading collections that only exist under legacy keys."""

    def test_migration_is_idempotent(self, kv):
        """Two loads agree and the legacy content is copied forward."""
        kv.set(LEGACY_CATEGORIES_KEY, json.dumps(LEGACY_CATEGORIES))

        first = ReportCategoryRepository(kv).load()
        second = ReportCategoryRepository(kv).load()

        assert first == second
        assert [c.id for c in first] == ["cat_a"]
        assert json.loads(kv.get(REPORT_CATEGORIES_KEY)) == json.loads(
            kv.get(LEGACY_CATEGORIES_KEY)
        )

    def test_legacy_key_left_in_place(self, kv):
        """Migration copies forward; it does not delete the legacy key."""
        kv.set(LEGACY_FILTERS_KEY, "[]")
        ReportFilterRepository(kv).load()
        assert kv.get(LEGACY_FILTERS_KEY) == "[]"
        assert kv.get(REPORT_FILTERS_KEY) == "[]"

    def test_current_key_preferred_over_legacy(self, kv):
        """When both keys exist the legacy one is ignored."""
        kv.set(REPORT_CATEGORIES_KEY, "[]")
        kv.set(LEGACY_CATEGORIES_KEY, json.dumps(LEGACY_CATEGORIES))
        assert ReportCategoryRepository(kv).load() == []

    def test_corrupt_legacy_data_serves_seed(self, kv):
        """Corrupt legacy data falls back to the seed and is not copied."""
        kv.set(LEGACY_CATEGORIES_KEY, "{not json")
        categories = ReportCategoryRepository(kv).load()

        assert [c.id for c in categories] == ["report_cat_1", "report_cat_2"]
        assert kv.get(REPORT_CATEGORIES_KEY) is None
        assert kv.get(LEGACY_CATEGORIES_KEY) == "{not json"

    def test_migration_write_failure_still_serves_data(self, flaky_kv):
        """If the forward write fails the legacy data is still served."""
        flaky_kv.set(LEGACY_CATEGORIES_KEY, json.dumps(LEGACY_CATEGORIES))
        flaky_kv.fail_writes.add(REPORT_CATEGORIES_KEY)

        categories = ReportCategoryRepository(flaky_kv).load()

        assert [c.id for c in categories] == ["cat_a"]
        assert flaky_kv.get(REPORT_CATEGORIES_KEY) is None
