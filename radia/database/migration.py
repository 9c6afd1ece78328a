#!/usr/bin/env python3
"""
migration.py
--------------------
Key-layout migration decision for collection loads.

A collection is read from its current key when that key exists. If not,
and a legacy key exists, the legacy blob is used and immediately written
forward under the current key. Otherwise the seed default is served.

The decision is a pure function of which keys are present; the
repository performs the reads and writes. Because migration always
writes the current key, the next load resolves to USE_CURRENT, so
running it twice neither duplicates nor loses data.
"""
from enum import Enum


class MigrationDecision(Enum):
    """Where a collection load takes its data from."""

    USE_CURRENT = "use_current"
    MIGRATE_FROM_LEGACY = "migrate_from_legacy"
    SEED_DEFAULT = "seed_default"


def resolve(current_present: bool, legacy_present: bool) -> MigrationDecision:
    """
    Decide how to load a collection.

    Args:
        current_present: The current key holds a value
        legacy_present: The legacy key holds a value (always False for
            collections without a legacy key)

    Returns:
        MigrationDecision for the load
    """
    if current_present:
        return MigrationDecision.USE_CURRENT
    if legacy_present:
        return MigrationDecision.MIGRATE_FROM_LEGACY
    return MigrationDecision.SEED_DEFAULT
