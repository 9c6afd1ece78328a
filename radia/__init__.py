"""
Radia Data Store
================

Local-first storage engine for the Radia medical-report authoring app.

Persists reports, phrases, their category/filter taxonomies, settings,
productivity statistics and saved transcriptions behind a single
key-value store, migrates legacy key layouts, and keeps a bounded ring of
timestamped snapshots for export, import and disaster recovery.

Main Components:
    - database: Key-value stores, repositories, stats, snapshots, backup
      policy, export/import codec and the DataStore handle
    - database.cli: Command-line management of a SQLite-backed store
    - core: Logging, configuration, validation, paths and time helpers

Example Usage:
    >>> from radia.database import DataStore, SqliteKeyValueStore
    >>> from radia.core.paths import DB_PATH
    >>> store = DataStore(SqliteKeyValueStore(DB_PATH))
    >>> store.load_data()
    >>> store.add_report("RM rodilla", "Menisco interno integro.")
"""

__version__ = "2.2.0"
__author__ = "Radia Project"
