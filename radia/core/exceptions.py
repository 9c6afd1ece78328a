#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the Radia data store.

This module defines a hierarchy of exceptions used throughout the store
to signal specific error conditions in its subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── RadiaError - Base for every store exception
    │   ├── StoreError - Base for persistence-related errors
    │   │   ├── StoreIOError - Key-value read/write failures
    │   │   ├── MalformedPayloadError - Unparseable import payloads
    │   │   ├── MigrationError - Corrupt legacy data
    │   │   └── BackupError - Snapshot creation/restore failures
    │   ├── ValidationError - Values with the wrong container shape
    │   └── ConfigError - Invalid store configuration

Propagation:
    StoreIOError and ValidationError are absorbed at the repository
    boundary (logged, reported as a False result). MalformedPayloadError
    aborts an import and is reported as a failed ImportResult. BackupError
    is logged by the scheduler and never reaches the caller of a save.

Usage:
    from radia.core.exceptions import StoreIOError, ValidationError

    try:
        kv.set("pref_reports", blob)
    except StoreIOError as e:
        logger.log_error(e, {"operation": "save_reports"})
"""


class RadiaError(Exception):
    """Base exception for all Radia store errors."""

    pass


class StoreError(RadiaError):
    """
    Base exception for persistence-related errors.

    Catch this to handle any storage, payload, migration or backup error,
    or catch specific subclasses for more granular handling.
    """

    pass


class StoreIOError(StoreError):
    """
    Exception for key-value substrate failures.

    Raised by a KeyValueStore when the underlying read or write fails:
    - SQLite file locked or unwritable
    - Disk full
    - Connection errors

    Callers must treat a write failure as "state not persisted" and keep
    their in-memory copy.

    Examples:
        >>> raise StoreIOError("Failed to write key 'pref_reports': disk I/O error")
    """

    pass


class MalformedPayloadError(StoreError):
    """
    Exception for import payloads that cannot be applied.

    Raised when an import payload:
    - Is not valid JSON
    - Is not a JSON object
    - Carries a sub-collection of the wrong shape (e.g. reports is a string)

    Examples:
        >>> raise MalformedPayloadError("Payload is not a JSON object")
        >>> raise MalformedPayloadError("Field 'reports' must be a list, got dict")
    """

    pass


class MigrationError(StoreError):
    """
    Exception for corrupt legacy data.

    Raised when a legacy storage key exists but its content cannot be
    deserialized into the current collection shape.

    Examples:
        >>> raise MigrationError("Legacy key 'pref_categories' holds invalid JSON")
    """

    pass


class BackupError(StoreError):
    """
    Exception for snapshot creation and restoration failures.

    Raised when:
    - A snapshot key cannot be written
    - A snapshot to restore does not exist
    - A snapshot payload cannot be re-applied

    Examples:
        >>> raise BackupError("Snapshot not found: manual_backup_2026-01-01T00:00:00.000000Z")
    """

    pass


class ValidationError(RadiaError):
    """
    Exception for data validation failures.

    Raised when a value handed to the store has the wrong shape:
    - A list collection saved with something that is not a list
    - A record that is neither a dataclass instance nor a mapping
    - A filter created under a category that does not exist
    - Out-of-range values (satisfaction rating, interaction minutes)

    Examples:
        >>> raise ValidationError("Expected a list of Report, got str")
        >>> raise ValidationError("Category 'report_cat_9' does not exist")
    """

    pass


class ConfigError(RadiaError):
    """
    Exception for invalid store configuration.

    Examples:
        >>> raise ConfigError("max_snapshots must be a positive integer")
        >>> raise ConfigError("Config file is not a YAML mapping")
    """

    pass
