#!/usr/bin/env python3
"""
repositories.py
--------------------
Typed load/save of one collection over the key-value store.

Each repository owns exactly one storage key (the report taxonomy also
knows the legacy key it used to live under) and keeps the last loaded or
saved value in memory.

Load chain:
    1. Current key present: deserialize and serve it. A corrupt blob is
       logged and the seed default is served; the blob is left in place.
    2. Legacy key present: deserialize, write forward under the current
       key, serve it. Corrupt legacy data raises MigrationError, which
       is logged and answered with the seed default.
    3. Nothing stored: serve the seed default (nothing is written).

Save contract:
    save() checks the container shape, persists, updates the cache and
    notifies listeners. StoreIOError and ValidationError never escape:
    they are logged, the cache is left untouched and False is returned.

Usage:
    reports = ReportRepository(kv, logger=logger)
    current = reports.load()
    ok = reports.save(current + [new_report])
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import threading
from typing import Any, Callable, Generic, List, Optional, Type, TypeVar

# --- Local imports ---
from radia.core.exceptions import MigrationError, StoreIOError, ValidationError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.validators import DataValidator

from . import defaults
from .entities import (
    Category,
    Filter,
    Phrase,
    ProductivityStats,
    Report,
    SavedTranscription,
    Settings,
)
from .kv_store import KeyValueStore
from .migration import MigrationDecision, resolve

T = TypeVar("T")
Listener = Callable[[Any], None]


class CollectionRepository(Generic[T]):
    """
    Base repository for one persisted collection.

    Subclasses set the class attributes and implement ``default``,
    ``coerce`` and ``encode``.

    Attributes:
        name: Collection name used in logs and payloads
        key: Current storage key
        legacy_key: Key used by older releases, if any
        is_content: Saves count as content mutations (trigger backups)
    """

    name: str = ""
    key: str = ""
    legacy_key: Optional[str] = None
    is_content: bool = False

    def __init__(
        self, kv: KeyValueStore, logger: Optional[RadiaLogger] = None
    ) -> None:
        self.kv = kv
        self.logger = logger
        self._cache: Optional[T] = None
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    # --- Subclass hooks ---
    def default(self) -> T:
        """Fresh seed value for this collection."""
        raise NotImplementedError

    def coerce(self, value: Any) -> T:
        """
        Check the container shape and convert wire dicts to entities.

        Raises:
            ValidationError: If the value has the wrong shape
        """
        raise NotImplementedError

    def encode(self, value: T) -> Any:
        """Convert the typed value to its JSON-ready wire form."""
        raise NotImplementedError

    # --- Listeners ---
    def subscribe(self, listener: Listener) -> None:
        """Call ``listener(value)`` after every notifying save."""
        self._listeners.append(listener)

    # --- Load ---
    @property
    def value(self) -> T:
        """Cached value, loading it on first access."""
        with self._lock:
            if self._cache is None:
                return self.load()
            return self._cache

    def load(self) -> T:
        """
        Load the collection through the migration chain.

        Returns:
            The stored value, the migrated legacy value, or the seed default
        """
        with self._lock:
            try:
                value = self._load_from_store()
            except StoreIOError as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "load", "collection": self.name}
                )
                value = self._cache if self._cache is not None else self.default()
            self._cache = value
            return value

    def _load_from_store(self) -> T:
        current = self.kv.get(self.key)
        legacy = None
        if current is None and self.legacy_key:
            legacy = self.kv.get(self.legacy_key)

        decision = resolve(current is not None, legacy is not None)

        if decision is MigrationDecision.USE_CURRENT:
            try:
                return self._deserialize(current)
            except ValidationError as e:
                safe_logger(self.logger).log_error(
                    e,
                    {
                        "operation": "load",
                        "collection": self.name,
                        "key": self.key,
                        "fallback": "seed_default",
                    },
                )
                return self.default()

        if decision is MigrationDecision.MIGRATE_FROM_LEGACY:
            try:
                return self._migrate_legacy(legacy)
            except MigrationError as e:
                safe_logger(self.logger).log_error(
                    e,
                    {
                        "operation": "migrate",
                        "collection": self.name,
                        "legacy_key": self.legacy_key,
                        "fallback": "seed_default",
                    },
                )
                return self.default()

        safe_logger(self.logger).log_debug(
            f"Seeding default {self.name}", {"key": self.key}
        )
        return self.default()

    def _migrate_legacy(self, blob: str) -> T:
        try:
            value = self._deserialize(blob)
        except ValidationError as e:
            raise MigrationError(
                f"Corrupt legacy data under '{self.legacy_key}': {e}"
            ) from e

        try:
            self.kv.set(self.key, self._serialize(value))
        except StoreIOError as e:
            # Served anyway; the next load migrates again
            safe_logger(self.logger).log_error(
                e, {"operation": "migrate_write", "collection": self.name}
            )
        else:
            safe_logger(self.logger).log_operation(
                "legacy_migrated",
                {
                    "collection": self.name,
                    "from_key": self.legacy_key,
                    "to_key": self.key,
                },
            )
        return value

    def _deserialize(self, blob: str) -> T:
        try:
            raw = json.loads(blob)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid JSON under '{self.key}': {e}") from e
        return self.coerce(raw)

    def _serialize(self, value: T) -> str:
        return json.dumps(self.encode(value), ensure_ascii=False)

    # --- Save ---
    def save(self, value: Any, notify: bool = True) -> bool:
        """
        Validate and persist a new value for the collection.

        Args:
            value: Entities or their wire dicts, in the collection's shape
            notify: Inform listeners (False for import, restore, self-heal)

        Returns:
            True if persisted; False if rejected or the write failed
        """
        with self._lock:
            try:
                typed = self.coerce(value)
                self.kv.set(self.key, self._serialize(typed))
            except (ValidationError, StoreIOError) as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "save", "collection": self.name}
                )
                return False
            self._cache = typed

        safe_logger(self.logger).log_operation(
            "collection_saved",
            {"collection": self.name, "key": self.key, "notify": notify},
        )
        if notify:
            self._notify(typed)
        return True

    def _notify(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "notify", "collection": self.name}
                )


class ListRepository(CollectionRepository[List[Any]]):
    """Repository holding a list of one entity type."""

    entity: Type[Any] = object

    def default(self) -> List[Any]:
        return []

    def coerce(self, value: Any) -> List[Any]:
        DataValidator.ensure_list(value, self.name)
        items = []
        for item in value:
            if isinstance(item, self.entity):
                # Instances go through the wire form so they are normalized too
                items.append(self.entity.from_dict(item.to_dict()))
            elif isinstance(item, dict):
                items.append(self.entity.from_dict(item))
            else:
                raise ValidationError(
                    f"Invalid item in {self.name}: {type(item).__name__}"
                )
        return items

    def encode(self, value: List[Any]) -> List[Any]:
        return [item.to_dict() for item in value]


class SingletonRepository(CollectionRepository[Any]):
    """Repository holding exactly one entity."""

    entity: Type[Any] = object

    def coerce(self, value: Any) -> Any:
        if isinstance(value, self.entity):
            return self.entity.from_dict(value.to_dict())
        if isinstance(value, dict):
            return self.entity.from_dict(value)
        raise ValidationError(
            f"Expected an object for {self.name}, got {type(value).__name__}"
        )

    def encode(self, value: Any) -> Any:
        return value.to_dict()


# --- Concrete repositories ---
class ReportRepository(ListRepository):
    name = "reports"
    key = defaults.REPORTS_KEY
    entity = Report
    is_content = True


class PhraseRepository(ListRepository):
    name = "phrases"
    key = defaults.PHRASES_KEY
    entity = Phrase
    is_content = True


class ReportCategoryRepository(ListRepository):
    name = "reportCategories"
    key = defaults.REPORT_CATEGORIES_KEY
    legacy_key = defaults.LEGACY_CATEGORIES_KEY
    entity = Category

    def default(self) -> List[Category]:
        return defaults.default_report_categories()


class ReportFilterRepository(ListRepository):
    name = "reportFilters"
    key = defaults.REPORT_FILTERS_KEY
    legacy_key = defaults.LEGACY_FILTERS_KEY
    entity = Filter

    def default(self) -> List[Filter]:
        return defaults.default_report_filters()


class PhraseCategoryRepository(ListRepository):
    name = "phraseCategories"
    key = defaults.PHRASE_CATEGORIES_KEY
    entity = Category

    def default(self) -> List[Category]:
        return defaults.default_phrase_categories()


class PhraseFilterRepository(ListRepository):
    name = "phraseFilters"
    key = defaults.PHRASE_FILTERS_KEY
    entity = Filter

    def default(self) -> List[Filter]:
        return defaults.default_phrase_filters()


class SavedTranscriptionRepository(ListRepository):
    name = "savedTranscriptions"
    key = defaults.SAVED_TRANSCRIPTIONS_KEY
    entity = SavedTranscription


class SettingsRepository(SingletonRepository):
    name = "settings"
    key = defaults.SETTINGS_KEY
    entity = Settings

    def default(self) -> Settings:
        return defaults.default_settings()


class StatsRepository(SingletonRepository):
    name = "stats"
    key = defaults.STATS_KEY
    entity = ProductivityStats

    def default(self) -> ProductivityStats:
        return defaults.default_stats()
