#!/usr/bin/env python3
"""
manager.py
--------------------
DataStore: the single owned handle to a Radia store.

DataStore wires the repositories, statistics, snapshots, backup policy
and the export/import codec over one key-value store, and exposes the
operations the app's screens use. Components that need store access
receive the DataStore instance; there is no module-level instance.

Key Features:
    - Typed CRUD over reports, phrases, taxonomies and transcriptions
    - Productivity tracking with recomputed day/week/month windows
    - Automatic snapshots on content changes and on a periodic schedule
    - Manual snapshots, restore, export and import
    - Self-heal: after an app version change the newest snapshot is
      restored before use

Usage:
    from radia.database import DataStore, SqliteKeyValueStore

    store = DataStore(SqliteKeyValueStore(DB_PATH), config=config)
    store.load_data()
    report = store.add_report("TC craneal", "Sin hallazgos.")
    store.track_copy("report")
    store.close()
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

# --- Local imports ---
from radia.core.collaborators import TextGenerationService, TranscriptionService
from radia.core.config import StoreConfig
from radia.core.exceptions import BackupError, StoreIOError, ValidationError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.timeutils import Clock, MonotonicIdGenerator, iso_millis, utc_now

from .backup_scheduler import BackupScheduler
from .defaults import APP_VERSION_KEY
from .entities import (
    TRANSCRIPTION_TYPES,
    Category,
    Filter,
    Phrase,
    ProductivityStats,
    Report,
    SavedTranscription,
    Settings,
)
from .export_manager import ExportImportCodec, ExportPayload, ImportResult
from .kv_store import KeyValueStore
from .repositories import (
    CollectionRepository,
    PhraseCategoryRepository,
    PhraseFilterRepository,
    PhraseRepository,
    ReportCategoryRepository,
    ReportFilterRepository,
    ReportRepository,
    SavedTranscriptionRepository,
    SettingsRepository,
    StatsRepository,
)
from .snapshot_store import Snapshot, SnapshotStore
from .stats import StatsAggregator

DOMAINS = ("report", "phrase")

_REPORT_FIELDS = {"title", "content", "category_id", "filters", "is_favorite"}
_PHRASE_FIELDS = {
    "text",
    "category_id",
    "filters",
    "is_frequent",
    "is_favorite",
    "usage_count",
}
_CATEGORY_FIELDS = {"name", "is_visible", "color", "icon"}
_FILTER_FIELDS = {"name", "category_id", "is_active"}


def _check_updates(updates: Dict[str, Any], allowed: set, what: str) -> None:
    unknown = sorted(set(updates) - allowed)
    if unknown:
        raise ValidationError(f"Cannot update {what} fields: {', '.join(unknown)}")


class DataStore:
    """
    Local-first store for reports, phrases, taxonomies, settings and stats.

    Mutators return the new record (or True) when the change was
    persisted and None (or False) when it was not; a failed write leaves
    the in-memory state unchanged. Invalid arguments raise ValidationError.

    Attributes:
        kv: Underlying key-value store
        config: Engine configuration
        repositories: Collection name -> repository
        stats: Productivity statistics
        snapshots: Snapshot ring buffer
        codec: Export/import codec
        scheduler: Automatic backup policy
        load_snapshot: Periodic snapshot taken by the last load_data()
    """

    def __init__(
        self,
        kv: KeyValueStore,
        config: Optional[StoreConfig] = None,
        clock: Optional[Clock] = None,
        logger: Optional[RadiaLogger] = None,
        id_generator: Optional[Callable[[], str]] = None,
    ) -> None:
        """
        Wire a store over ``kv``. Nothing is read until load_data().

        Args:
            kv: Key-value store holding every collection and snapshot
            config: Engine configuration (defaults if None)
            clock: Returns the current time; tests pin it
            logger: Optional logger shared by every component
            id_generator: Returns new record ids
        """
        self.kv = kv
        self.config = config or StoreConfig()
        self.clock = clock or utc_now
        self.logger = logger
        self.new_id = id_generator or MonotonicIdGenerator(self.clock)

        self.repositories: Dict[str, CollectionRepository] = {
            repo.name: repo
            for repo in (
                ReportRepository(kv, logger),
                ReportCategoryRepository(kv, logger),
                ReportFilterRepository(kv, logger),
                PhraseRepository(kv, logger),
                PhraseCategoryRepository(kv, logger),
                PhraseFilterRepository(kv, logger),
                SettingsRepository(kv, logger),
                StatsRepository(kv, logger),
                SavedTranscriptionRepository(kv, logger),
            )
        }

        self.stats = StatsAggregator(
            self.repositories["stats"], clock=self.clock, logger=logger
        )
        self.snapshots = SnapshotStore(kv, clock=self.clock, logger=logger)
        self.codec = ExportImportCodec(
            self.repositories,
            app_version=self.config.app_version,
            clock=self.clock,
            logger=logger,
        )
        self.scheduler = BackupScheduler(
            self.snapshots,
            self.repositories["settings"],
            payload_factory=lambda: self.codec.export().to_dict(),
            max_snapshots=self.config.max_snapshots,
            clock=self.clock,
            logger=logger,
            background=self.config.background_backups,
            snapshot_on_mutation=self.config.snapshot_on_mutation,
        )
        for repo in self.repositories.values():
            self.scheduler.attach(repo)
        self.scheduler.watch_settings()

        self._loaded = False
        # Periodic snapshot taken by the last load_data(), if any
        self.load_snapshot: Optional[Snapshot] = None

    # --- Lifecycle ---
    def load_data(self) -> Optional[str]:
        """
        Load every collection, self-heal after a version change and run
        the periodic backup check.

        Returns:
            Key of the snapshot restored by self-heal, or None
        """
        for repo in self.repositories.values():
            repo.load()

        restored = self._self_heal()
        self.load_snapshot = self.scheduler.run_periodic_check()
        if self.config.periodic_check_seconds:
            self.scheduler.start(self.config.periodic_check_seconds)

        self._loaded = True
        safe_logger(self.logger).log_operation(
            "store_loaded",
            {
                "app_version": self.config.app_version,
                "restored_snapshot": restored,
            },
        )
        return restored

    def _self_heal(self) -> Optional[str]:
        """Restore the newest snapshot when the stored app version differs."""
        version = self.config.app_version
        try:
            stored = self.kv.get(APP_VERSION_KEY)
        except StoreIOError as e:
            safe_logger(self.logger).log_error(e, {"operation": "self_heal"})
            return None
        if stored == version:
            return None

        restored = None
        try:
            latest = self.snapshots.latest()
        except StoreIOError as e:
            safe_logger(self.logger).log_error(e, {"operation": "self_heal"})
            latest = None

        if latest is not None:
            result = self.codec.import_payload(latest.payload)
            if result:
                restored = latest.key
                safe_logger(self.logger).log_operation(
                    "self_heal_restored",
                    {"from_version": stored, "to_version": version, "key": latest.key},
                )
            else:
                safe_logger(self.logger).log_warning(
                    "Self-heal restore failed",
                    {"key": latest.key, "error": result.error},
                )

        try:
            self.kv.set(APP_VERSION_KEY, version)
        except StoreIOError as e:
            safe_logger(self.logger).log_error(
                e, {"operation": "self_heal", "step": "write_version"}
            )
        return restored

    def close(self) -> None:
        """Finish pending backups, stop the timer and release the store."""
        self.scheduler.shutdown()
        self.kv.close()

    def __enter__(self) -> "DataStore":
        if not self._loaded:
            self.load_data()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Current values ---
    def _repo(self, name: str) -> CollectionRepository:
        return self.repositories[name]

    @property
    def reports(self) -> List[Report]:
        return self._repo("reports").value

    @property
    def phrases(self) -> List[Phrase]:
        return self._repo("phrases").value

    @property
    def report_categories(self) -> List[Category]:
        return self._repo("reportCategories").value

    @property
    def report_filters(self) -> List[Filter]:
        return self._repo("reportFilters").value

    @property
    def phrase_categories(self) -> List[Category]:
        return self._repo("phraseCategories").value

    @property
    def phrase_filters(self) -> List[Filter]:
        return self._repo("phraseFilters").value

    # Older screens read the report taxonomy under these names
    categories = report_categories
    filters = report_filters

    @property
    def settings(self) -> Settings:
        return self._repo("settings").value

    @property
    def saved_transcriptions(self) -> List[SavedTranscription]:
        return self._repo("savedTranscriptions").value

    @property
    def productivity(self) -> ProductivityStats:
        """Stats with derived windows recomputed for today."""
        return self.stats.current()

    def _now(self) -> str:
        return iso_millis(self.clock())

    # --- Generic list helpers ---
    def _append(self, name: str, item: Any) -> Optional[Any]:
        repo = self._repo(name)
        if not repo.save(repo.value + [item]):
            return None
        return self._find(name, item.id)

    def _replace_item(
        self, name: str, item_id: str, change: Callable[[Any], Any]
    ) -> Optional[Any]:
        repo = self._repo(name)
        items = list(repo.value)
        for index, item in enumerate(items):
            if item.id == item_id:
                items[index] = change(item)
                return self._find(name, item_id) if repo.save(items) else None
        return None

    def _find(self, name: str, item_id: str) -> Optional[Any]:
        # Saved items are normalized, so return the stored copy
        return next((i for i in self._repo(name).value if i.id == item_id), None)

    def _remove_item(self, name: str, item_id: str) -> bool:
        repo = self._repo(name)
        items = [item for item in repo.value if item.id != item_id]
        if len(items) == len(repo.value):
            return False
        return repo.save(items)

    # --- Reports ---
    def add_report(
        self,
        title: str,
        content: str,
        category_id: Optional[str] = None,
        filters: Optional[List[str]] = None,
        is_favorite: bool = False,
    ) -> Optional[Report]:
        now = self._now()
        report = Report(
            id=self.new_id(),
            title=title,
            content=content,
            category_id=category_id,
            filters=list(filters or []),
            is_favorite=is_favorite,
            created_at=now,
            updated_at=now,
        )
        return self._append("reports", report)

    def update_report(self, report_id: str, **updates: Any) -> Optional[Report]:
        """
        Edit a report in place and stamp ``updated_at``.

        Args:
            report_id: Report to edit
            **updates: title, content, category_id, filters, is_favorite

        Returns:
            The updated report, or None if unknown or not persisted

        Raises:
            ValidationError: On an unknown field name
        """
        _check_updates(updates, _REPORT_FIELDS, "report")
        now = self._now()
        return self._replace_item(
            "reports",
            report_id,
            lambda report: replace(report, **updates, updated_at=now),
        )

    def delete_report(self, report_id: str) -> bool:
        return self._remove_item("reports", report_id)

    def toggle_report_favorite(self, report_id: str) -> Optional[Report]:
        report = next((r for r in self.reports if r.id == report_id), None)
        if report is None:
            return None
        return self.update_report(report_id, is_favorite=not report.is_favorite)

    # --- Phrases ---
    def add_phrase(
        self,
        text: str,
        category_id: Optional[str] = None,
        filters: Optional[List[str]] = None,
        is_frequent: bool = False,
        is_favorite: bool = False,
    ) -> Optional[Phrase]:
        phrase = Phrase(
            id=self.new_id(),
            text=text,
            category_id=category_id,
            filters=list(filters or []),
            is_frequent=is_frequent,
            is_favorite=is_favorite,
            usage_count=0,
            created_at=self._now(),
        )
        return self._append("phrases", phrase)

    def update_phrase(self, phrase_id: str, **updates: Any) -> Optional[Phrase]:
        """Edit a phrase; accepts text, category_id, filters, is_frequent,
        is_favorite and usage_count."""
        _check_updates(updates, _PHRASE_FIELDS, "phrase")
        now = self._now()
        return self._replace_item(
            "phrases",
            phrase_id,
            lambda phrase: replace(phrase, **updates, updated_at=now),
        )

    def delete_phrase(self, phrase_id: str) -> bool:
        return self._remove_item("phrases", phrase_id)

    def toggle_phrase_favorite(self, phrase_id: str) -> Optional[Phrase]:
        phrase = next((p for p in self.phrases if p.id == phrase_id), None)
        if phrase is None:
            return None
        return self.update_phrase(phrase_id, is_favorite=not phrase.is_favorite)

    def increment_phrase_usage(self, phrase_id: str) -> Optional[Phrase]:
        phrase = next((p for p in self.phrases if p.id == phrase_id), None)
        if phrase is None:
            return None
        return self.update_phrase(phrase_id, usage_count=phrase.usage_count + 1)

    # --- Taxonomies ---
    @staticmethod
    def _taxonomy_names(domain: str) -> Tuple[str, str]:
        if domain not in DOMAINS:
            raise ValidationError(
                f"Unknown taxonomy domain '{domain}' (expected report or phrase)"
            )
        return f"{domain}Categories", f"{domain}Filters"

    def get_categories(self, domain: str) -> List[Category]:
        return self._repo(self._taxonomy_names(domain)[0]).value

    def get_filters(self, domain: str) -> List[Filter]:
        return self._repo(self._taxonomy_names(domain)[1]).value

    def add_category(
        self,
        domain: str,
        name: str,
        color: str = "#607D8B",
        icon: str = "Folder",
        is_visible: bool = True,
    ) -> Optional[Category]:
        categories_name, _ = self._taxonomy_names(domain)
        if not name or not name.strip():
            raise ValidationError("Category name must not be empty")
        category = Category(
            id=self.new_id(),
            name=name.strip(),
            is_visible=is_visible,
            color=color,
            icon=icon,
            created_at=self._now(),
        )
        return self._append(categories_name, category)

    def update_category(
        self, domain: str, category_id: str, **updates: Any
    ) -> Optional[Category]:
        categories_name, _ = self._taxonomy_names(domain)
        _check_updates(updates, _CATEGORY_FIELDS, "category")
        return self._replace_item(
            categories_name, category_id, lambda category: replace(category, **updates)
        )

    def delete_category(self, domain: str, category_id: str) -> bool:
        """
        Delete a category. Its filters stay until cleanup_orphan_filters().
        """
        categories_name, _ = self._taxonomy_names(domain)
        return self._remove_item(categories_name, category_id)

    def add_filter(
        self, domain: str, name: str, category_id: str, is_active: bool = True
    ) -> Optional[Filter]:
        """
        Create a filter under an existing category.

        Raises:
            ValidationError: If the name is empty or the category does not
                exist in the domain
        """
        categories_name, filters_name = self._taxonomy_names(domain)
        if not name or not name.strip():
            raise ValidationError("Filter name must not be empty")
        if not any(c.id == category_id for c in self._repo(categories_name).value):
            raise ValidationError(
                f"Unknown {domain} category '{category_id}' for new filter"
            )
        new_filter = Filter(
            id=self.new_id(),
            name=name.strip(),
            category_id=category_id,
            is_active=is_active,
            created_at=self._now(),
        )
        return self._append(filters_name, new_filter)

    def update_filter(
        self, domain: str, filter_id: str, **updates: Any
    ) -> Optional[Filter]:
        _, filters_name = self._taxonomy_names(domain)
        _check_updates(updates, _FILTER_FIELDS, "filter")
        return self._replace_item(
            filters_name, filter_id, lambda item: replace(item, **updates)
        )

    def delete_filter(self, domain: str, filter_id: str) -> bool:
        _, filters_name = self._taxonomy_names(domain)
        return self._remove_item(filters_name, filter_id)

    def cleanup_orphan_filters(self, domain: str) -> List[str]:
        """
        Delete filters whose category no longer exists.

        Records keep their references to the removed filter ids.

        Returns:
            Ids of the removed filters (empty if none, or if the write failed)
        """
        categories_name, filters_name = self._taxonomy_names(domain)
        category_ids = {c.id for c in self._repo(categories_name).value}
        repo = self._repo(filters_name)

        kept = [f for f in repo.value if f.category_id in category_ids]
        removed = [f.id for f in repo.value if f.category_id not in category_ids]
        if not removed or not repo.save(kept):
            return []

        safe_logger(self.logger).log_operation(
            "orphan_filters_removed", {"domain": domain, "filter_ids": removed}
        )
        return removed

    # --- Saved transcriptions ---
    def add_saved_transcription(
        self, text: str, kind: str = "normal", language: Optional[str] = None
    ) -> Optional[SavedTranscription]:
        if kind not in TRANSCRIPTION_TYPES:
            raise ValidationError(
                f"Transcription type must be 'normal' or 'ia', got '{kind}'"
            )
        transcription = SavedTranscription(
            id=self.new_id(),
            text=text,
            type=kind,
            language=language,
            created_at=self._now(),
        )
        return self._append("savedTranscriptions", transcription)

    def delete_saved_transcription(self, transcription_id: str) -> bool:
        return self._remove_item("savedTranscriptions", transcription_id)

    # --- Settings ---
    def save_settings(self, settings: Union[Settings, Mapping[str, Any]]) -> bool:
        """
        Replace the settings. A successful save re-runs the periodic
        backup check.
        """
        if isinstance(settings, Mapping):
            settings = dict(settings)
        return self._repo("settings").save(settings)

    def update_settings(self, **changes: Any) -> bool:
        """Change individual settings fields (snake_case attribute names)."""
        try:
            updated = replace(self.settings, **changes)
        except TypeError as e:
            raise ValidationError(f"Invalid settings fields: {e}") from e
        return self.save_settings(updated)

    # --- Stats ---
    def track_copy(self, kind: str) -> ProductivityStats:
        return self.stats.track_copy(kind)

    def track_recording(self) -> ProductivityStats:
        return self.stats.track_recording()

    def track_ai_report_generation(self) -> ProductivityStats:
        return self.stats.track_ai_report_generation()

    def track_ai_chat_query(self) -> ProductivityStats:
        return self.stats.track_ai_chat_query()

    def track_interaction_time(self, minutes: float) -> ProductivityStats:
        return self.stats.track_interaction_time(minutes)

    def track_report_share(self) -> ProductivityStats:
        return self.stats.track_report_share()

    def track_phrase_share(self) -> ProductivityStats:
        return self.stats.track_phrase_share()

    def set_satisfaction_rating(self, rating: int) -> ProductivityStats:
        return self.stats.set_satisfaction_rating(rating)

    def save_economic_profitability(self, data: Dict[str, Any]) -> ProductivityStats:
        return self.stats.save_economic_profitability(data)

    def calculate_productivity(self) -> float:
        return self.stats.calculate_productivity()

    # --- External services ---
    def record_transcription(
        self,
        service: TranscriptionService,
        audio: bytes,
        kind: str = "normal",
    ) -> Optional[SavedTranscription]:
        """
        Transcribe audio through ``service``, count the recording and keep
        the text. Service errors propagate to the caller untouched.
        """
        result = service.transcribe(audio)
        self.stats.track_recording()
        return self.add_saved_transcription(result.text, kind=kind, language=result.language)

    def generate_ai_report(self, service: TextGenerationService, prompt: str) -> str:
        """Generate report text through ``service`` and count the generation."""
        text = service.generate(prompt)
        self.stats.track_ai_report_generation()
        return text

    # --- Backups ---
    def create_manual_backup(self) -> Snapshot:
        """
        Write a manual snapshot now and apply the retention bound.

        Raises:
            BackupError: If the snapshot cannot be written
        """
        payload = self.codec.export().to_dict()
        snapshot = self.snapshots.create(payload, is_auto=False)
        try:
            self.snapshots.evict_excess(self.config.max_snapshots)
        except StoreIOError as e:
            safe_logger(self.logger).log_error(e, {"operation": "evict_snapshots"})
        return snapshot

    def list_snapshots(self) -> List[Snapshot]:
        return self.snapshots.list()

    def delete_snapshot(self, key: str) -> bool:
        return self.snapshots.delete(key)

    def restore_snapshot(self, key: str) -> ImportResult:
        """
        Import a stored snapshot over the current data.

        Returns:
            ImportResult of the restore

        Raises:
            BackupError: If the key is not a stored snapshot or is corrupt
        """
        snapshot = self.snapshots.read(key)
        if snapshot is None:
            raise BackupError(f"Snapshot not found: {key}")
        result = self.codec.import_payload(snapshot.payload)
        safe_logger(self.logger).log_operation(
            "snapshot_restored", {"key": key, "success": result.success}
        )
        return result

    # --- Export / import ---
    def export_data(self) -> ExportPayload:
        return self.codec.export()

    def import_data(self, data: Union[str, bytes, Mapping[str, Any]]) -> ImportResult:
        return self.codec.import_payload(data)
