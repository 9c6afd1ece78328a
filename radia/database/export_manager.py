#!/usr/bin/env python3
"""
export_manager.py
-----------------
Export and import of the whole store as one portable payload.

The payload is a JSON object holding a point-in-time copy of every
collection plus an ``exportDate`` and a ``version``:

    {
        "reports": [...],
        "reportCategories": [...],
        "reportFilters": [...],
        "phrases": [...],
        "phraseCategories": [...],
        "phraseFilters": [...],
        "settings": {...},
        "stats": {...},
        "savedTranscriptions": [...],
        "categories": [...],      # alias of reportCategories
        "filters": [...],         # alias of reportFilters
        "exportDate": "2026-10-19T08:30:00.123Z",
        "version": "2.2.0"
    }

The same payload is the content of every snapshot.

Import Order:
    Taxonomies are applied before the records that reference them:
    reportCategories, reportFilters, phraseCategories, phraseFilters,
    reports, phrases, settings, stats, savedTranscriptions.

Import Semantics:
    - A missing collection falls back to its seed default
    - Legacy payloads with flat ``categories``/``filters`` are upgraded
      first; the namespaced keys win when both are present
    - Unparseable or non-object payloads fail before anything is written
    - A collection of the wrong shape, or a failed write, stops the import
      at that point; collections already written stay written
    - Imports never notify listeners, so they trigger no auto snapshot

Usage:
    codec = ExportImportCodec(repositories, app_version="2.2.0")
    payload = codec.export()
    result = codec.import_payload(payload.to_json())
    if not result:
        print(result.error)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

# --- Local imports ---
from radia.core.exceptions import MalformedPayloadError, ValidationError
from radia.core.logging_manager import RadiaLogger, safe_logger
from radia.core.timeutils import Clock, iso_millis, utc_now

from .decorators import log_store_operation
from .repositories import CollectionRepository

IMPORT_ORDER = (
    "reportCategories",
    "reportFilters",
    "phraseCategories",
    "phraseFilters",
    "reports",
    "phrases",
    "settings",
    "stats",
    "savedTranscriptions",
)

LEGACY_ALIASES = {
    "categories": "reportCategories",
    "filters": "reportFilters",
}


@dataclass
class ExportPayload:
    """
    A point-in-time copy of every collection, in wire form.

    Attributes:
        collections: Collection name -> wire value, for every name in
            IMPORT_ORDER
        export_date: ISO-8601 time of the export
        version: App version that produced the payload
    """

    collections: Dict[str, Any]
    export_date: str
    version: str

    def to_dict(self) -> Dict[str, Any]:
        """Wire dict, including the legacy ``categories``/``filters`` aliases."""
        data: Dict[str, Any] = {name: self.collections[name] for name in IMPORT_ORDER}
        for alias, name in LEGACY_ALIASES.items():
            data[alias] = self.collections[name]
        data["exportDate"] = self.export_date
        data["version"] = self.version
        return data

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=indent)


@dataclass
class ImportResult:
    """
    Outcome of an import.

    A failed import may have written some collections (listed in
    ``applied``); callers should ask the user to verify or restore a
    snapshot.
    """

    success: bool
    applied: List[str] = field(default_factory=list)
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.success


def upgrade_legacy_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map the flat legacy taxonomy keys onto the namespaced ones.

    ``categories``/``filters`` are copied to ``reportCategories``/
    ``reportFilters`` only when the namespaced key is absent.

    Args:
        data: Parsed payload

    Returns:
        A new dict in the current payload shape
    """
    upgraded = dict(data)
    for alias, name in LEGACY_ALIASES.items():
        if name not in upgraded and alias in upgraded:
            upgraded[name] = upgraded[alias]
    return upgraded


def parse_payload(data: Union[str, bytes, Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Turn raw import input into a payload dict.

    Raises:
        MalformedPayloadError: If the input is not JSON or not an object
    """
    if isinstance(data, Mapping):
        return dict(data)

    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedPayloadError(f"Payload is not UTF-8 text: {e}") from e

    if not isinstance(data, str):
        raise MalformedPayloadError(
            f"Unsupported payload type: {type(data).__name__}"
        )

    try:
        parsed = json.loads(data)
    except ValueError as e:
        raise MalformedPayloadError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedPayloadError(
            f"Payload must be a JSON object, got {type(parsed).__name__}"
        )
    return parsed


class ExportImportCodec:
    """
    Builds export payloads from the repositories and applies imports back.

    Attributes:
        repositories: Collection name -> repository, covering IMPORT_ORDER
        app_version: Version tag written into exported payloads
    """

    def __init__(
        self,
        repositories: Mapping[str, CollectionRepository],
        app_version: str,
        clock: Optional[Clock] = None,
        logger: Optional[RadiaLogger] = None,
    ) -> None:
        missing = [name for name in IMPORT_ORDER if name not in repositories]
        if missing:
            raise ValueError(f"Missing repositories: {', '.join(missing)}")
        self.repositories = dict(repositories)
        self.app_version = app_version
        self.clock = clock or utc_now
        self.logger = logger

    def export(self) -> ExportPayload:
        """Snapshot every collection's current value into one payload."""
        collections = {
            name: repo.encode(repo.value)
            for name, repo in self.repositories.items()
            if name in IMPORT_ORDER
        }
        return ExportPayload(
            collections=collections,
            export_date=iso_millis(self.clock()),
            version=self.app_version,
        )

    @log_store_operation("import_payload")
    def import_payload(
        self, data: Union[str, bytes, Mapping[str, Any]]
    ) -> ImportResult:
        """
        Apply a payload to the store in dependency order.

        Args:
            data: JSON text, UTF-8 bytes or an already parsed dict

        Returns:
            ImportResult; falsy when the import failed
        """
        try:
            payload = upgrade_legacy_payload(parse_payload(data))
        except MalformedPayloadError as e:
            safe_logger(self.logger).log_error(e, {"operation": "import_payload"})
            return ImportResult(success=False, error=str(e))

        applied: List[str] = []
        for name in IMPORT_ORDER:
            repo = self.repositories[name]
            raw = payload.get(name)

            try:
                value = repo.default() if raw is None else self._coerce(repo, name, raw)
            except MalformedPayloadError as e:
                safe_logger(self.logger).log_error(
                    e, {"operation": "import_payload", "applied": applied}
                )
                return ImportResult(success=False, applied=applied, error=str(e))

            if not repo.save(value, notify=False):
                error = f"Failed to write {name}"
                safe_logger(self.logger).log_warning(
                    error, {"operation": "import_payload", "applied": applied}
                )
                return ImportResult(success=False, applied=applied, error=error)
            applied.append(name)

        safe_logger(self.logger).log_operation(
            "import_applied",
            {"collections": applied, "version": payload.get("version")},
        )
        return ImportResult(success=True, applied=applied)

    @staticmethod
    def _coerce(repo: CollectionRepository, name: str, raw: Any) -> Any:
        try:
            return repo.coerce(raw)
        except ValidationError as e:
            raise MalformedPayloadError(f"Malformed '{name}' in payload: {e}") from e

    # --- Files ---
    @log_store_operation("export_to_file")
    def export_to_file(self, export_file: Union[str, Path]) -> Path:
        """
        Write an export payload to a JSON file.

        The file is staged next to the target and moved into place, so a
        failed export never leaves a truncated file behind.

        Returns:
            Path to the written file
        """
        export_file = Path(export_file)
        export_file.parent.mkdir(parents=True, exist_ok=True)
        text = self.export().to_json()

        fd, temp_name = tempfile.mkstemp(
            prefix=".radia_export_", suffix=".json", dir=export_file.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_name, export_file)
        except OSError:
            Path(temp_name).unlink(missing_ok=True)
            raise
        return export_file

    def import_from_file(self, import_file: Union[str, Path]) -> ImportResult:
        """
        Read a payload file and import it.

        Raises:
            OSError: If the file cannot be read
        """
        data = Path(import_file).read_bytes()
        return self.import_payload(data)
