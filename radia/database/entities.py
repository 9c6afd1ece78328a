#!/usr/bin/env python3
"""
entities.py
--------------------
Typed records persisted by the Radia store.

Every entity maps to and from the camelCase wire format used in the
key-value blobs and in export payloads. Wire fields an entity does not
know about are kept in ``extra`` and written back unchanged, so data
written by a newer app version survives a load/save cycle.

Classes:
    - Report: A saved report template
    - Phrase: A reusable phrase, with usage tracking
    - Category: Taxonomy category (report and phrase domains share it)
    - Filter: Taxonomy filter under a category
    - Settings: User preferences singleton
    - ProductivityStats: Counters, daily ledgers and derived copy windows
    - SavedTranscription: A transcription kept by the user
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# --- Local imports ---
from radia.core.exceptions import ValidationError
from radia.core.validators import DataValidator

TRANSCRIPTION_TYPES = ("normal", "ia")


def _extra(data: Dict[str, Any], known: tuple) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k not in known}


def _require_record(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ValidationError(
            f"{what} must be an object, got {type(data).__name__}"
        )
    if data.get("id") is None or str(data["id"]) == "":
        raise ValidationError(f"{what} is missing its id")
    return data


@dataclass
class Report:
    """
    A saved report template.

    Attributes:
        id: Opaque unique id (epoch milliseconds as a string)
        title: Report title
        content: Free-form report body
        category_id: Optional category reference
        filters: Filter ids; dangling ids are kept as-is
        is_favorite: Pinned by the user
        created_at: ISO-8601 creation time
        updated_at: ISO-8601 last edit time
        extra: Unknown wire fields, preserved
    """

    id: str
    title: str = ""
    content: str = ""
    category_id: Optional[str] = None
    filters: List[str] = field(default_factory=list)
    is_favorite: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = (
        "id",
        "title",
        "content",
        "categoryId",
        "filters",
        "isFavorite",
        "createdAt",
        "updatedAt",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Report":
        data = _require_record(data, "Report")
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            category_id=DataValidator.normalize_string(data.get("categoryId")),
            filters=DataValidator.normalize_string_list(data.get("filters")),
            is_favorite=DataValidator.normalize_bool(data.get("isFavorite")),
            created_at=DataValidator.normalize_string(data.get("createdAt")),
            updated_at=DataValidator.normalize_string(data.get("updatedAt")),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "id": self.id,
                "title": self.title,
                "content": self.content,
                "filters": list(self.filters),
                "isFavorite": self.is_favorite,
                "createdAt": self.created_at,
                "updatedAt": self.updated_at,
            }
        )
        if self.category_id is not None:
            result["categoryId"] = self.category_id
        return result


@dataclass
class Phrase:
    """A reusable phrase. ``usage_count`` grows each time it is inserted."""

    id: str
    text: str = ""
    category_id: Optional[str] = None
    filters: List[str] = field(default_factory=list)
    is_frequent: bool = False
    is_favorite: bool = False
    usage_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = (
        "id",
        "text",
        "categoryId",
        "filters",
        "isFrequent",
        "isFavorite",
        "usageCount",
        "createdAt",
        "updatedAt",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Phrase":
        data = _require_record(data, "Phrase")
        return cls(
            id=str(data["id"]),
            text=str(data.get("text") or ""),
            category_id=DataValidator.normalize_string(data.get("categoryId")),
            filters=DataValidator.normalize_string_list(data.get("filters")),
            is_frequent=DataValidator.normalize_bool(data.get("isFrequent")),
            is_favorite=DataValidator.normalize_bool(data.get("isFavorite")),
            usage_count=DataValidator.normalize_int(data.get("usageCount")),
            created_at=DataValidator.normalize_string(data.get("createdAt")),
            updated_at=DataValidator.normalize_string(data.get("updatedAt")),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "id": self.id,
                "text": self.text,
                "filters": list(self.filters),
                "isFrequent": self.is_frequent,
                "isFavorite": self.is_favorite,
                "usageCount": self.usage_count,
                "createdAt": self.created_at,
            }
        )
        if self.category_id is not None:
            result["categoryId"] = self.category_id
        if self.updated_at is not None:
            result["updatedAt"] = self.updated_at
        return result


@dataclass
class Category:
    """
    Taxonomy category.

    Attributes:
        id: Unique id within its domain
        name: Display name
        is_visible: Shown in the filter bar
        color: Hex color string (e.g. '#2196F3')
        icon: Icon name understood by the UI
        created_at: ISO-8601 creation time
        extra: Unknown wire fields, preserved
    """

    id: str
    name: str = ""
    is_visible: bool = True
    color: str = "#607D8B"
    icon: str = "Folder"
    created_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = ("id", "name", "isVisible", "color", "icon", "createdAt")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        data = _require_record(data, "Category")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            is_visible=DataValidator.normalize_bool(data.get("isVisible"), True),
            color=str(data.get("color") or cls.color),
            icon=str(data.get("icon") or cls.icon),
            created_at=DataValidator.normalize_string(data.get("createdAt")),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "id": self.id,
                "name": self.name,
                "isVisible": self.is_visible,
                "color": self.color,
                "icon": self.icon,
                "createdAt": self.created_at,
            }
        )
        return result


@dataclass
class Filter:
    """Taxonomy filter. ``category_id`` may dangle after a category delete."""

    id: str
    name: str = ""
    category_id: str = ""
    is_active: bool = True
    created_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = ("id", "name", "categoryId", "isActive", "createdAt")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Filter":
        data = _require_record(data, "Filter")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            category_id=str(data.get("categoryId") or ""),
            is_active=DataValidator.normalize_bool(data.get("isActive"), True),
            created_at=DataValidator.normalize_string(data.get("createdAt")),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "id": self.id,
                "name": self.name,
                "categoryId": self.category_id,
                "isActive": self.is_active,
                "createdAt": self.created_at,
            }
        )
        return result


@dataclass
class Settings:
    """
    User preferences singleton, replaced wholesale on every save.

    Attributes:
        theme: 'light' or 'dark'
        default_category: Category preselected when creating records
        show_favorites_first: Sort favorites to the top of lists
        auto_backup_enabled: Allow automatic snapshots
        auto_backup_frequency_days: Minimum days between periodic snapshots
        last_auto_backup_date: ISO-8601 time of the last periodic snapshot
        extra: Unknown wire fields, preserved
    """

    theme: str = "light"
    default_category: Optional[str] = None
    show_favorites_first: bool = True
    auto_backup_enabled: bool = True
    auto_backup_frequency_days: int = 1
    last_auto_backup_date: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = (
        "theme",
        "defaultCategory",
        "showFavoritesFirst",
        "autoBackupEnabled",
        "autoBackupFrequencyDays",
        "lastAutoBackupDate",
        "autoBackup",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        data = DataValidator.ensure_mapping(data, "settings")
        enabled = data.get("autoBackupEnabled")
        if enabled is None:
            # Older releases stored the flag as 'autoBackup'
            enabled = data.get("autoBackup")
        frequency = DataValidator.normalize_int(data.get("autoBackupFrequencyDays"), 1)
        return cls(
            theme=str(data.get("theme") or "light"),
            default_category=DataValidator.normalize_string(data.get("defaultCategory")),
            show_favorites_first=DataValidator.normalize_bool(
                data.get("showFavoritesFirst"), True
            ),
            auto_backup_enabled=DataValidator.normalize_bool(enabled, True),
            auto_backup_frequency_days=max(frequency, 1),
            last_auto_backup_date=DataValidator.normalize_string(
                data.get("lastAutoBackupDate")
            ),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "theme": self.theme,
                "showFavoritesFirst": self.show_favorites_first,
                "autoBackupEnabled": self.auto_backup_enabled,
                "autoBackupFrequencyDays": self.auto_backup_frequency_days,
                "lastAutoBackupDate": self.last_auto_backup_date,
            }
        )
        if self.default_category is not None:
            result["defaultCategory"] = self.default_category
        return result


# Lifetime counters: wire name -> attribute name
STATS_COUNTERS = {
    "reportsCopied": "reports_copied",
    "phrasesCopied": "phrases_copied",
    "aiHallazgosCopied": "ai_hallazgos_copied",
    "aiConclusionsCopied": "ai_conclusions_copied",
    "aiDiferencialesCopied": "ai_diferenciales_copied",
    "recordingsCount": "recordings_count",
    "aiReportsGenerated": "ai_reports_generated",
    "aiChatQueries": "ai_chat_queries",
    "reportsShared": "reports_shared",
    "phrasesShared": "phrases_shared",
    "totalDaysUsed": "total_days_used",
}


@dataclass
class ProductivityStats:
    """
    Productivity statistics singleton.

    Lifetime counters only grow. ``daily_stats`` maps 'YYYY-MM-DD' to the
    number of copies made that day; ``todays_copies``, ``week_copies`` and
    ``month_copies`` are derived from it and recomputed on every load and
    every tracked action, never trusted from storage.
    """

    reports_copied: int = 0
    phrases_copied: int = 0
    ai_hallazgos_copied: int = 0
    ai_conclusions_copied: int = 0
    ai_diferenciales_copied: int = 0
    recordings_count: int = 0
    ai_reports_generated: int = 0
    ai_chat_queries: int = 0
    reports_shared: int = 0
    phrases_shared: int = 0
    total_days_used: int = 0
    total_interaction_time: float = 0

    # Ledgers
    daily_stats: Dict[str, float] = field(default_factory=dict)
    daily_interaction_time: Dict[str, float] = field(default_factory=dict)
    monthly_profitability: Dict[str, float] = field(default_factory=dict)

    # Dates
    last_copy_date: Optional[str] = None
    first_use_date: Optional[str] = None
    last_active_date: Optional[str] = None
    satisfaction_date: Optional[str] = None

    app_satisfaction_rating: Optional[int] = None
    economic_profitability: Optional[Dict[str, Any]] = None

    # Derived
    todays_copies: int = 0
    week_copies: int = 0
    month_copies: int = 0

    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = tuple(STATS_COUNTERS) + (
        "totalInteractionTime",
        "dailyStats",
        "dailyInteractionTime",
        "monthlyProfitability",
        "lastCopyDate",
        "firstUseDate",
        "lastActiveDate",
        "satisfactionDate",
        "appSatisfactionRating",
        "economicProfitability",
        "todaysCopies",
        "weekCopies",
        "monthCopies",
    )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductivityStats":
        data = DataValidator.ensure_mapping(data, "stats")
        counters = {
            attr: max(DataValidator.normalize_int(data.get(wire)), 0)
            for wire, attr in STATS_COUNTERS.items()
        }
        rating = data.get("appSatisfactionRating")
        economic = data.get("economicProfitability")
        return cls(
            **counters,
            total_interaction_time=DataValidator.normalize_number(
                data.get("totalInteractionTime")
            ),
            daily_stats=DataValidator.normalize_counter_map(data.get("dailyStats")),
            daily_interaction_time=DataValidator.normalize_counter_map(
                data.get("dailyInteractionTime")
            ),
            monthly_profitability=DataValidator.normalize_counter_map(
                data.get("monthlyProfitability")
            ),
            last_copy_date=DataValidator.normalize_string(data.get("lastCopyDate")),
            first_use_date=DataValidator.normalize_string(data.get("firstUseDate")),
            last_active_date=DataValidator.normalize_string(data.get("lastActiveDate")),
            satisfaction_date=DataValidator.normalize_string(
                data.get("satisfactionDate")
            ),
            app_satisfaction_rating=(
                DataValidator.normalize_int(rating) if rating is not None else None
            ),
            economic_profitability=dict(economic) if isinstance(economic, dict) else None,
            todays_copies=max(DataValidator.normalize_int(data.get("todaysCopies")), 0),
            week_copies=max(DataValidator.normalize_int(data.get("weekCopies")), 0),
            month_copies=max(DataValidator.normalize_int(data.get("monthCopies")), 0),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        for wire, attr in STATS_COUNTERS.items():
            result[wire] = getattr(self, attr)
        result.update(
            {
                "totalInteractionTime": self.total_interaction_time,
                "dailyStats": dict(self.daily_stats),
                "dailyInteractionTime": dict(self.daily_interaction_time),
                "monthlyProfitability": dict(self.monthly_profitability),
                "lastCopyDate": self.last_copy_date,
                "firstUseDate": self.first_use_date,
                "lastActiveDate": self.last_active_date,
                "satisfactionDate": self.satisfaction_date,
                "appSatisfactionRating": self.app_satisfaction_rating,
                "economicProfitability": (
                    dict(self.economic_profitability)
                    if self.economic_profitability is not None
                    else None
                ),
                "todaysCopies": self.todays_copies,
                "weekCopies": self.week_copies,
                "monthCopies": self.month_copies,
            }
        )
        return result

    @property
    def total_copies(self) -> int:
        """All copies ever made, across every copy kind."""
        return (
            self.reports_copied
            + self.phrases_copied
            + self.ai_hallazgos_copied
            + self.ai_conclusions_copied
            + self.ai_diferenciales_copied
        )


@dataclass
class SavedTranscription:
    """A transcription kept by the user; ``type`` is 'normal' or 'ia'."""

    id: str
    text: str = ""
    type: str = "normal"
    language: Optional[str] = None
    created_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    _WIRE = ("id", "text", "type", "language", "createdAt")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SavedTranscription":
        data = _require_record(data, "SavedTranscription")
        kind = data.get("type")
        return cls(
            id=str(data["id"]),
            text=str(data.get("text") or ""),
            type=kind if kind in TRANSCRIPTION_TYPES else "normal",
            language=DataValidator.normalize_string(data.get("language")),
            created_at=DataValidator.normalize_string(data.get("createdAt")),
            extra=_extra(data, cls._WIRE),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.extra)
        result.update(
            {
                "id": self.id,
                "text": self.text,
                "type": self.type,
                "createdAt": self.created_at,
            }
        )
        if self.language is not None:
            result["language"] = self.language
        return result
