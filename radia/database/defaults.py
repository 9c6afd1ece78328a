#!/usr/bin/env python3
"""
defaults.py
--------------------
Storage keys and built-in seed data.

Seed values are what a collection holds before the user ever saved it.
Every factory returns fresh objects so callers may mutate the result.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import List

# --- Local imports ---
from .entities import Category, Filter, ProductivityStats, Settings

# --- Current keys ---
REPORTS_KEY = "pref_reports"
REPORT_CATEGORIES_KEY = "pref_report_categories"
REPORT_FILTERS_KEY = "pref_report_filters"
PHRASES_KEY = "pref_phrases"
PHRASE_CATEGORIES_KEY = "pref_phrase_categories"
PHRASE_FILTERS_KEY = "pref_phrase_filters"
SETTINGS_KEY = "pref_settings"
STATS_KEY = "pref_stats"
SAVED_TRANSCRIPTIONS_KEY = "pref_saved_transcriptions"
APP_VERSION_KEY = "pref_app_version"

# --- Legacy keys (report taxonomy before phrases had their own) ---
LEGACY_CATEGORIES_KEY = "pref_categories"
LEGACY_FILTERS_KEY = "pref_filters"

# Seeds carry a fixed creation time so repeated seeding is deterministic
SEED_CREATED_AT = "2024-01-01T00:00:00.000Z"

_REPORT_CATEGORIES = (
    ("report_cat_1", "TECNICAS", "#2196F3", "Settings"),
    ("report_cat_2", "ORGANO / SISTEMA", "#4CAF50", "Heart"),
)

_REPORT_FILTERS = (
    ("report_filter_1", "TC", "report_cat_1"),
    ("report_filter_2", "RM", "report_cat_1"),
    ("report_filter_3", "ECO", "report_cat_1"),
    ("report_filter_4", "RX", "report_cat_1"),
    ("report_filter_5", "MAMO", "report_cat_1"),
    ("report_filter_6", "NEURO", "report_cat_2"),
    ("report_filter_7", "MSK", "report_cat_2"),
    ("report_filter_8", "MAMA", "report_cat_2"),
    ("report_filter_9", "TORAX", "report_cat_2"),
    ("report_filter_10", "ABDOMEN", "report_cat_2"),
    ("report_filter_11", "VASCULAR", "report_cat_2"),
)

_PHRASE_CATEGORIES = (
    ("phrase_cat_1", "Técnica", "#9C27B0", "Settings"),
    ("phrase_cat_2", "Descripción", "#FF5722", "FileText"),
    ("phrase_cat_3", "Conclusión", "#607D8B", "CheckCircle"),
)

_PHRASE_FILTERS = (
    ("phrase_filter_1", "Contraste", "phrase_cat_1"),
    ("phrase_filter_2", "Sin contraste", "phrase_cat_1"),
    ("phrase_filter_3", "Normal", "phrase_cat_2"),
    ("phrase_filter_4", "Patológico", "phrase_cat_2"),
    ("phrase_filter_5", "Recomendación", "phrase_cat_3"),
    ("phrase_filter_6", "Seguimiento", "phrase_cat_3"),
)


def _categories(rows) -> List[Category]:
    return [
        Category(
            id=cat_id,
            name=name,
            is_visible=True,
            color=color,
            icon=icon,
            created_at=SEED_CREATED_AT,
        )
        for cat_id, name, color, icon in rows
    ]


def _filters(rows) -> List[Filter]:
    return [
        Filter(
            id=filter_id,
            name=name,
            category_id=category_id,
            is_active=True,
            created_at=SEED_CREATED_AT,
        )
        for filter_id, name, category_id in rows
    ]


def default_report_categories() -> List[Category]:
    return _categories(_REPORT_CATEGORIES)


def default_report_filters() -> List[Filter]:
    return _filters(_REPORT_FILTERS)


def default_phrase_categories() -> List[Category]:
    return _categories(_PHRASE_CATEGORIES)


def default_phrase_filters() -> List[Filter]:
    return _filters(_PHRASE_FILTERS)


def default_settings() -> Settings:
    return Settings()


def default_stats() -> ProductivityStats:
    return ProductivityStats()
