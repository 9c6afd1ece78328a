#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants and configuration for the Radia data store.

This module defines the default locations used by the store and its CLI
as Path objects, relative to the project root directory.

The project structure:
    ROOT/
    ├── radia/         # Store package
    ├── data/          # Local store (SQLite key-value file)
    ├── logs/          # Application logs
    ├── exports/       # Exported payloads
    └── config/        # Optional YAML configuration

Every path can be overridden from the CLI (--db-path, --log-dir, --config).
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine project root directory.

    Assumes this file is at ROOT/radia/core/paths.py and navigates up
    the directory tree to find ROOT.

    Returns:
        Path object for project root

    Raises:
        RuntimeError: If project root cannot be determined or validated
    """
    current_file = Path(__file__).resolve()

    # Navigate up: paths.py -> core/ -> radia/ -> ROOT/
    root = current_file.parent.parent.parent

    if not (root / "radia").is_dir():
        raise RuntimeError(
            f"Cannot determine valid project root. "
            f"Expected {root / 'radia'} to exist. "
            f"Current file: {current_file}"
        )

    return root


# ----- Project directory -----
ROOT: Path = _get_project_root()

# ---- Store ----
DATA_DIR = ROOT / "data"
DB_PATH = DATA_DIR / "radia_store.db"

# ---- Logs & Exports ----
LOG_DIR = ROOT / "logs"
EXPORT_DIR = ROOT / "exports"

# ---- Configuration ----
CONFIG_DIR = ROOT / "config"
CONFIG_PATH = CONFIG_DIR / "radia.yaml"
