#!/usr/bin/env python3
"""
config.py
-------------------
Engine configuration for the Radia data store.

The store runs with built-in defaults; an optional YAML file can override
them. The file is a flat mapping, for example:

    # config/radia.yaml
    app_version: "2.2.0"
    max_snapshots: 15
    snapshot_on_mutation: true
    background_backups: true
    periodic_check_seconds: 3600

Usage:
    from radia.core.config import load_config
    from radia.core.paths import CONFIG_PATH

    config = load_config(CONFIG_PATH)
    store = DataStore(kv, config=config)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

# --- Third party imports ---
import yaml

# --- Local imports ---
from .exceptions import ConfigError


def _package_version() -> str:
    from radia import __version__

    return __version__


@dataclass(frozen=True)
class StoreConfig:
    """
    Engine-level policy for a DataStore.

    User-facing backup preferences (enabled flag, frequency in days) live in
    the Settings collection; this holds what the host application decides.

    Attributes:
        app_version: Version of the running app, compared against the stored
            one to trigger self-heal
        max_snapshots: Ring-buffer bound shared by auto and manual snapshots
        snapshot_on_mutation: Take an auto snapshot after report/phrase saves
        background_backups: Run on-mutation snapshots on a worker thread
        periodic_check_seconds: Interval for the periodic backup check timer,
            None to disable the timer
    """

    app_version: str = field(default_factory=_package_version)
    max_snapshots: int = 10
    snapshot_on_mutation: bool = True
    background_backups: bool = True
    periodic_check_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        if not isinstance(self.app_version, str) or not self.app_version.strip():
            raise ConfigError("app_version must be a non-empty string")
        if (
            isinstance(self.max_snapshots, bool)
            or not isinstance(self.max_snapshots, int)
            or self.max_snapshots < 1
        ):
            raise ConfigError("max_snapshots must be a positive integer")
        for flag in ("snapshot_on_mutation", "background_backups"):
            if not isinstance(getattr(self, flag), bool):
                raise ConfigError(f"{flag} must be a boolean")
        interval = self.periodic_check_seconds
        if interval is not None and (
            isinstance(interval, bool)
            or not isinstance(interval, (int, float))
            or interval <= 0
        ):
            raise ConfigError("periodic_check_seconds must be a positive number or null")

    def with_overrides(self, **overrides: Any) -> "StoreConfig":
        """Return a copy with the non-None overrides applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def load_config(path: Optional[Path] = None) -> StoreConfig:
    """
    Load the store configuration from a YAML file.

    A missing path (None or nonexistent file) yields the defaults.

    Args:
        path: Path to a YAML mapping of StoreConfig fields

    Returns:
        Validated StoreConfig

    Raises:
        ConfigError: If the file is unreadable, not a mapping, has unknown
            keys or invalid values
    """
    if path is None or not Path(path).exists():
        return StoreConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e

    if data is None:
        return StoreConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} is not a YAML mapping")

    known = {f.name for f in fields(StoreConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    values: Dict[str, Any] = dict(data)
    if "app_version" in values and values["app_version"] is not None:
        values["app_version"] = str(values["app_version"])

    return StoreConfig(**values)
