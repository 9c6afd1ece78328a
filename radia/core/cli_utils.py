#!/usr/bin/env python3
"""
cli_utils.py
-------------------
Shared CLI utilities for Radia commands.

Functions:
    setup_logger: Initialize RadiaLogger for CLI operations

Usage:
    from radia.core.cli_utils import setup_logger

    logger = setup_logger(log_dir, "store")
"""
from pathlib import Path

from radia.core.logging_manager import RadiaLogger


def setup_logger(log_dir: Path, component_name: str) -> RadiaLogger:
    """
    Setup logging for CLI operations.

    Creates the operations log directory if it doesn't exist and initializes
    a RadiaLogger instance for the specified component.

    Args:
        log_dir: Base log directory (typically from paths.LOG_DIR)
        component_name: Component identifier for logging (e.g., 'store')

    Returns:
        Configured RadiaLogger instance
    """
    operations_log_dir = Path(log_dir) / "operations"
    operations_log_dir.mkdir(parents=True, exist_ok=True)
    return RadiaLogger(operations_log_dir, component_name=component_name)
