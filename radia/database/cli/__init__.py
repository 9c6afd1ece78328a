#!/usr/bin/env python3
"""
Radia Store Management CLI
--------------------------

Command-line interface for a SQLite-backed Radia store.

This module provides the main CLI group and shared context setup
for all store commands.

Command Structure:
    - Setup (init)
    - Export & Import (export, import)
    - Snapshots (backup, backups, restore, delete-backup, prune, check-backup)
    - Maintenance (stats, cleanup-filters)

Usage:
    # Get general help
    radia-store --help

    # Take a manual snapshot of a specific store file
    radia-store --db-path data/radia_store.db backup
"""
import click
from dataclasses import replace
from pathlib import Path

from radia.core.cli_utils import setup_logger
from radia.core.config import load_config
from radia.core.paths import CONFIG_PATH, DB_PATH, LOG_DIR
from radia.database import DataStore, SqliteKeyValueStore


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to the store file",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(),
    default=str(CONFIG_PATH),
    help="Path to YAML configuration",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, log_dir, config_path, verbose):
    """Radia Store Management CLI"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["config_path"] = Path(config_path)
    ctx.obj["verbose"] = verbose
    ctx.obj["logger"] = setup_logger(Path(log_dir), "store")
    ctx.call_on_close(ctx.obj["logger"].close)


def get_store(ctx) -> DataStore:
    """
    Get or open the store for this invocation.

    Snapshots are written synchronously and no timer thread is started,
    so every command finishes its work before the process exits.
    """
    root = ctx.find_root()
    if "store" not in root.obj:
        logger = root.obj["logger"]
        config = replace(
            load_config(root.obj["config_path"]),
            background_backups=False,
            periodic_check_seconds=None,
        )
        store = DataStore(
            SqliteKeyValueStore(root.obj["db_path"], logger=logger),
            config=config,
            logger=logger,
        )
        store.load_data()
        root.obj["store"] = store
        root.call_on_close(store.close)
    return root.obj["store"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init  # noqa: E402
from .export import export, import_data  # noqa: E402
from .backup import (  # noqa: E402
    backup,
    backups,
    restore,
    delete_backup,
    prune,
    check_backup,
)
from .maintenance import stats, cleanup_filters  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(export)
cli.add_command(import_data)
cli.add_command(backup)
cli.add_command(backups)
cli.add_command(restore)
cli.add_command(delete_backup)
cli.add_command(prune)
cli.add_command(check_backup)
cli.add_command(stats)
cli.add_command(cleanup_filters)


if __name__ == "__main__":
    cli(obj={})
