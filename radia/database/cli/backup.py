"""
Snapshot Commands
-----------------

Create, inspect, restore and prune snapshots kept inside the store.

Commands:
    - backup: Take a manual snapshot
    - backups: List snapshots, newest first
    - restore: Restore a snapshot over the current data
    - delete-backup: Delete one snapshot
    - prune: Keep only the newest N snapshots
    - check-backup: Run the periodic auto-backup check now

Usage:
    radia-store backup
    radia-store backups
    radia-store restore manual_backup_2026-10-19T08:30:00.123456Z --yes
    radia-store prune --keep 5
"""
import click

from radia.core.logging_manager import handle_cli_error
from radia.core.exceptions import BackupError, RadiaError, StoreError
from . import get_store


@click.command()
@click.pass_context
def backup(ctx):
    """Take a manual snapshot."""
    try:
        click.echo("💾 Creating manual snapshot...")
        store = get_store(ctx)
        snapshot = store.create_manual_backup()
        click.echo(f"✅ Snapshot created: {snapshot.key}")
        click.echo(f"  Size: {snapshot.size_bytes:,} bytes")

    except RadiaError as e:
        handle_cli_error(ctx, e, "backup")


@click.command()
@click.pass_context
def backups(ctx):
    """List all snapshots, newest first."""
    try:
        store = get_store(ctx)
        snapshots = store.list_snapshots()

        click.echo("\n📦 Available Snapshots")
        click.echo("=" * 70)

        if not snapshots:
            click.echo("\n  No snapshots found")
            return

        for snapshot in snapshots:
            payload = snapshot.payload
            click.echo(f"  • {snapshot.key}")
            click.echo(f"    Type: {snapshot.kind}")
            click.echo(f"    Created: {snapshot.timestamp.isoformat()}")
            click.echo(f"    Size: {snapshot.size_bytes:,} bytes")
            click.echo(
                f"    Reports: {len(payload.get('reports') or [])}, "
                f"Phrases: {len(payload.get('phrases') or [])}, "
                f"Version: {payload.get('version', '?')}"
            )

        auto = sum(1 for s in snapshots if s.is_auto)
        click.echo(
            f"\nTotal snapshots: {len(snapshots)} "
            f"({auto} auto, {len(snapshots) - auto} manual; "
            f"limit {store.config.max_snapshots})"
        )

    except RadiaError as e:
        handle_cli_error(ctx, e, "backups")


@click.command()
@click.argument("key")
@click.confirmation_option(
    prompt="⚠️  This will overwrite the current data! Continue?"
)
@click.pass_context
def restore(ctx, key):
    """Restore a snapshot by key."""
    try:
        click.echo(f"♻️  Restoring snapshot: {key}")
        store = get_store(ctx)
        result = store.restore_snapshot(key)
        if not result:
            raise StoreError(f"Restore incomplete: {result.error}")
        click.echo("✅ Snapshot restored successfully!")

    except RadiaError as e:
        handle_cli_error(ctx, e, "restore", additional_context={"key": key})


@click.command("delete-backup")
@click.argument("key")
@click.pass_context
def delete_backup(ctx, key):
    """Delete one snapshot by key."""
    try:
        store = get_store(ctx)
        if not store.delete_snapshot(key):
            raise BackupError(f"Snapshot not found: {key}")
        click.echo(f"🗑️  Deleted snapshot: {key}")

    except RadiaError as e:
        handle_cli_error(ctx, e, "delete-backup", additional_context={"key": key})


@click.command()
@click.option(
    "--keep",
    type=click.IntRange(min=0),
    default=None,
    help="Snapshots to keep (default: configured max_snapshots)",
)
@click.pass_context
def prune(ctx, keep):
    """Delete the oldest snapshots beyond the limit."""
    try:
        store = get_store(ctx)
        limit = store.config.max_snapshots if keep is None else keep
        removed = store.snapshots.evict_excess(limit)

        if not removed:
            click.echo(f"✅ Nothing to prune (limit {limit})")
            return
        click.echo(f"🧹 Removed {len(removed)} snapshot(s):")
        for key in removed:
            click.echo(f"  • {key}")

    except RadiaError as e:
        handle_cli_error(ctx, e, "prune")


@click.command("check-backup")
@click.pass_context
def check_backup(ctx):
    """Run the periodic auto-backup check now."""
    try:
        store = get_store(ctx)
        # Opening the store already ran the check
        snapshot = store.load_snapshot or store.scheduler.run_periodic_check()
        settings = store.settings

        if snapshot is not None:
            click.echo(f"✅ Auto snapshot created: {snapshot.key}")
        elif not settings.auto_backup_enabled:
            click.echo("⏸️  Auto backup is disabled")
        else:
            click.echo(
                f"✅ No backup due (last: {settings.last_auto_backup_date}, "
                f"every {settings.auto_backup_frequency_days} day(s))"
            )

    except RadiaError as e:
        handle_cli_error(ctx, e, "check-backup")
