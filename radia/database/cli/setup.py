"""
Setup Commands
--------------

Store initialization.

Commands:
    - init: Create the store file and write every collection

Usage:
    radia-store --db-path data/radia_store.db init
"""
import click

from radia.core.logging_manager import handle_cli_error
from radia.core.exceptions import RadiaError
from . import get_store


@click.command()
@click.pass_context
def init(ctx):
    """Create the store and persist every collection (seed data included)."""
    try:
        click.echo(f"🔧 Initializing store at {ctx.obj['db_path']}...")
        store = get_store(ctx)

        failed = [
            name
            for name, repo in store.repositories.items()
            if not repo.save(repo.value, notify=False)
        ]
        if failed:
            raise RadiaError(f"Could not write: {', '.join(failed)}")

        click.echo("✅ Store initialized")
        click.echo(f"  • Report categories: {len(store.report_categories)}")
        click.echo(f"  • Report filters: {len(store.report_filters)}")
        click.echo(f"  • Phrase categories: {len(store.phrase_categories)}")
        click.echo(f"  • Phrase filters: {len(store.phrase_filters)}")

    except RadiaError as e:
        handle_cli_error(ctx, e, "init", additional_context={"db_path": str(ctx.obj["db_path"])})
