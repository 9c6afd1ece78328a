"""
Export & Import Commands
------------------------

Move the whole store in and out as one JSON payload.

Commands:
    - export: Write the current data to a payload file
    - import: Apply a payload file (older flat-taxonomy payloads accepted)

Usage:
    radia-store export exports/radia_backup.json
    radia-store import exports/radia_backup.json --yes
"""
import click
from datetime import datetime
from pathlib import Path

from radia.core.logging_manager import handle_cli_error
from radia.core.exceptions import RadiaError, StoreError
from radia.core.paths import EXPORT_DIR
from . import get_store


@click.command()
@click.argument("output", type=click.Path(), required=False)
@click.pass_context
def export(ctx, output):
    """Export all collections to a JSON payload file."""
    if output is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output = EXPORT_DIR / f"radia_export_{stamp}.json"

    try:
        click.echo("📤 Exporting store...")
        store = get_store(ctx)
        path = store.codec.export_to_file(Path(output))
        click.echo(f"✅ Exported to: {path}")
        click.echo(f"  • Reports: {len(store.reports)}")
        click.echo(f"  • Phrases: {len(store.phrases)}")
        click.echo(f"  • Saved transcriptions: {len(store.saved_transcriptions)}")

    except (RadiaError, OSError) as e:
        handle_cli_error(ctx, e, "export", additional_context={"output": str(output)})


@click.command("import")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.confirmation_option(
    prompt="⚠️  This will overwrite the current data! Continue?"
)
@click.pass_context
def import_data(ctx, input_file):
    """Import a JSON payload file over the current data."""
    try:
        click.echo(f"📥 Importing from: {input_file}")
        store = get_store(ctx)
        result = store.codec.import_from_file(Path(input_file))

        if not result:
            applied = ", ".join(result.applied) or "none"
            raise StoreError(
                f"{result.error} (collections already written: {applied})"
            )
        click.echo(f"✅ Imported {len(result.applied)} collections")

    except (RadiaError, OSError) as e:
        handle_cli_error(ctx, e, "import", additional_context={"input": input_file})
