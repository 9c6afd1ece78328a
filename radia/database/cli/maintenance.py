"""
Maintenance & Statistics Commands
---------------------------------

Commands:
    - stats: Display productivity statistics
    - cleanup-filters: Remove filters whose category was deleted
"""
import json
import click

from radia.core.logging_manager import handle_cli_error
from radia.core.exceptions import RadiaError
from ..manager import DOMAINS
from . import get_store


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the raw stats object")
@click.pass_context
def stats(ctx, as_json):
    """Display productivity statistics."""
    try:
        store = get_store(ctx)
        current = store.productivity

        if as_json:
            click.echo(json.dumps(current.to_dict(), ensure_ascii=False, indent=2))
            return

        click.echo("\n📊 Productivity Statistics")
        click.echo("=" * 50)
        click.echo(f"Copies today: {current.todays_copies}")
        click.echo(f"Copies this week: {current.week_copies}")
        click.echo(f"Copies this month: {current.month_copies}")
        click.echo(f"Total copies: {current.total_copies}")
        click.echo(f"  • Reports: {current.reports_copied}")
        click.echo(f"  • Phrases: {current.phrases_copied}")
        click.echo(
            f"  • AI (hallazgos/conclusiones/diferenciales): "
            f"{current.ai_hallazgos_copied}/{current.ai_conclusions_copied}/"
            f"{current.ai_diferenciales_copied}"
        )
        click.echo(f"Recordings: {current.recordings_count}")
        click.echo(f"AI reports generated: {current.ai_reports_generated}")
        click.echo(f"AI chat queries: {current.ai_chat_queries}")
        click.echo(f"Interaction time: {current.total_interaction_time} min")
        click.echo(f"Days used: {current.total_days_used}")
        click.echo(f"Productivity: {store.calculate_productivity()} copies/hour/day")
        if current.app_satisfaction_rating is not None:
            click.echo(f"Satisfaction: {current.app_satisfaction_rating}/5")

    except RadiaError as e:
        handle_cli_error(ctx, e, "stats")


@click.command("cleanup-filters")
@click.option(
    "--domain",
    type=click.Choice(DOMAINS + ("all",)),
    default="all",
    help="Taxonomy to clean",
)
@click.pass_context
def cleanup_filters(ctx, domain):
    """Remove filters whose category no longer exists."""
    try:
        store = get_store(ctx)
        domains = DOMAINS if domain == "all" else (domain,)

        click.echo("🧹 Cleaning up orphaned filters...")
        total = 0
        for name in domains:
            removed = store.cleanup_orphan_filters(name)
            if removed:
                click.echo(f"  • {name}: {len(removed)} removed ({', '.join(removed)})")
            total += len(removed)

        if total == 0:
            click.echo("  No orphaned filters found")
        else:
            click.echo(f"\n✅ Total removed: {total}")

    except RadiaError as e:
        handle_cli_error(ctx, e, "cleanup-filters", additional_context={"domain": domain})
