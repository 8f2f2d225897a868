"""Sync history statistics command."""

import click

from freee_beancount.cli.error_handling import handle_domain_error
from freee_beancount.cli.resources import open_history
from freee_beancount.config import STATS_REQUIRED
from freee_beancount.domain.errors import DomainError


@click.command("stats")
@click.pass_context
def stats(ctx):
    """Show how many transactions have been synced."""
    settings = ctx.obj["settings"]
    try:
        settings.require(*STATS_REQUIRED)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    history = open_history(settings, create=False)
    try:
        totals = history.get_stats()
        schema_version = history.get_metadata("schema_version")
    finally:
        history.disconnect()

    last_sync = totals.last_sync.strftime("%Y-%m-%d %H:%M:%S") if totals.last_sync else "never"
    click.echo("\nSync statistics:")
    click.echo("-" * 40)
    click.echo(f"Deals synced:       {totals.total_deals}")
    click.echo(f"Journals synced:    {totals.total_journals}")
    click.echo(f"Documents attached: {totals.total_documents}")
    click.echo(f"Last sync:          {last_sync}")
    click.echo(f"Schema version:     {schema_version or 'n/a'}")


def register_commands(cli):
    """Register stats command with main CLI."""
    cli.add_command(stats)
