"""Command for forgetting a sync record so it is synced again."""

import click

from freee_beancount.cli.resources import open_history
from freee_beancount.domain.entities import SyncType


@click.command("forget")
@click.argument("sync_type", type=click.Choice([t.value for t in SyncType]))
@click.argument("freee_id", type=int)
@click.pass_context
def forget(ctx, sync_type: str, freee_id: int):
    """Delete the sync record of a deal or journal.

    The ledger file is left untouched; remove the posted transaction by hand
    before syncing it again.

    Examples:
        freee-sync forget deal 1024
    """
    settings = ctx.obj["settings"]
    history = open_history(settings, create=False)
    try:
        deleted = history.delete_sync_record(SyncType(sync_type), freee_id)
    finally:
        history.disconnect()

    if not deleted:
        click.echo(f"Error: {sync_type} {freee_id} has not been synced", err=True)
        ctx.exit(1)
    click.echo(f"Forgot {sync_type} {freee_id}")


def register_commands(cli):
    """Register forget command with main CLI."""
    cli.add_command(forget)
