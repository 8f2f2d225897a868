"""Sync commands."""

from datetime import date

import click

from freee_beancount.cli.error_handling import handle_domain_error
from freee_beancount.cli.resources import build_client, build_converter, build_ledger, open_history
from freee_beancount.config import SYNC_REQUIRED
from freee_beancount.domain.errors import DomainError
from freee_beancount.domain.sync import SyncResult, SyncService
from freee_beancount.logging_context import LoggingContext
from freee_beancount.utils.date_parser import get_date_range, parse_date


def run_sync(ctx, start: date, end: date, dry_run: bool) -> None:
    """Validate settings, build collaborators and run one sync."""
    settings = ctx.obj["settings"]
    client_factory = ctx.obj.get("client_factory", build_client)

    try:
        settings.require(*SYNC_REQUIRED)
        converter = build_converter(settings)
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    if start > end:
        click.echo(f"Error: --from {start} is after --to {end}", err=True)
        ctx.exit(1)

    with LoggingContext(ctx.obj["log_level"]) as log:
        client = client_factory(settings)
        history = open_history(settings, create=not dry_run)
        try:
            service = SyncService(
                client=client,
                converter=converter,
                history=history,
                ledger=build_ledger(settings),
                log=log,
            )
            result = service.sync(start, end, dry_run=dry_run)
        except DomainError as e:
            handle_domain_error(ctx, e)
            return
        finally:
            history.disconnect()
            client.close()

    _print_result(result)


def _print_result(result: SyncResult) -> None:
    if result.dry_run:
        click.echo(
            f"Dry run: {result.deals_fetched - result.deals_skipped} deals and "
            f"{result.journals_fetched - result.journals_skipped} journals would be synced"
        )
        return

    click.echo(f"Deals: {result.deals_synced} synced, {result.deals_skipped} already synced")
    click.echo(
        f"Journals: {result.journals_synced} synced, {result.journals_skipped} already synced"
    )
    click.echo(f"Files written: {len(result.files_written)}")
    for path in result.files_written:
        click.echo(f"  {path}")
    if result.failures:
        click.echo(f"Skipped after errors: {len(result.failures)}")
    if result.stats is not None:
        last_sync = result.stats.last_sync.isoformat() if result.stats.last_sync else "never"
        click.echo(
            f"Total synced: {result.stats.total_deals} deals, "
            f"{result.stats.total_journals} journals (last sync: {last_sync})"
        )


@click.command("sync")
@click.option("--from", "date_from", required=True, help="First issue date to sync (YYYY-MM-DD)")
@click.option("--to", "date_to", required=True, help="Last issue date to sync (YYYY-MM-DD)")
@click.option("--dry-run", is_flag=True, help="Print transactions instead of writing them")
@click.pass_context
def sync(ctx, date_from: str, date_to: str, dry_run: bool):
    """Sync deals and journals issued in an inclusive date range.

    Examples:
        freee-sync sync --from 2024-03-01 --to 2024-03-31
        freee-sync sync --from "last month" --to today --dry-run
    """
    try:
        start = parse_date(date_from)
        end = parse_date(date_to)
    except ValueError as e:
        click.echo(f"Error: Invalid date: {e}", err=True)
        ctx.exit(1)
        return

    run_sync(ctx, start, end, dry_run)


@click.command("sync-monthly")
@click.option("--dry-run", is_flag=True, help="Print transactions instead of writing them")
@click.pass_context
def sync_monthly(ctx, dry_run: bool):
    """Sync the previous calendar month."""
    start, end = get_date_range("last-month")
    run_sync(ctx, start, end, dry_run)


def register_commands(cli):
    """Register sync commands with main CLI."""
    cli.add_command(sync)
    cli.add_command(sync_monthly)
