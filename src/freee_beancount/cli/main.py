"""Main CLI entry point."""

import click

from freee_beancount.config import SyncSettings
from freee_beancount.logging_context import LOG_LEVEL_MAP, LogLevel

# Import and register all commands at module level
from freee_beancount.cli.commands import auth, forget, stats, sync


@click.group()
@click.option(
    "--root",
    type=click.Path(file_okay=False),
    help="Beancount ledger root (overrides BEANCOUNT_ROOT environment variable)",
)
@click.option(
    "--db-path",
    type=click.Path(dir_okay=False),
    help="Path to sync history database (overrides BEANCOUNT_DB_PATH environment variable)",
)
@click.option(
    "--mapping",
    type=click.Path(dir_okay=False),
    help="Path to account mapping YAML (overrides ACCOUNT_MAPPING_PATH environment variable)",
)
@click.option(
    "-l",
    "--log-level",
    type=click.Choice([level.value for level in LOG_LEVEL_MAP], case_sensitive=False),
    default=LogLevel.INFO.value,
    envvar="LOG_LEVEL",
    help="Log verbosity",
)
@click.pass_context
def cli(ctx, root: str | None, db_path: str | None, mapping: str | None, log_level: str):
    """freee-sync - Sync freee deals and journals into Beancount files.

    Transactions are appended to <root>/YYYY/YYYY-MM.beancount and recorded in a
    sync history database so that repeated runs never post them twice.
    """
    ctx.ensure_object(dict)

    overrides = {}
    if root is not None:
        overrides["beancount_root"] = root
    if db_path is not None:
        overrides["db_path"] = db_path
    if mapping is not None:
        overrides["mapping_path"] = mapping

    settings = ctx.obj.get("settings") or SyncSettings()
    if overrides:
        settings = settings.model_copy(update=overrides)
    ctx.obj["settings"] = settings
    ctx.obj["log_level"] = LogLevel(log_level.lower())


# Register all commands
sync.register_commands(cli)
stats.register_commands(cli)
auth.register_commands(cli)
forget.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
