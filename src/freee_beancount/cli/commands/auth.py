"""OAuth client-credentials token command."""

import click

from freee_beancount.cli.error_handling import handle_domain_error
from freee_beancount.cli.resources import build_client
from freee_beancount.config import AUTH_REQUIRED
from freee_beancount.domain.errors import DomainError


@click.command("auth")
@click.pass_context
def auth(ctx):
    """Exchange FREEE_CLIENT_ID/FREEE_CLIENT_SECRET for an access token.

    The token is printed so it can be exported as FREEE_ACCESS_TOKEN.
    """
    settings = ctx.obj["settings"]
    client_factory = ctx.obj.get("client_factory", build_client)
    try:
        settings.require(*AUTH_REQUIRED)
        client = client_factory(settings)
        try:
            token = client.get_access_token(settings.client_id, settings.client_secret)
        finally:
            client.close()
    except DomainError as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"FREEE_ACCESS_TOKEN={token}")


def register_commands(cli):
    """Register auth command with main CLI."""
    cli.add_command(auth)
