"""Account commands for the finsync CLI.

Commands:
- configure: Save the API endpoint
- login: Store an access token in the OS keyring
- logout: Clear every cache and forget the token
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from finsync.client.cli import config as cli_config
from finsync.client.credentials import delete_token, store_token

if TYPE_CHECKING:
    from finsync.client.session import SyncSession


@click.command()
@click.option("--api-url", required=True, help="GraphQL endpoint of the finance API.")
def configure(api_url: str) -> None:
    """Save the API endpoint."""
    config = cli_config.load_config()
    config["api_url"] = api_url.rstrip("/")
    cli_config.save_config(config)
    click.echo(f"API endpoint set to {config['api_url']}")


@click.command()
@click.option("--token", prompt=True, hide_input=True, help="Access token.")
def login(token: str) -> None:
    """Store an access token in the OS keyring."""
    store_token(token.strip())
    click.echo("Token stored.")


@click.command()
def logout() -> None:
    """Clear every cache and forget the stored token."""

    async def sign_out(session: SyncSession) -> None:
        await session.sign_out()

    if not cli_config.load_config().get("api_url"):
        delete_token()
        click.echo("Signed out.")
        return

    try:
        cli_config.run_with_session(sign_out)
    finally:
        # The token goes even when clearing the caches fails
        delete_token()
    click.echo("Signed out. Caches cleared.")
