"""Command-line interface for finsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- configure: Save the API endpoint
- login: Store an access token
- logout: Clear caches and forget the token
- profile: Show the user's profile
- transactions: List transactions
- transactions-page: Fetch one page of transactions
- refresh: Pull new transactions
- targets: List active savings targets
- reports: Show reports for given periods
- current-report: Show the current month's report
"""

from __future__ import annotations

import logging

import click

from finsync.client.cli.account import configure, login, logout
from finsync.client.cli.config import (
    get_config_dir,
    get_config_file,
    load_config,
    save_config,
)
from finsync.client.cli.data import (
    current_report,
    profile,
    refresh,
    reports,
    targets,
    transactions,
    transactions_page,
)

__all__ = [
    "cli",
    "get_config_dir",
    "get_config_file",
    "load_config",
    "save_config",
]


@click.group()
@click.version_option(package_name="finsync")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """finsync - Cached client for the personal finance API."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Account commands
cli.add_command(configure)
cli.add_command(login)
cli.add_command(logout)

# Data commands
cli.add_command(profile)
cli.add_command(transactions)
cli.add_command(transactions_page)
cli.add_command(refresh)
cli.add_command(targets)
cli.add_command(reports)
cli.add_command(current_report)
