"""Data commands for the finsync CLI.

Commands:
- profile: Show the user's profile
- transactions: List cached transactions, refreshing when empty
- transactions-page: Fetch one page of transactions
- refresh: Pull new transactions into the cache
- targets: List active savings targets
- reports: Show reports for the given periods
- current-report: Show the report for the current month
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from finsync.client.api import DEFAULT_PAGE_SIZE
from finsync.client.cli import config as cli_config

if TYPE_CHECKING:
    from finsync.client.session import SyncSession
    from finsync.core.models import Report, Target, Transaction


def format_transaction(transaction: Transaction) -> str:
    return (
        f"{transaction.created_at:%Y-%m-%d}  "
        f"{transaction.amount:>10.2f} {transaction.currency}  {transaction.name}"
    )


def format_target(target: Target) -> str:
    return (
        f"{target.emoji} {target.name}: "
        f"{target.amount_saved:.2f}/{target.amount_target:.2f} {target.currency} "
        f"({target.progress_percent}%)"
    )


def format_report(report: Report) -> str:
    lines = [f"{report.id}{' (current)' if report.is_current else ''}"]
    for currency, sums in sorted(report.sums.items()):
        lines.append(
            f"  {currency}: total {sums.total:.2f}, "
            f"credit {sums.credit:.2f}, debit {sums.debit:.2f}"
        )
    return "\n".join(lines)


@click.command()
@click.option("--force", is_flag=True, help="Bypass the cache.")
def profile(force: bool) -> None:
    """Show the user's profile."""

    async def action(session: SyncSession) -> None:
        user = await session.profile.get_profile(force=force)
        click.echo(f"Name:  {user.display_name}")
        click.echo(f"Email: {user.email}")
        click.echo(f"Plan:  {user.plan}")

    cli_config.run_with_session(action)


@click.command()
@click.option("--force", is_flag=True, help="Check the server for new transactions.")
def transactions(force: bool) -> None:
    """List cached transactions, refreshing when the cache is empty."""

    async def action(session: SyncSession) -> None:
        items = await session.transactions.get_transactions(force=force)
        for transaction in items:
            click.echo(format_transaction(transaction))
        click.echo(f"{len(items)} transactions")

    cli_config.run_with_session(action)


@click.command("transactions-page")
@click.option("--next-token", default=None, help="Cursor returned by the previous page.")
@click.option("--per-page", default=DEFAULT_PAGE_SIZE, show_default=True, type=int)
def transactions_page(next_token: str | None, per_page: int) -> None:
    """Fetch one page of transactions and add it to the cache."""

    async def action(session: SyncSession) -> None:
        result = await session.transactions.fetch_page(
            next_token=next_token, per_page=per_page
        )
        for transaction in result.transactions:
            click.echo(format_transaction(transaction))
        if result.next_token:
            click.echo(f"Next token: {result.next_token}")

    cli_config.run_with_session(action)


@click.command()
@click.option("--per-page", default=DEFAULT_PAGE_SIZE, show_default=True, type=int)
def refresh(per_page: int) -> None:
    """Pull new transactions into the cache."""

    async def action(session: SyncSession) -> None:
        before = len(await session.transactions.cached_transactions())
        result = await session.transactions.refresh(per_page=per_page)
        added = len(result.transactions) - before
        click.echo(f"{added} new, {len(result.transactions)} cached")

    cli_config.run_with_session(action)


@click.command()
@click.option("--force", is_flag=True, help="Bypass the cache.")
def targets(force: bool) -> None:
    """List active savings targets."""

    async def action(session: SyncSession) -> None:
        items = await session.targets.get_targets(force=force)
        if not items:
            click.echo("No active targets.")
        for target in items:
            click.echo(format_target(target))

    cli_config.run_with_session(action)


@click.command()
@click.argument("ids", nargs=-1, required=True)
@click.option("--force", is_flag=True, help="Bypass the cache.")
def reports(ids: tuple[str, ...], force: bool) -> None:
    """Show reports for the given periods (e.g. 2025-01)."""

    async def action(session: SyncSession) -> None:
        items = await session.reports.get_reports(list(ids), force=force)
        if not items:
            click.echo("No reports found.")
        for report in items:
            click.echo(format_report(report))

    cli_config.run_with_session(action)


@click.command("current-report")
@click.option("--force", is_flag=True, help="Refetch the current period.")
def current_report(force: bool) -> None:
    """Show the report for the current month."""

    async def action(session: SyncSession) -> None:
        report = await session.reports.get_current_report(force=force)
        if report is None:
            click.echo("No report for the current period.")
        else:
            click.echo(format_report(report))

    cli_config.run_with_session(action)
