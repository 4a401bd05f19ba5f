"""Configuration utilities for the finsync CLI.

This module provides shared configuration functions used across CLI commands.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import click

from finsync.client.credentials import KeyringTokenProvider
from finsync.client.errors import APIError
from finsync.client.session import SyncSession
from finsync.core.config import ClientConfig

T = TypeVar("T")


def get_config_dir() -> Path:
    """Get the configuration directory for finsync.

    Returns:
        Path to ~/.finsync or equivalent.
    """
    return Path.home() / ".finsync"


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def load_config() -> dict[str, str]:
    """Load configuration from config file."""
    config_file = get_config_file()
    if config_file.exists():
        return dict(json.loads(config_file.read_text()))
    return {}


def save_config(config: dict[str, str]) -> None:
    """Save configuration to config file."""
    config_file = get_config_file()
    config_file.parent.mkdir(parents=True, exist_ok=True)
    config_file.write_text(json.dumps(config, indent=2))


def build_session() -> SyncSession:
    """Create a session from the saved configuration.

    Exits with an error message if the CLI was never configured.
    """
    config = load_config()
    if not config.get("api_url"):
        click.echo("Error: Not configured. Run 'finsync configure' first.", err=True)
        sys.exit(1)
    client_config = ClientConfig(
        api_url=config["api_url"],
        cache_dir=get_config_dir() / "cache",
    )
    return SyncSession(client_config, KeyringTokenProvider())


def run_with_session(action: Callable[[SyncSession], Awaitable[T]]) -> T:
    """Run ``action`` against a fresh session, reporting API errors.

    Args:
        action: Coroutine function receiving the session.

    Returns:
        The action's result.
    """
    session = build_session()

    async def main() -> T:
        async with session:
            return await action(session)

    try:
        return asyncio.run(main())
    except APIError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
