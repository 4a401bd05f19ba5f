"""Credential sources for the transport executor.

This module provides:
- TokenProvider: Protocol the transport executor depends on
- KeyringTokenProvider: Token kept in the OS keyring, with an optional
  async refresh callback for forced refreshes
- store_token / delete_token: Manage the stored token
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

import keyring
from keyring.errors import KeyringError

from finsync.client.errors import UnauthorizedError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "finsync"
DEFAULT_ACCOUNT = "default"

RefreshCallback = Callable[[], Awaitable[str | None]]


class TokenProvider(Protocol):
    """Supplies the Authorization credential.

    Implementations must tolerate concurrent calls from simultaneous
    requests.
    """

    async def get_token(self, force_refresh: bool = False) -> str:
        """Get a credential, refreshing it first when ``force_refresh`` is set.

        Raises:
            UnauthorizedError: If no valid credential can be produced.
        """
        ...


def store_token(token: str, account: str = DEFAULT_ACCOUNT) -> None:
    """Save a token in the OS keyring."""
    keyring.set_password(KEYRING_SERVICE, account, token)


def delete_token(account: str = DEFAULT_ACCOUNT) -> None:
    """Remove the stored token (no-op if none is stored)."""
    with contextlib.suppress(KeyringError):
        keyring.delete_password(KEYRING_SERVICE, account)


class KeyringTokenProvider:
    """Token provider backed by the OS keyring.

    A forced refresh calls ``refresh`` (when given) and caches the new token
    in the keyring. Refreshes are serialized with a lock so that concurrent
    requests hitting an expired token trigger one refresh at a time.
    """

    def __init__(
        self,
        account: str = DEFAULT_ACCOUNT,
        refresh: RefreshCallback | None = None,
    ) -> None:
        self._account = account
        self._refresh = refresh
        self._lock = asyncio.Lock()

    def _read(self) -> str | None:
        try:
            return keyring.get_password(KEYRING_SERVICE, self._account)
        except KeyringError as e:
            logger.warning(f"Keyring unavailable: {e}")
            return None

    async def get_token(self, force_refresh: bool = False) -> str:
        async with self._lock:
            token = None if force_refresh else await asyncio.to_thread(self._read)

            if token is None and self._refresh is not None:
                logger.info("Refreshing credential")
                token = await self._refresh()
                if token:
                    # Cache in keyring (silently ignore if unavailable)
                    with contextlib.suppress(KeyringError):
                        await asyncio.to_thread(store_token, token, self._account)
            elif token is None:
                token = await asyncio.to_thread(self._read)

            if not token:
                raise UnauthorizedError("No credential available. Please sign in.")
            return token
