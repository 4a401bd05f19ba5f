"""Wiring of the remote-data layer.

This module provides:
- build_store: Cache backend for an entity family, chosen by configuration
- SyncSession: Executor, API and the four sync engines for one user

Usage:
    async with SyncSession(config, KeyringTokenProvider()) as session:
        profile = await session.profile.get_profile()
        result = await session.transactions.refresh()
        ...
        await session.sign_out()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

from finsync.client.api import FinanceAPI
from finsync.client.cache import CacheStore, FileCacheStore, MemoryCacheStore
from finsync.client.sync import (
    AppResetService,
    ProfileSync,
    ReportSync,
    TargetSync,
    TransactionSync,
)
from finsync.client.transport import GraphQLClient
from finsync.core.config import CACHE_FILE
from finsync.core.mapping import (
    profile_from_wire,
    profile_to_wire,
    report_from_wire,
    report_to_wire,
    target_from_wire,
    target_to_wire,
    transaction_from_wire,
    transaction_to_wire,
)

if TYPE_CHECKING:
    import httpx

    from finsync.client.credentials import TokenProvider
    from finsync.core.config import ClientConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _list_codec(
    to_wire: Callable[[Any], dict[str, Any]],
    from_wire: Callable[[dict[str, Any]], Any],
) -> tuple[Callable[[list[Any]], list[dict[str, Any]]], Callable[[Any], list[Any]]]:
    return (
        lambda items: [to_wire(item) for item in items],
        lambda data: [from_wire(item) for item in data],
    )


def build_store(
    config: ClientConfig,
    family: str,
    encode: Callable[[T], Any],
    decode: Callable[[Any], T],
) -> CacheStore[T]:
    """Create the cache store configured for ``family``."""
    if config.backend_for(family) == CACHE_FILE:
        path = config.cache_path(family)
        logger.debug(f"{family}: durable cache at {path}")
        return FileCacheStore(path, encode, decode)
    logger.debug(f"{family}: in-memory cache")
    return MemoryCacheStore()


class SyncSession:
    """Everything a signed-in user needs to read and write remote data."""

    def __init__(
        self,
        config: ClientConfig,
        token_provider: TokenProvider,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the session.

        Args:
            config: Client configuration.
            token_provider: Credential source shared by all requests.
            http_client: Optional pre-built httpx client.
            sleep: Coroutine used for backoff delays.
        """
        self.config = config
        self.executor = GraphQLClient(
            config, token_provider, http_client=http_client, sleep=sleep
        )
        self.api = FinanceAPI(self.executor)

        self.profile = ProfileSync(
            self.api,
            build_store(config, "profile", profile_to_wire, profile_from_wire),
        )
        self.transactions = TransactionSync(
            self.api,
            build_store(
                config,
                "transactions",
                *_list_codec(transaction_to_wire, transaction_from_wire),
            ),
        )
        self.targets = TargetSync(
            self.api,
            build_store(config, "targets", *_list_codec(target_to_wire, target_from_wire)),
        )
        self.reports = ReportSync(
            self.api,
            build_store(config, "reports", *_list_codec(report_to_wire, report_from_wire)),
        )

        self.reset_service = AppResetService()
        for engine in (self.profile, self.transactions, self.targets, self.reports):
            self.reset_service.register(engine)

    async def sign_out(self) -> None:
        """Clear every cache and cancel pending fetches."""
        await self.reset_service.reset_all()

    async def aclose(self) -> None:
        await self.executor.aclose()

    async def __aenter__(self) -> SyncSession:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
