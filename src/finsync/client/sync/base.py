"""Base class for entity sync engines.

This module provides:
- BaseSync: Owns one cache store and one request deduplicator, and
  implements the cache-reset contract shared by every entity family
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Generic, TypeVar

from finsync.client.dedup import RequestDeduplicator

if TYPE_CHECKING:
    from finsync.client.api import FinanceAPI
    from finsync.client.cache import CacheStore, Mutator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseSync(Generic[T]):
    """Single owner of an entity family's cache and in-flight requests.

    The cache store is never exposed; collaborators only see copies returned
    by the engine's async methods.

    Every write is tagged with the cache generation observed before its
    network round-trip. ``clear_cache`` bumps the generation, so a request
    that completes after a reset is discarded instead of repopulating the
    cache.
    """

    family = "entity"

    def __init__(self, api: FinanceAPI, store: CacheStore[T]) -> None:
        """Initialize the engine.

        Args:
            api: Remote operations.
            store: Cache store exclusively owned by this engine.
        """
        self._api = api
        self._store = store
        self._dedup = RequestDeduplicator()
        self._generation = 0

    async def _apply(self, generation: int, mutator: Mutator[T]) -> T | None:
        """Apply ``mutator`` to the cache unless it was reset since ``generation``."""

        def guarded(current: T | None) -> T | None:
            if generation != self._generation:
                logger.debug(f"{self.family}: discarding result fetched before reset")
                return current
            return mutator(current)

        return await self._store.update(guarded)

    async def clear_cache(self) -> None:
        """Drop cached data and cancel pending fetches. Idempotent."""
        self._generation += 1
        self._dedup.cancel_all()
        await self._store.clear()
        logger.debug(f"{self.family}: cache cleared")

    async def reset_state(self) -> None:
        """Reset hook called on sign-out."""
        await self.clear_cache()
