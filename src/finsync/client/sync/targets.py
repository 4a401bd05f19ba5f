"""Savings target sync engine.

The cache holds the active view: archived targets are never kept.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from finsync.client.errors import APIError
from finsync.client.sync.base import BaseSync
from finsync.core.models import Target

if TYPE_CHECKING:
    from finsync.core.inputs import CreateTargetInput, UpdateTargetInput

logger = logging.getLogger(__name__)

TARGETS_KEY = "targets"


class TargetSync(BaseSync[list[Target]]):
    """Cache-first access to savings targets."""

    family = "targets"

    async def cached_targets(self) -> list[Target]:
        return list(await self._store.read() or [])

    async def get_targets(self, force: bool = False) -> list[Target]:
        """Get the active targets.

        Args:
            force: Skip the cache and fetch from the API.
        """
        if not force and not self._dedup.pending(TARGETS_KEY):
            cached = await self._store.read()
            if cached:
                return list(cached)
        return list(await self._dedup.run(TARGETS_KEY, self._fetch_targets))

    async def _fetch_targets(self) -> list[Target]:
        generation = self._generation
        try:
            targets = await self._api.list_targets()
        except APIError as e:
            logger.error(f"Failed to fetch targets: {e}")
            raise
        active = [t for t in targets if not t.archived]
        logger.info(f"Fetched {len(targets)} targets ({len(active)} active)")
        await self._apply(generation, lambda _: active)
        return active

    async def create_target(self, input: CreateTargetInput) -> Target:
        """Create a target and put it at the head of the cache."""
        generation = self._generation
        target = await self._api.create_target(input)

        def insert(cached: list[Target] | None) -> list[Target]:
            rest = [t for t in cached or [] if t.id != target.id]
            return [target, *rest]

        await self._apply(generation, insert)
        return target

    async def update_target(self, id: str, input: UpdateTargetInput) -> Target:
        """Update a target.

        Archiving removes the target from the cache; any other update
        replaces the cached copy.
        """
        generation = self._generation
        target = await self._api.update_target(id, input)
        archived = input.archived is True or target.archived

        def apply(cached: list[Target] | None) -> list[Target] | None:
            if cached is None:
                return None
            if archived:
                return [t for t in cached if t.id != id]
            return [target if t.id == id else t for t in cached]

        await self._apply(generation, apply)
        return target
