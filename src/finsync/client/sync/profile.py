"""Profile sync engine.

The profile is small and sensitive; it is normally cached in process
memory only.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from finsync.client.errors import APIError
from finsync.client.sync.base import BaseSync
from finsync.core.models import Profile

if TYPE_CHECKING:
    from finsync.core.inputs import UpdateProfileInput

logger = logging.getLogger(__name__)

PROFILE_KEY = "profile"


class ProfileSync(BaseSync[Profile]):
    """Cache-first access to the user's profile."""

    family = "profile"

    async def cached_profile(self) -> Profile | None:
        return await self._store.read()

    async def get_profile(self, force: bool = False) -> Profile:
        """Get the profile.

        Args:
            force: Skip the cache and fetch from the API.

        Returns:
            The cached profile, the result of an in-flight fetch, or a
            freshly fetched one.
        """
        logger.debug(f"get_profile called, force: {force}")

        if self._dedup.pending(PROFILE_KEY):
            logger.debug("Returning in-flight request")
        elif not force:
            cached = await self._store.read()
            if cached is not None:
                logger.debug(f"Returning cached profile: {cached.display_name}")
                return cached

        return await self._dedup.run(PROFILE_KEY, self._fetch_profile)

    async def _fetch_profile(self) -> Profile:
        generation = self._generation
        logger.info("Fetching profile from API")
        try:
            profile = await self._api.get_profile()
        except APIError as e:
            logger.error(f"Failed to fetch profile: {e}")
            raise
        logger.info(f"Profile fetched: {profile.display_name}, plan: {profile.plan}")
        await self._apply(generation, lambda _: profile)
        return profile

    async def update_profile(self, input: UpdateProfileInput) -> Profile:
        """Update the profile and replace the cached copy."""
        generation = self._generation
        profile = await self._api.update_profile(input)
        await self._apply(generation, lambda _: profile)
        return profile
