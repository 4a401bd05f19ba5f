"""Sign-out reset coordination.

This module provides:
- StateResetting: Protocol for anything holding per-user state
- AppResetService: Resets every registered component concurrently
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class StateResetting(Protocol):
    async def reset_state(self) -> None: ...


class AppResetService:
    """Coordinates clearing all cached user state on sign-out."""

    def __init__(self) -> None:
        self._resetters: list[StateResetting] = []

    def register(self, resetter: StateResetting) -> None:
        """Register a component to reset on sign-out."""
        self._resetters.append(resetter)
        logger.info(f"Registered state resetter: {type(resetter).__name__}")

    async def reset_all(self) -> None:
        """Reset every registered component concurrently.

        Raises:
            The first exception raised by a resetter, after all have run.
        """
        logger.info("Resetting all state...")
        results = await asyncio.gather(
            *(resetter.reset_state() for resetter in list(self._resetters)),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            logger.error(f"State reset failed: {error}")
        if errors:
            raise errors[0]
        logger.info("All state reset completed")
