"""Single-flight request deduplication.

This module provides:
- RequestDeduplicator: At most one in-flight task per logical key;
  concurrent callers share its result
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestDeduplicator:
    """Collapses concurrent identical requests into one underlying call.

    Usage:
        dedup = RequestDeduplicator()
        profile = await dedup.run("profile", fetch_profile)
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def pending(self, key: str) -> bool:
        """Check if a call for ``key`` is in flight."""
        task = self._tasks.get(key)
        return task is not None and not task.done()

    async def run(self, key: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` unless a call with the same key is already outstanding.

        Args:
            key: Logical request key (e.g., "refresh").
            work: Zero-argument coroutine function doing the remote call.

        Returns:
            The (shared) result of the outstanding call.

        Raises:
            Whatever the shared call raised; asyncio.CancelledError if the
            call was cancelled via cancel_all().
        """
        task = self._tasks.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(work())
            self._tasks[key] = task
            task.add_done_callback(lambda t, key=key: self._release(key, t))
        else:
            logger.debug(f"Joining in-flight request: {key}")
        # Shielded so that one caller giving up does not cancel the shared call
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if not task.cancelled():
            # Mark the exception as retrieved; callers that awaited got it
            task.exception()

    def cancel_all(self) -> None:
        """Cancel and forget every outstanding call."""
        for key, task in list(self._tasks.items()):
            if not task.done():
                logger.debug(f"Cancelling in-flight request: {key}")
                task.cancel()
        self._tasks.clear()
