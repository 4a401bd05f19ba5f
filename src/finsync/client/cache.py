"""Cache stores for sync engines.

This module provides:
- CacheStore: Read / atomic read-modify-write / clear contract
- MemoryCacheStore: Process-memory backend (lost on restart)
- FileCacheStore: Durable backend, one JSON document per entity family

Architecture:
    Every store guards its value with an asyncio.Lock. ``update`` runs the
    mutator under that lock, so read-modify-write is atomic with respect to
    other writers of the same store. The file backend loads the document
    fully on first access and rewrites it fully on each write. Stores that
    touch the disk run their load, save and erase hooks in a worker thread;
    the mutator always runs on the event loop.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Mutator = Callable[[T | None], T | None]


class CacheStore(ABC, Generic[T]):
    """Holds the last known value of one entity family."""

    # Hooks perform blocking I/O and must run off the event loop
    blocking = False

    def __init__(self) -> None:
        self._lock = asyncio.Lock()

    async def read(self) -> T | None:
        """Get the cached value, or None if nothing is cached."""
        async with self._lock:
            return await self._call(self._load)

    async def update(self, mutator: Mutator[T]) -> T | None:
        """Replace the cached value with ``mutator(current)``.

        Args:
            mutator: Receives the current value (possibly None) and returns
                the new one. Returning None clears the entry.

        Returns:
            The new value.
        """
        async with self._lock:
            value = mutator(await self._call(self._load))
            if value is None:
                await self._call(self._erase)
            else:
                await self._call(self._save, value)
            return value

    async def clear(self) -> None:
        """Drop the cached value. Idempotent."""
        async with self._lock:
            await self._call(self._erase)

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        if not self.blocking:
            return fn(*args)
        work = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        try:
            return await asyncio.shield(work)
        except asyncio.CancelledError:
            # Keep the lock until the file operation has finished
            await asyncio.wait([work])
            raise

    @abstractmethod
    def _load(self) -> T | None: ...

    @abstractmethod
    def _save(self, value: T) -> None: ...

    @abstractmethod
    def _erase(self) -> None: ...


class MemoryCacheStore(CacheStore[T]):
    """Volatile cache held in process memory."""

    def __init__(self) -> None:
        super().__init__()
        self._value: T | None = None

    def _load(self) -> T | None:
        return self._value

    def _save(self, value: T) -> None:
        self._value = value

    def _erase(self) -> None:
        self._value = None


class FileCacheStore(CacheStore[T]):
    """Durable cache stored as a single JSON document."""

    blocking = True

    def __init__(
        self,
        path: Path,
        encode: Callable[[T], Any],
        decode: Callable[[Any], T],
    ) -> None:
        """Initialize the store.

        Args:
            path: JSON file holding the cached value.
            encode: Converts the value to JSON-serializable data.
            decode: Converts loaded JSON data back to the value.
        """
        super().__init__()
        self._path = Path(path)
        self._encode = encode
        self._decode = decode
        self._value: T | None = None
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> T | None:
        if self._loaded:
            return self._value
        self._loaded = True
        if not self._path.exists():
            return None
        try:
            self._value = self._decode(json.loads(self._path.read_text(encoding="utf-8")))
        except (OSError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache {self._path}: {e}")
            self._value = None
        return self._value

    def _save(self, value: T) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(self._encode(value)), encoding="utf-8")
        os.replace(tmp_path, self._path)
        self._value = value
        self._loaded = True

    def _erase(self) -> None:
        self._path.unlink(missing_ok=True)
        self._value = None
        self._loaded = True
