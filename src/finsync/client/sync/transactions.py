"""Transaction sync engine.

This module provides:
- TransactionSync: Paginated, durable cache of transactions with an
  incremental "catch-up" refresh

Incremental refresh:
    The API returns transactions newest-first and ids never change, so the
    first cached id met while scanning pages from the top is a safe stopping
    point: everything after it is already cached. Refresh cost is bounded by
    the number of new transactions (rounded up to a page), not by the size
    of the history.

        cache:   [t5, t4, t3, t2, t1]
        remote:  [t7, t6, t5, ...]     page 1 ─► t7, t6 new, stop at t5
        result:  [t7, t6, t5, t4, t3, t2, t1]

    If the remote collection runs out before any overlap is found, every
    fetched transaction is treated as new.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from finsync.client.api import DEFAULT_PAGE_SIZE
from finsync.client.sync.base import BaseSync
from finsync.core.mapping import as_utc
from finsync.core.models import Transaction, TransactionListResult

if TYPE_CHECKING:
    from finsync.core.inputs import CreateTransactionInput, UpdateTransactionInput

logger = logging.getLogger(__name__)

REFRESH_KEY = "refresh"
LOAD_ALL_KEY = "load_all"
DEFAULT_HISTORY = timedelta(days=365)


def _unique(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Drop repeated ids, keeping the first occurrence."""
    seen: set[str] = set()
    result: list[Transaction] = []
    for transaction in transactions:
        if transaction.id not in seen:
            seen.add(transaction.id)
            result.append(transaction)
    return result


class TransactionSync(BaseSync[list[Transaction]]):
    """Cache-first, paginated access to transactions (newest first)."""

    family = "transactions"

    async def cached_transactions(self) -> list[Transaction]:
        return list(await self._store.read() or [])

    async def get_transactions(
        self, force: bool = False, per_page: int = DEFAULT_PAGE_SIZE
    ) -> list[Transaction]:
        """Get transactions, refreshing only when needed.

        Args:
            force: Run an incremental refresh even when the cache is filled.
            per_page: Page size used by the refresh.

        Returns:
            The cached transactions, newest first.
        """
        if not force and not self._dedup.pending(REFRESH_KEY):
            cached = await self._store.read()
            if cached:
                logger.debug(f"Returning {len(cached)} cached transactions")
                return list(cached)
        result = await self.refresh(per_page)
        return result.transactions

    async def fetch_page(
        self,
        next_token: str | None = None,
        per_page: int = DEFAULT_PAGE_SIZE,
    ) -> TransactionListResult:
        """Fetch one page and append its unseen transactions to the cache.

        Used for "load more" scrolling.

        Args:
            next_token: Cursor from the previous page (None for the first).
            per_page: Page size.

        Returns:
            The page's transactions and the cursor of the next page.
        """
        logger.debug(f"fetch_page called, next_token: {next_token}, per_page: {per_page}")
        generation = self._generation
        page = await self._api.list_transactions(next_token=next_token, per_page=per_page)

        def append(cached: list[Transaction] | None) -> list[Transaction]:
            existing = list(cached or [])
            combined = _unique(existing + page.items)
            logger.debug(
                f"fetch_page: appended {len(combined) - len(existing)} to cache, "
                f"total: {len(combined)}"
            )
            return combined

        await self._apply(generation, append)
        return TransactionListResult(transactions=page.items, next_token=page.cursor)

    async def refresh(self, per_page: int = DEFAULT_PAGE_SIZE) -> TransactionListResult:
        """Bring the cache up to date with the newest transactions.

        Concurrent refreshes share one underlying sweep.

        Returns:
            The full cache (newest first); ``next_token`` is always None.
        """
        return await self._dedup.run(REFRESH_KEY, lambda: self._refresh(per_page))

    async def _refresh(self, per_page: int) -> TransactionListResult:
        cached = await self._store.read() or []

        if not cached:
            logger.debug("refresh: no cache, loading all pages")
            token: str | None = None
            while True:
                result = await self.fetch_page(next_token=token, per_page=per_page)
                token = result.next_token
                if token is None:
                    break
            return TransactionListResult(
                transactions=await self.cached_transactions(), next_token=None
            )

        generation = self._generation
        known_ids = {t.id for t in cached}
        new_transactions: list[Transaction] = []
        cursor: str | None = None
        logger.info(f"refresh: checking for new transactions, cached count: {len(cached)}")

        while True:
            page = await self._api.list_transactions(next_token=cursor, per_page=per_page)
            logger.debug(f"refresh: fetched page with {len(page.items)} transactions")

            found_overlap = False
            for transaction in page.items:
                if transaction.id in known_ids:
                    found_overlap = True
                    break
                new_transactions.append(transaction)

            if found_overlap or page.cursor is None:
                break
            cursor = page.cursor

        logger.info(f"refresh: found {len(new_transactions)} new transactions")

        if new_transactions:

            def prepend(current: list[Transaction] | None) -> list[Transaction]:
                existing = list(current or [])
                existing_ids = {t.id for t in existing}
                fresh = [t for t in _unique(new_transactions) if t.id not in existing_ids]
                logger.debug(f"refresh: prepended {len(fresh)}, total: {len(existing) + len(fresh)}")
                return fresh + existing

            await self._apply(generation, prepend)

        return TransactionListResult(
            transactions=await self.cached_transactions(), next_token=None
        )

    async def load_all(self, until: datetime | None = None) -> list[Transaction]:
        """Load every transaction back to ``until`` and replace the cache.

        Paging stops once the oldest transaction of a page predates
        ``until`` (default: one year ago) or the collection is exhausted.
        Concurrent calls with the same cutoff share one load.
        """
        key = f"{LOAD_ALL_KEY}:{as_utc(until).isoformat() if until else 'default'}"
        return list(await self._dedup.run(key, lambda: self._load_all(until)))

    async def _load_all(self, until: datetime | None) -> list[Transaction]:
        generation = self._generation
        cutoff = as_utc(until) if until else datetime.now(UTC) - DEFAULT_HISTORY
        loaded: list[Transaction] = []
        token: str | None = None

        while True:
            page = await self._api.list_transactions(
                next_token=token, per_page=DEFAULT_PAGE_SIZE
            )
            loaded.extend(page.items)
            if page.items and page.items[-1].created_at < cutoff:
                break
            token = page.cursor
            if token is None:
                break

        transactions = _unique(loaded)
        logger.info(f"load_all: loaded {len(transactions)} transactions")
        await self._apply(generation, lambda _: transactions)
        return list(transactions)

    async def create_transaction(self, input: CreateTransactionInput) -> Transaction:
        """Create a transaction and put it at the head of the cache."""
        generation = self._generation
        transaction = await self._api.create_transaction(input)

        def insert(cached: list[Transaction] | None) -> list[Transaction]:
            rest = [t for t in cached or [] if t.id != transaction.id]
            return [transaction, *rest]

        await self._apply(generation, insert)
        return transaction

    async def update_transaction(
        self, id: str, input: UpdateTransactionInput
    ) -> Transaction:
        """Update a transaction and replace the cached copy."""
        generation = self._generation
        transaction = await self._api.update_transaction(id, input)

        def replace(cached: list[Transaction] | None) -> list[Transaction] | None:
            if cached is None:
                return None
            return [transaction if t.id == id else t for t in cached]

        await self._apply(generation, replace)
        return transaction

    async def delete_transaction(self, id: str) -> bool:
        """Delete a transaction; the cache is updated only if the server agrees."""
        generation = self._generation
        success = await self._api.delete_transaction(id)
        if success:

            def remove(cached: list[Transaction] | None) -> list[Transaction] | None:
                if cached is None:
                    return None
                return [t for t in cached if t.id != id]

            await self._apply(generation, remove)
        return success
