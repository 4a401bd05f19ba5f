"""Spend report sync engine.

Reports are keyed by period ("YYYY-MM"). A closed period never changes, so
cached reports are served as-is; the ongoing period can be refetched with
``force=True``.
"""

from __future__ import annotations

import logging
from datetime import datetime

from finsync.client.errors import APIError
from finsync.client.sync.base import BaseSync
from finsync.core.models import Report

logger = logging.getLogger(__name__)


def current_period_id(now: datetime | None = None) -> str:
    """Get the report id of the ongoing month (local time)."""
    return (now or datetime.now()).strftime("%Y-%m")


class ReportSync(BaseSync[list[Report]]):
    """Cache-first access to spend reports."""

    family = "reports"

    async def cached_reports(self) -> list[Report]:
        return list(await self._store.read() or [])

    async def get_reports(
        self,
        ids: list[str],
        is_current: bool = False,
        force: bool = False,
    ) -> list[Report]:
        """Get reports by period id.

        Args:
            ids: Period ids to fetch.
            is_current: Mark fetched reports as the ongoing period.
            force: Fetch even if every id is cached.

        Returns:
            Cached reports in ``ids`` order when all are cached, otherwise
            the reports returned by the API.
        """
        key = f"{','.join(ids)}|current={is_current}"

        if not force and not self._dedup.pending(key):
            by_id = {r.id: r for r in await self._store.read() or []}
            if all(report_id in by_id for report_id in ids):
                logger.debug(f"Returning cached reports: {key}")
                return [by_id[report_id] for report_id in ids]

        return list(
            await self._dedup.run(key, lambda: self._fetch_reports(ids, is_current))
        )

    async def _fetch_reports(self, ids: list[str], is_current: bool) -> list[Report]:
        generation = self._generation
        try:
            reports = await self._api.list_reports(ids, is_current=is_current)
        except APIError as e:
            logger.error(f"Failed to fetch reports {ids}: {e}")
            raise

        def upsert(cached: list[Report] | None) -> list[Report]:
            existing = list(cached or [])
            index = {r.id: i for i, r in enumerate(existing)}
            for report in reports:
                if report.id in index:
                    existing[index[report.id]] = report
                else:
                    index[report.id] = len(existing)
                    existing.append(report)
            return existing

        await self._apply(generation, upsert)
        return reports

    async def get_current_report(self, force: bool = False) -> Report | None:
        """Get the report of the ongoing month, if the API has one."""
        reports = await self.get_reports(
            [current_period_id()], is_current=True, force=force
        )
        return reports[0] if reports else None
