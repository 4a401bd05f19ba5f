"""Tests for the profile, target and report sync engines."""

from __future__ import annotations

import asyncio
from dataclasses import FrozenInstanceError
from datetime import datetime
from unittest.mock import patch

import pytest

from finsync.client.cache import MemoryCacheStore
from finsync.client.errors import HTTPStatusError
from finsync.client.sync import ProfileSync, ReportSync, TargetSync, current_period_id
from finsync.core.inputs import CreateTargetInput, UpdateProfileInput, UpdateTargetInput
from finsync.core.models import Report, ReportSum
from tests.fakes import FakeFinanceAPI, make_profile, make_target, settle


@pytest.fixture
def api() -> FakeFinanceAPI:
    return FakeFinanceAPI()


class TestProfileSync:
    """Tests for ProfileSync."""

    @pytest.fixture
    def sync(self, api: FakeFinanceAPI) -> ProfileSync:
        return ProfileSync(api, MemoryCacheStore())  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_cache_first(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        first = await sync.get_profile()
        second = await sync.get_profile()

        assert first == second
        assert len(api.calls_to("get_profile")) == 1

    @pytest.mark.asyncio
    async def test_force_refetches(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_profile()
        api.profile = make_profile(name="Sam")

        profile = await sync.get_profile(force=True)

        assert profile.name == "Sam"
        assert (await sync.cached_profile()).name == "Sam"
        assert len(api.calls_to("get_profile")) == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_fetch(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.gate = asyncio.Event()

        tasks = [asyncio.create_task(sync.get_profile(force=True)) for _ in range(3)]
        await settle()
        api.gate.set()
        profiles = await asyncio.gather(*tasks)

        assert all(p == profiles[0] for p in profiles)
        assert len(api.calls_to("get_profile")) == 1

    @pytest.mark.asyncio
    async def test_error_propagates(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.error = HTTPStatusError(500)

        with pytest.raises(HTTPStatusError):
            await sync.get_profile()
        assert await sync.cached_profile() is None

    @pytest.mark.asyncio
    async def test_update_replaces_cache(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_profile()
        api.profile = make_profile(name="Updated")

        await sync.update_profile(UpdateProfileInput(name="Updated"))

        assert (await sync.get_profile()).name == "Updated"
        assert len(api.calls_to("get_profile")) == 1

    @pytest.mark.asyncio
    async def test_clear_cache(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_profile()
        await sync.clear_cache()

        assert await sync.cached_profile() is None
        await sync.get_profile()
        assert len(api.calls_to("get_profile")) == 2

    @pytest.mark.asyncio
    async def test_cached_profile_is_immutable(self, sync) -> None:  # type: ignore[no-untyped-def]
        profile = await sync.get_profile()

        with pytest.raises(FrozenInstanceError):
            profile.name = "Changed"
        assert not hasattr(profile.goals, "append")
        assert (await sync.cached_profile()).name == "Jo"


class TestTargetSync:
    """Tests for TargetSync."""

    @pytest.fixture
    def sync(self, api: FakeFinanceAPI) -> TargetSync:
        return TargetSync(api, MemoryCacheStore())  # type: ignore[arg-type]

    @pytest.mark.asyncio
    async def test_archived_targets_are_dropped(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1"), make_target("g2", archived=True), make_target("g3")]

        targets = await sync.get_targets()

        assert [t.id for t in targets] == ["g1", "g3"]
        assert [t.id for t in await sync.cached_targets()] == ["g1", "g3"]

    @pytest.mark.asyncio
    async def test_cache_first(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1")]

        await sync.get_targets()
        await sync.get_targets()
        await sync.get_targets(force=True)

        assert len(api.calls_to("list_targets")) == 2

    @pytest.mark.asyncio
    async def test_create_inserts_at_head(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1")]
        await sync.get_targets()

        await sync.create_target(CreateTargetInput(name="Car"))

        assert [t.id for t in await sync.cached_targets()] == ["created", "g1"]

    @pytest.mark.asyncio
    async def test_update_replaces(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1"), make_target("g2")]
        await sync.get_targets()

        await sync.update_target("g2", UpdateTargetInput(name="Renamed"))

        cached = await sync.cached_targets()
        assert [t.id for t in cached] == ["g1", "g2"]
        assert cached[1].name == "Renamed"

    @pytest.mark.asyncio
    async def test_archiving_removes(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1"), make_target("g2")]
        await sync.get_targets()

        target = await sync.update_target("g1", UpdateTargetInput(archived=True))

        assert target.archived is True
        assert [t.id for t in await sync.cached_targets()] == ["g2"]

    @pytest.mark.asyncio
    async def test_update_without_cache(self, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.update_target("g1", UpdateTargetInput(name="x"))
        assert await sync.cached_targets() == []

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_fetch(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1")]
        api.gate = asyncio.Event()

        tasks = [asyncio.create_task(sync.get_targets()) for _ in range(3)]
        await settle()
        api.gate.set()
        results = await asyncio.gather(*tasks)

        assert all([t.id for t in r] == ["g1"] for r in results)
        assert len(api.calls_to("list_targets")) == 1

    @pytest.mark.asyncio
    async def test_clear_cache_cancels_in_flight_fetch(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1")]
        api.gate = asyncio.Event()

        fetch = asyncio.create_task(sync.get_targets())
        await settle()
        await sync.clear_cache()
        api.gate.set()

        with pytest.raises(asyncio.CancelledError):
            await fetch
        assert await sync.cached_targets() == []

    @pytest.mark.asyncio
    async def test_cached_targets_are_immutable(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.targets = [make_target("g1")]
        targets = await sync.get_targets()

        with pytest.raises(FrozenInstanceError):
            targets[0].archived = True
        targets.clear()

        cached = await sync.cached_targets()
        assert [t.id for t in cached] == ["g1"]
        assert cached[0].archived is False


class TestReportSync:
    """Tests for ReportSync."""

    @pytest.fixture
    def sync(self, api: FakeFinanceAPI) -> ReportSync:
        api.reports = {
            "2025-01": Report(id="2025-01", sums={"USD": ReportSum(total=10)}),
            "2025-02": Report(id="2025-02", sums={"USD": ReportSum(total=20)}),
        }
        return ReportSync(api, MemoryCacheStore())  # type: ignore[arg-type]

    def test_current_period_id(self) -> None:
        assert current_period_id(datetime(2025, 3, 9)) == "2025-03"

    @pytest.mark.asyncio
    async def test_cached_reports_served_in_order(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_reports(["2025-01", "2025-02"])

        reports = await sync.get_reports(["2025-02", "2025-01"])

        assert [r.id for r in reports] == ["2025-02", "2025-01"]
        assert api.calls_to("list_reports") == [["2025-01", "2025-02"]]

    @pytest.mark.asyncio
    async def test_missing_id_fetches(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_reports(["2025-01"])

        await sync.get_reports(["2025-01", "2025-02"])

        assert api.calls_to("list_reports") == [["2025-01"], ["2025-01", "2025-02"]]
        assert [r.id for r in await sync.cached_reports()] == ["2025-01", "2025-02"]

    @pytest.mark.asyncio
    async def test_fetch_upserts(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        await sync.get_reports(["2025-01"])
        api.reports["2025-01"] = Report(id="2025-01", sums={"USD": ReportSum(total=99)})

        await sync.get_reports(["2025-01"], force=True)

        cached = await sync.cached_reports()
        assert len(cached) == 1
        assert cached[0].total_amount == 99

    @pytest.mark.asyncio
    async def test_current_report(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        with patch("finsync.client.sync.reports.current_period_id", return_value="2025-02"):
            report = await sync.get_current_report()
            await sync.get_current_report()
            await sync.get_current_report(force=True)

        assert report is not None
        assert report.id == "2025-02"
        assert report.is_current is True
        assert len(api.calls_to("list_reports")) == 2

    @pytest.mark.asyncio
    async def test_no_current_report(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        with patch("finsync.client.sync.reports.current_period_id", return_value="2030-01"):
            assert await sync.get_current_report() is None

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_fetch(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.gate = asyncio.Event()

        tasks = [asyncio.create_task(sync.get_reports(["2025-01"])) for _ in range(3)]
        await settle()
        api.gate.set()
        results = await asyncio.gather(*tasks)

        assert all([r.id for r in reports] == ["2025-01"] for reports in results)
        assert api.calls_to("list_reports") == [["2025-01"]]

    @pytest.mark.asyncio
    async def test_current_flag_not_shared_between_fetches(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        """A plain and a current-period fetch of the same id run separately."""
        api.gate = asyncio.Event()

        plain = asyncio.create_task(sync.get_reports(["2025-01"]))
        current = asyncio.create_task(sync.get_reports(["2025-01"], is_current=True))
        await settle()
        api.gate.set()
        plain_reports, current_reports = await asyncio.gather(plain, current)

        assert plain_reports[0].is_current is False
        assert current_reports[0].is_current is True
        assert len(api.calls_to("list_reports")) == 2

    @pytest.mark.asyncio
    async def test_clear_cache_cancels_in_flight_fetch(self, api, sync) -> None:  # type: ignore[no-untyped-def]
        api.gate = asyncio.Event()

        fetch = asyncio.create_task(sync.get_reports(["2025-01"]))
        await settle()
        await sync.clear_cache()
        api.gate.set()

        with pytest.raises(asyncio.CancelledError):
            await fetch
        assert await sync.cached_reports() == []

    @pytest.mark.asyncio
    async def test_cached_report_is_immutable(self, sync) -> None:  # type: ignore[no-untyped-def]
        report = (await sync.get_reports(["2025-01"]))[0]

        with pytest.raises(TypeError):
            report.sums["EUR"] = ReportSum(total=1)
        with pytest.raises(FrozenInstanceError):
            report.is_current = True

        cached = await sync.cached_reports()
        assert list(cached[0].sums) == ["USD"]
        assert cached[0].is_current is False
