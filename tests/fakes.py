"""Test doubles shared by the client tests."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import UTC, datetime, timedelta

from finsync.client.errors import UnauthorizedError
from finsync.core.models import Page, Profile, Report, Target, Transaction

BASE_TIME = datetime(2025, 1, 31, 12, 0, tzinfo=UTC)


def make_transaction(id: str, age_days: int = 0, **kwargs: object) -> Transaction:
    """Create a transaction ``age_days`` older than BASE_TIME."""
    return Transaction(
        id=id,
        name=kwargs.pop("name", f"Transaction {id}"),  # type: ignore[arg-type]
        amount=kwargs.pop("amount", -10.0),  # type: ignore[arg-type]
        currency="USD",
        created_at=BASE_TIME - timedelta(days=age_days),
        **kwargs,  # type: ignore[arg-type]
    )


def make_target(id: str, archived: bool = False, **kwargs: object) -> Target:
    return Target(
        id=id,
        name=kwargs.pop("name", f"Target {id}"),  # type: ignore[arg-type]
        expected_start_at=BASE_TIME,
        expected_end_at=BASE_TIME + timedelta(days=180),
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        archived=archived,
        **kwargs,  # type: ignore[arg-type]
    )


def make_profile(name: str = "Jo") -> Profile:
    return Profile(created_at=BASE_TIME, name=name, email="jo@example.com")


class FakeTokenProvider:
    """Token provider returning a new token on every forced refresh."""

    def __init__(self, token: str = "token-1", available: bool = True) -> None:
        self.token = token
        self.available = available
        self.calls: list[bool] = []
        self.refreshes = 0

    async def get_token(self, force_refresh: bool = False) -> str:
        self.calls.append(force_refresh)
        if not self.available:
            raise UnauthorizedError("No credential available. Please sign in.")
        if force_refresh:
            self.refreshes += 1
            self.token = f"token-{self.refreshes + 1}"
        return self.token


class RecordingSleep:
    """Replacement for asyncio.sleep that records the delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeFinanceAPI:
    """In-memory stand-in for FinanceAPI.

    Set ``gate`` to an unset asyncio.Event to hold every call until it is
    set, and ``error`` to make every call fail.
    """

    def __init__(self) -> None:
        self.profile: Profile = make_profile()
        self.pages: dict[str | None, Page[Transaction]] = {}
        self.targets: list[Target] = []
        self.reports: dict[str, Report] = {}
        self.delete_success = True
        self.gate: asyncio.Event | None = None
        self.error: Exception | None = None
        self.calls: list[tuple[str, object]] = []

    def calls_to(self, name: str) -> list[object]:
        return [arg for call, arg in self.calls if call == name]

    async def _enter(self, name: str, arg: object = None) -> None:
        self.calls.append((name, arg))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error

    async def get_profile(self) -> Profile:
        await self._enter("get_profile")
        return self.profile

    async def update_profile(self, input: object) -> Profile:
        await self._enter("update_profile", input)
        return self.profile

    async def list_transactions(
        self, next_token: str | None = None, per_page: int = 100
    ) -> Page[Transaction]:
        await self._enter("list_transactions", next_token)
        return self.pages[next_token]

    async def create_transaction(self, input: object) -> Transaction:
        await self._enter("create_transaction", input)
        return make_transaction("created", name=input.name)  # type: ignore[attr-defined]

    async def update_transaction(self, id: str, input: object) -> Transaction:
        await self._enter("update_transaction", id)
        return make_transaction(id, name=input.name)  # type: ignore[attr-defined]

    async def delete_transaction(self, id: str) -> bool:
        await self._enter("delete_transaction", id)
        return self.delete_success

    async def list_targets(self) -> list[Target]:
        await self._enter("list_targets")
        return list(self.targets)

    async def create_target(self, input: object) -> Target:
        await self._enter("create_target", input)
        return make_target("created", name=input.name)  # type: ignore[attr-defined]

    async def update_target(self, id: str, input: object) -> Target:
        await self._enter("update_target", id)
        return make_target(
            id,
            archived=bool(input.archived),  # type: ignore[attr-defined]
            name=input.name or f"Target {id}",  # type: ignore[attr-defined]
        )

    async def list_reports(self, ids: list[str], is_current: bool = False) -> list[Report]:
        await self._enter("list_reports", list(ids))
        result = []
        for report_id in ids:
            if report_id in self.reports:
                result.append(replace(self.reports[report_id], is_current=is_current))
        return result


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)
