"""Mutation inputs sent as GraphQL variables.

Only fields that are set are sent, so partial updates leave the other
server-side fields untouched.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any

from finsync.core.models import TargetStrategy


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields and convert values to their wire representation."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, TargetStrategy):
            value = value.value
        result[key] = value
    return result


@dataclass
class CreateTransactionInput:
    name: str
    amount: float
    currency: str
    text: str | None = None
    from_: str | None = None
    location: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "amount": self.amount,
                "currency": self.currency,
                "text": self.text,
                "from": self.from_,
                "location": self.location,
            }
        )


@dataclass
class UpdateTransactionInput:
    name: str | None = None
    amount: float | None = None
    currency: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return _compact(
            {"name": self.name, "amount": self.amount, "currency": self.currency}
        )


@dataclass
class CreateTargetInput:
    name: str
    emoji: str | None = None
    strategy: TargetStrategy | None = None
    currency: str | None = None
    amount_target: float | None = None
    expected_start_at: datetime | None = None
    expected_end_at: datetime | None = None
    remind_weekly: bool | None = None
    remind_monthly: bool | None = None

    def to_wire(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "emoji": self.emoji,
                "strategy": self.strategy,
                "currency": self.currency,
                "amountTarget": self.amount_target,
                "expectedStartAt": self.expected_start_at,
                "expectedEndAt": self.expected_end_at,
                "remindWeekly": self.remind_weekly,
                "remindMonthly": self.remind_monthly,
            }
        )


@dataclass
class UpdateTargetInput:
    """Partial update of a target. ``archived=True`` hides it from active views."""

    name: str | None = None
    emoji: str | None = None
    strategy: TargetStrategy | None = None
    currency: str | None = None
    amount_saved: float | None = None
    amount_target: float | None = None
    expected_start_at: datetime | None = None
    expected_end_at: datetime | None = None
    remind_weekly: bool | None = None
    remind_monthly: bool | None = None
    completed: bool | None = None
    archived: bool | None = None

    def to_wire(self) -> dict[str, Any]:
        return _compact(
            {
                "name": self.name,
                "emoji": self.emoji,
                "strategy": self.strategy,
                "currency": self.currency,
                "amountSaved": self.amount_saved,
                "amountTarget": self.amount_target,
                "expectedStartAt": self.expected_start_at,
                "expectedEndAt": self.expected_end_at,
                "remindWeekly": self.remind_weekly,
                "remindMonthly": self.remind_monthly,
                "completed": self.completed,
                "archived": self.archived,
            }
        )


@dataclass
class UpdateProfileInput:
    """Partial profile update; the API expects snake_case keys here."""

    goals: list[str] | None = None
    occupation: list[str] | None = None
    housing: list[str] | None = None
    transport: list[str] | None = None
    currency: str | None = None
    age: str | None = None
    notify_daily_report: bool | None = None
    notify_weekly_report: bool | None = None
    notify_monthly_report: bool | None = None
    notify_annual_report: bool | None = None
    notify_new_recommendation: bool | None = None
    favorite_realtime_voice: str | None = None
    name: str | None = None
    picture: str | None = None
    timezone: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return _compact({f.name: getattr(self, f.name) for f in fields(self)})
