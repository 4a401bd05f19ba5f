"""Conversion between wire payloads and domain entities.

Every function here is pure. ``*_from_wire`` functions tolerate missing
optional fields by substituting the product defaults and raise KeyError,
TypeError or ValueError when a required field is missing or malformed.
``*_to_wire`` functions produce the snake_case shape the API returns, which
is also the shape stored in the durable caches.
"""

from __future__ import annotations

import calendar
import json
import logging
from datetime import UTC, datetime
from typing import Any

from finsync.core.models import (
    DEFAULT_PLAN,
    Profile,
    ProfileAchievement,
    Report,
    ReportSum,
    Target,
    TargetStrategy,
    Transaction,
    TransactionInput,
    TransactionMetadata,
    TransactionType,
)

logger = logging.getLogger(__name__)

DEFAULT_TARGET_MONTHS = 6


# === Timestamps ===


def parse_datetime(value: Any) -> datetime | None:
    """Parse a wire timestamp.

    Accepts ISO-8601 strings (with or without fractional seconds), numeric
    strings and numbers holding Unix seconds. Timestamps without an offset
    are taken as UTC.

    Raises:
        ValueError: If the value cannot be interpreted as a timestamp.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Cannot decode date: {value!r}")
    if isinstance(value, int | float):
        return _from_unix(value)
    if isinstance(value, str):
        try:
            return as_utc(datetime.fromisoformat(value))
        except ValueError:
            pass
        try:
            seconds = float(value)
        except ValueError:
            pass
        else:
            return _from_unix(seconds)
    raise ValueError(f"Cannot decode date: {value!r}")


def _from_unix(seconds: float) -> datetime:
    # Out-of-range and non-finite values surface as OverflowError or OSError
    try:
        return datetime.fromtimestamp(seconds, tz=UTC)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Cannot decode date: {seconds!r}") from e


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _now() -> datetime:
    return datetime.now(UTC)


def add_months(value: datetime, months: int) -> datetime:
    """Add calendar months, clamping the day to the target month's length."""
    index = value.month - 1 + months
    year = value.year + index // 12
    month = index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _parse_json_map(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug(f"Ignoring malformed JSON field: {raw[:50]!r}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


# === Transactions ===


def _transaction_type(data: dict[str, Any]) -> TransactionType:
    raw = data.get("transaction_type")
    if raw is not None:
        try:
            return TransactionType(raw)
        except ValueError:
            return TransactionType.UNKNOWN
    if data.get("is_purchase"):
        return TransactionType.POS_PURCHASE
    if data.get("is_transfer"):
        return TransactionType.TRANSFER
    if data.get("is_atm"):
        return TransactionType.ATM
    return TransactionType.UNKNOWN


def transaction_from_wire(data: dict[str, Any]) -> Transaction:
    """Create a Transaction from an API payload."""
    raw_input = data.get("input")
    raw_metadata = data.get("metadata")
    identity = (raw_metadata or {}).get("identity") or {}

    return Transaction(
        id=str(data["id"]),
        name=data["name"],
        amount=float(data["amount"]),
        currency=data["currency"],
        created_at=parse_datetime(data.get("created_at")) or _now(),
        account_number=data.get("account_number") or "",
        card_number=data.get("card_number") or "",
        merchant_category=data.get("merchant_category") or "",
        success=data.get("success", True) is not False,
        is_credit=bool(data.get("is_credit")),
        is_debit=bool(data.get("is_debit")),
        is_atm=bool(data.get("is_atm")),
        is_purchase=bool(data.get("is_purchase")),
        is_transfer=bool(data.get("is_transfer")),
        full_date=data.get("full_date") or "",
        org_type=data.get("org_type") or "",
        org_name=data.get("org_name") or "",
        transaction_type=_transaction_type(data),
        error_message=data.get("error_message"),
        input=(
            TransactionInput(
                text=raw_input.get("text"),
                from_=raw_input.get("from"),
                location=raw_input.get("location"),
            )
            if raw_input
            else None
        ),
        metadata=(
            TransactionMetadata(
                type=raw_metadata.get("type") or "unknown",
                user_agent=identity.get("userAgent"),
                ip_address=identity.get("ipAddress"),
            )
            if raw_metadata
            else None
        ),
    )


def transaction_to_wire(transaction: Transaction) -> dict[str, Any]:
    """Convert a Transaction back to its API payload."""
    data: dict[str, Any] = {
        "id": transaction.id,
        "name": transaction.name,
        "amount": transaction.amount,
        "currency": transaction.currency,
        "created_at": format_datetime(transaction.created_at),
        "account_number": transaction.account_number,
        "card_number": transaction.card_number,
        "merchant_category": transaction.merchant_category,
        "success": transaction.success,
        "is_credit": transaction.is_credit,
        "is_debit": transaction.is_debit,
        "is_atm": transaction.is_atm,
        "is_purchase": transaction.is_purchase,
        "is_transfer": transaction.is_transfer,
        "full_date": transaction.full_date,
        "org_type": transaction.org_type,
        "org_name": transaction.org_name,
        "transaction_type": transaction.transaction_type.value,
        "error_message": transaction.error_message,
        "input": None,
        "metadata": None,
    }
    if transaction.input is not None:
        data["input"] = {
            "text": transaction.input.text,
            "from": transaction.input.from_,
            "location": transaction.input.location,
        }
    if transaction.metadata is not None:
        data["metadata"] = {
            "type": transaction.metadata.type,
            "identity": {
                "userAgent": transaction.metadata.user_agent,
                "ipAddress": transaction.metadata.ip_address,
            },
        }
    return data


# === Profile ===


def profile_from_wire(data: dict[str, Any]) -> Profile:
    """Create a Profile from an API payload."""

    def flag(key: str, default: bool) -> bool:
        value = data.get(key)
        return default if value is None else bool(value)

    return Profile(
        created_at=parse_datetime(data.get("created_at")) or _now(),
        goals=tuple(data.get("goals") or ()),
        occupation=tuple(data.get("occupation") or ()),
        housing=tuple(data.get("housing") or ()),
        transport=tuple(data.get("transport") or ()),
        currency=data.get("currency"),
        age=data.get("age"),
        achievements=tuple(
            ProfileAchievement(
                id=str(a["id"]),
                name=a["name"],
                created_at=parse_datetime(a.get("created_at")) or _now(),
            )
            for a in data.get("achievements") or []
        ),
        notify_daily_report=flag("notify_daily_report", False),
        notify_weekly_report=flag("notify_weekly_report", True),
        notify_monthly_report=flag("notify_monthly_report", True),
        notify_annual_report=flag("notify_annual_report", True),
        notify_new_recommendation=flag("notify_new_recommendation", True),
        favorite_realtime_voice=data.get("favorite_realtime_voice"),
        name=data.get("name") or "",
        email=data.get("email") or "",
        first_name=data.get("first_name") or "",
        last_name=data.get("last_name") or "",
        picture=data.get("picture"),
        timezone=data.get("timezone"),
        plan=data.get("plan") or DEFAULT_PLAN,
        plan_starts_at=parse_datetime(data.get("planStartsAt")),
        plan_expires_at=parse_datetime(data.get("planExpiresAt")),
    )


def profile_to_wire(profile: Profile) -> dict[str, Any]:
    """Convert a Profile back to its API payload."""
    return {
        "goals": list(profile.goals),
        "occupation": list(profile.occupation),
        "housing": list(profile.housing),
        "transport": list(profile.transport),
        "currency": profile.currency,
        "age": profile.age,
        "notify_daily_report": profile.notify_daily_report,
        "notify_weekly_report": profile.notify_weekly_report,
        "notify_monthly_report": profile.notify_monthly_report,
        "notify_annual_report": profile.notify_annual_report,
        "notify_new_recommendation": profile.notify_new_recommendation,
        "favorite_realtime_voice": profile.favorite_realtime_voice,
        "achievements": [
            {"id": a.id, "name": a.name, "created_at": format_datetime(a.created_at)}
            for a in profile.achievements
        ],
        "created_at": format_datetime(profile.created_at),
        "email": profile.email,
        "name": profile.name,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "picture": profile.picture,
        "timezone": profile.timezone,
        "plan": profile.plan,
        "planStartsAt": format_datetime(profile.plan_starts_at),
        "planExpiresAt": format_datetime(profile.plan_expires_at),
    }


# === Targets ===


def _target_strategy(raw: str | None) -> TargetStrategy:
    if raw is None:
        return TargetStrategy.OPEN
    try:
        return TargetStrategy(raw)
    except ValueError:
        return TargetStrategy.OPEN


def target_from_wire(data: dict[str, Any]) -> Target:
    """Create a Target from an API payload."""
    now = _now()
    start = parse_datetime(data.get("expected_start_at")) or now
    end = parse_datetime(data.get("expected_end_at")) or add_months(
        now, DEFAULT_TARGET_MONTHS
    )
    return Target(
        id=str(data["id"]),
        name=data["name"],
        expected_start_at=start,
        expected_end_at=end,
        created_at=parse_datetime(data.get("created_at")) or now,
        updated_at=parse_datetime(data.get("updated_at")) or now,
        emoji=data.get("emoji") or "🎯",
        strategy=_target_strategy(data.get("strategy")),
        currency=data.get("currency") or "USD",
        amount_saved=float(data.get("amount_saved") or 0),
        amount_target=float(data.get("amount_target") or 0),
        remind_weekly=bool(data.get("remind_weekly", False)),
        remind_monthly=data.get("remind_monthly") is not False,
        completed=bool(data.get("completed", False)),
        archived=bool(data.get("archived", False)),
    )


def target_to_wire(target: Target) -> dict[str, Any]:
    """Convert a Target back to its API payload."""
    return {
        "id": target.id,
        "name": target.name,
        "emoji": target.emoji,
        "strategy": target.strategy.value,
        "currency": target.currency,
        "amount_saved": target.amount_saved,
        "amount_target": target.amount_target,
        "expected_start_at": format_datetime(target.expected_start_at),
        "expected_end_at": format_datetime(target.expected_end_at),
        "remind_weekly": target.remind_weekly,
        "remind_monthly": target.remind_monthly,
        "completed": target.completed,
        "archived": target.archived,
        "created_at": format_datetime(target.created_at),
        "updated_at": format_datetime(target.updated_at),
    }


# === Reports ===


def _report_sums(raw: str | None) -> dict[str, ReportSum]:
    sums: dict[str, ReportSum] = {}
    for currency, values in _parse_json_map(raw).items():
        if not isinstance(values, dict):
            continue
        try:
            sums[currency] = ReportSum(
                total=float(values["total"]),
                diff=float(values["diff"]),
                transfer=float(values["transfer"]),
                purchase=float(values["purchase"]),
                atm=float(values["atm"]),
                credit=float(values["credit"]),
                debit=float(values["debit"]),
            )
        except (KeyError, TypeError, ValueError):
            # The whole sums blob is dropped when any entry is malformed
            return {}
    return sums


def _string_map(raw: str | None) -> dict[str, str]:
    return {str(k): str(v) for k, v in _parse_json_map(raw).items()}


def report_from_wire(data: dict[str, Any], is_current: bool | None = None) -> Report:
    """Create a Report from an API payload.

    The API ships the report breakdowns as JSON-encoded strings; malformed
    strings yield empty maps. ``is_current`` overrides the cached flag.
    """
    if is_current is None:
        is_current = bool(data.get("is_current", False))
    return Report(
        id=str(data["id"]),
        cards=_string_map(data.get("cards_json")),
        counts=_string_map(data.get("counts_json")),
        merchant_categories=_string_map(data.get("merchant_categories_json")),
        org_names=_string_map(data.get("org_names_json")),
        sums=_report_sums(data.get("sums_json")),
        is_current=is_current,
    )


def report_to_wire(report: Report) -> dict[str, Any]:
    """Convert a Report back to its API payload (plus the is_current flag)."""
    return {
        "id": report.id,
        "cards_json": json.dumps(dict(report.cards)),
        "counts_json": json.dumps(dict(report.counts)),
        "merchant_categories_json": json.dumps(dict(report.merchant_categories)),
        "org_names_json": json.dumps(dict(report.org_names)),
        "sums_json": json.dumps(
            {
                currency: {
                    "total": s.total,
                    "diff": s.diff,
                    "transfer": s.transfer,
                    "purchase": s.purchase,
                    "atm": s.atm,
                    "credit": s.credit,
                    "debit": s.debit,
                }
                for currency, s in report.sums.items()
            }
        ),
        "is_current": report.is_current,
    }
