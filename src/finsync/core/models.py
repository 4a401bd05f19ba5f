"""Domain models for the finance sync layer.

This module provides:
- Transaction, TransactionInput, TransactionMetadata, TransactionType
- Profile, ProfileAchievement
- Target, TargetStrategy
- Report, ReportSum
- Page, TransactionListResult: pagination containers
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Generic, TypeVar

T = TypeVar("T")

DEFAULT_PLAN = "DIBBA_AI_FREE"


class TransactionType(Enum):
    """Classification of a transaction."""

    POS_PURCHASE = "pos_purchase"
    ATM = "atm"
    TRANSFER = "transfer"
    BILL_PAYMENT = "bill_payment"
    SUBSCRIPTION_PAYMENT = "subscription_payment"
    LOAN_PAYMENT = "loan_payment"
    UNKNOWN = "unknown"


class TargetStrategy(Enum):
    """How a savings target is funded."""

    FIXED_AMOUNT_WEEKLY = "FIXED_AMOUNT_WEEKLY"
    FIXED_AMOUNT_MONTHLY = "FIXED_AMOUNT_MONTHLY"
    FIXED_INCOME_PERCENT = "FIXED_INCOME_PERCENT"
    OPEN = "OPEN"  # manual contributions


@dataclass(frozen=True)
class TransactionInput:
    """Raw input a transaction was created from."""

    text: str | None = None
    from_: str | None = None
    location: str | None = None


@dataclass(frozen=True)
class TransactionMetadata:
    """Where a transaction came from."""

    type: str = "unknown"
    user_agent: str | None = None
    ip_address: str | None = None


@dataclass(frozen=True)
class Transaction:
    """A single financial transaction.

    Transactions are immutable and keyed by ``id``, which is unique and
    stable across refetches.
    """

    id: str
    name: str
    amount: float
    currency: str
    created_at: datetime
    account_number: str = ""
    card_number: str = ""
    merchant_category: str = ""
    success: bool = True
    is_credit: bool = False
    is_debit: bool = False
    is_atm: bool = False
    is_purchase: bool = False
    is_transfer: bool = False
    full_date: str = ""
    org_type: str = ""
    org_name: str = ""
    transaction_type: TransactionType = TransactionType.UNKNOWN
    error_message: str | None = None
    input: TransactionInput | None = None
    metadata: TransactionMetadata | None = None

    @property
    def computed_type(self) -> TransactionType:
        """Type derived from classification flags, falling back to the server type."""
        if self.is_purchase:
            return TransactionType.POS_PURCHASE
        if self.is_transfer:
            return TransactionType.TRANSFER
        if self.is_atm:
            return TransactionType.ATM
        return self.transaction_type

    @property
    def is_income(self) -> bool:
        return self.is_credit or self.amount > 0

    @property
    def is_expense(self) -> bool:
        return self.is_debit or self.amount < 0


@dataclass(frozen=True)
class ProfileAchievement:
    id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class Profile:
    """The authenticated user's profile.

    Collections are stored as tuples so cached profiles cannot be edited in place.
    """

    created_at: datetime
    goals: tuple[str, ...] = ()
    occupation: tuple[str, ...] = ()
    housing: tuple[str, ...] = ()
    transport: tuple[str, ...] = ()
    currency: str | None = None
    age: str | None = None
    achievements: tuple[ProfileAchievement, ...] = ()
    notify_daily_report: bool = False
    notify_weekly_report: bool = True
    notify_monthly_report: bool = True
    notify_annual_report: bool = True
    notify_new_recommendation: bool = True
    favorite_realtime_voice: str | None = None
    name: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    picture: str | None = None
    timezone: str | None = None
    plan: str = DEFAULT_PLAN
    plan_starts_at: datetime | None = None
    plan_expires_at: datetime | None = None

    def __post_init__(self) -> None:
        for name in ("goals", "occupation", "housing", "transport", "achievements"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

    @property
    def display_name(self) -> str:
        """Best human-readable name for the user."""
        full = f"{self.first_name} {self.last_name}".strip()
        return full or self.name or self.email

    @property
    def is_premium(self) -> bool:
        """Plans are dynamic strings; any PREMIUM or PRO plan counts."""
        return "PREMIUM" in self.plan or "PRO" in self.plan


@dataclass(frozen=True)
class Target:
    """A savings goal."""

    id: str
    name: str
    expected_start_at: datetime
    expected_end_at: datetime
    created_at: datetime
    updated_at: datetime
    emoji: str = "🎯"
    strategy: TargetStrategy = TargetStrategy.OPEN
    currency: str = "USD"
    amount_saved: float = 0.0
    amount_target: float = 0.0
    remind_weekly: bool = False
    remind_monthly: bool = True
    completed: bool = False
    archived: bool = False

    @property
    def progress(self) -> float:
        """Progress between 0 and 1."""
        if self.amount_target <= 0:
            return 0.0
        return min(self.amount_saved / self.amount_target, 1.0)

    @property
    def progress_percent(self) -> int:
        return int(self.progress * 100)

    @property
    def amount_remaining(self) -> float:
        return max(self.amount_target - self.amount_saved, 0.0)

    @property
    def is_active(self) -> bool:
        return not self.completed and not self.archived


@dataclass(frozen=True)
class ReportSum:
    """Per-currency totals of a report."""

    total: float = 0.0
    diff: float = 0.0
    transfer: float = 0.0
    purchase: float = 0.0
    atm: float = 0.0
    credit: float = 0.0
    debit: float = 0.0


@dataclass(frozen=True)
class Report:
    """Spend report for one period (id is the period, e.g. "2025-01").

    Closed periods never change; the current period is refetched on demand.
    """

    id: str
    cards: Mapping[str, str] = field(default_factory=dict)
    counts: Mapping[str, str] = field(default_factory=dict)
    merchant_categories: Mapping[str, str] = field(default_factory=dict)
    org_names: Mapping[str, str] = field(default_factory=dict)
    sums: Mapping[str, ReportSum] = field(default_factory=dict)
    is_current: bool = False

    def __post_init__(self) -> None:
        # Read-only views over private copies
        for name in ("cards", "counts", "merchant_categories", "org_names", "sums"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def sum_for(self, currency: str) -> ReportSum | None:
        return self.sums.get(currency)

    @property
    def total_amount(self) -> float:
        """Total across currencies (only meaningful with a single currency)."""
        return sum(s.total for s in self.sums.values())


@dataclass
class Page(Generic[T]):
    """One page of a cursor-paginated collection.

    ``cursor`` is None when no further pages exist.
    """

    items: list[T]
    cursor: str | None = None


@dataclass
class TransactionListResult:
    """Result returned to collaborators by transaction sync operations."""

    transactions: list[Transaction]
    next_token: str | None = None
