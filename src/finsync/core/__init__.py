"""Core module - Configuration, domain models and entity mapping."""

from finsync.core.config import ClientConfig, default_cache_dir
from finsync.core.inputs import (
    CreateTargetInput,
    CreateTransactionInput,
    UpdateProfileInput,
    UpdateTargetInput,
    UpdateTransactionInput,
)
from finsync.core.models import (
    Page,
    Profile,
    ProfileAchievement,
    Report,
    ReportSum,
    Target,
    TargetStrategy,
    Transaction,
    TransactionInput,
    TransactionListResult,
    TransactionMetadata,
    TransactionType,
)

__all__ = [
    # Config
    "ClientConfig",
    "default_cache_dir",
    # Inputs
    "CreateTargetInput",
    "CreateTransactionInput",
    "UpdateProfileInput",
    "UpdateTargetInput",
    "UpdateTransactionInput",
    # Models
    "Page",
    "Profile",
    "ProfileAchievement",
    "Report",
    "ReportSum",
    "Target",
    "TargetStrategy",
    "Transaction",
    "TransactionInput",
    "TransactionListResult",
    "TransactionMetadata",
    "TransactionType",
]
