"""Entity sync-and-cache engines.

Architecture:
    collaborator ─► *Sync ─► RequestDeduplicator ─► FinanceAPI ─► GraphQLClient
                      │
                      └─► CacheStore (memory or JSON file)

Components:
- **ProfileSync**: Cache-first profile, replaced on update
- **TransactionSync**: Pagination, incremental refresh, full load
- **TargetSync**: Active savings targets, archived ones dropped
- **ReportSync**: Reports keyed by period, upserted on fetch
- **AppResetService**: Clears every engine on sign-out
"""

from finsync.client.sync.base import BaseSync
from finsync.client.sync.profile import ProfileSync
from finsync.client.sync.reports import ReportSync, current_period_id
from finsync.client.sync.reset import AppResetService, StateResetting
from finsync.client.sync.targets import TargetSync
from finsync.client.sync.transactions import TransactionSync

__all__ = [
    "AppResetService",
    "BaseSync",
    "ProfileSync",
    "ReportSync",
    "StateResetting",
    "TargetSync",
    "TransactionSync",
    "current_period_id",
]
