"""Typed client for the finance GraphQL API.

This module provides:
- FinanceAPI: One method per remote operation, returning domain entities

Each method hands the transport executor a decoder that extracts the
operation's field from the envelope and maps it to domain entities, so a
shape mismatch surfaces as a terminal DecodingError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from finsync.client import queries
from finsync.core.mapping import (
    profile_from_wire,
    report_from_wire,
    target_from_wire,
    transaction_from_wire,
)
from finsync.core.models import Page, Profile, Report, Target, Transaction

if TYPE_CHECKING:
    from finsync.client.transport import GraphQLClient
    from finsync.core.inputs import (
        CreateTargetInput,
        CreateTransactionInput,
        UpdateProfileInput,
        UpdateTargetInput,
        UpdateTransactionInput,
    )

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


def _transaction_page(data: dict[str, Any]) -> Page[Transaction]:
    payload = data["listTransactions"]
    return Page(
        items=[transaction_from_wire(item) for item in payload["list"]],
        cursor=payload.get("nextToken"),
    )


class FinanceAPI:
    """Remote operations of the finance service."""

    def __init__(self, executor: GraphQLClient) -> None:
        """Initialize the API.

        Args:
            executor: Transport executor used for every call.
        """
        self._executor = executor

    # === Profile operations ===

    async def get_profile(self) -> Profile:
        """Get the authenticated user's profile."""
        return await self._executor.execute(
            queries.GET_PROFILE,
            variables={},
            operation_name="profile",
            decode=lambda data: profile_from_wire(data["profile"]),
        )

    async def update_profile(self, input: UpdateProfileInput) -> Profile:
        """Update the profile and return the server's version of it."""
        return await self._executor.execute(
            queries.UPDATE_PROFILE,
            variables={"input": input.to_wire()},
            operation_name="updateProfile",
            decode=lambda data: profile_from_wire(data["updateProfile"]),
        )

    # === Transaction operations ===

    async def list_transactions(
        self,
        next_token: str | None = None,
        per_page: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Transaction]:
        """Get one page of transactions, newest first.

        Args:
            next_token: Cursor returned by the previous page (None for first).
            per_page: Page size.

        Returns:
            The page; its cursor is None on the last page.
        """
        return await self._executor.execute(
            queries.LIST_TRANSACTIONS,
            variables={"nextToken": next_token, "perPage": per_page},
            operation_name="listTransactions",
            decode=_transaction_page,
        )

    async def create_transaction(self, input: CreateTransactionInput) -> Transaction:
        """Create a manual transaction; the server assigns its id."""
        return await self._executor.execute(
            queries.CREATE_TRANSACTION,
            variables={"input": input.to_wire()},
            operation_name="createTransaction",
            decode=lambda data: transaction_from_wire(data["createTransaction"]),
        )

    async def update_transaction(
        self, id: str, input: UpdateTransactionInput
    ) -> Transaction:
        """Edit a transaction."""
        return await self._executor.execute(
            queries.UPDATE_TRANSACTION,
            variables={"id": id, "input": input.to_wire()},
            operation_name="updateTransaction",
            decode=lambda data: transaction_from_wire(data["updateTransaction"]),
        )

    async def delete_transaction(self, id: str) -> bool:
        """Delete a transaction.

        Returns:
            True if the server reports the deletion succeeded.
        """
        return await self._executor.execute(
            queries.DELETE_TRANSACTION,
            variables={"id": id},
            operation_name="deleteTransaction",
            decode=lambda data: bool(data["deleteTransaction"]["success"]),
        )

    # === Target operations ===

    async def list_targets(self) -> list[Target]:
        """List all savings targets."""
        return await self._executor.execute(
            queries.LIST_TARGETS,
            variables={},
            operation_name="listTargets",
            decode=lambda data: [target_from_wire(t) for t in data["listTargets"]],
        )

    async def create_target(self, input: CreateTargetInput) -> Target:
        return await self._executor.execute(
            queries.CREATE_TARGET,
            variables={"input": input.to_wire()},
            operation_name="createTarget",
            decode=lambda data: target_from_wire(data["createTarget"]),
        )

    async def update_target(self, id: str, input: UpdateTargetInput) -> Target:
        return await self._executor.execute(
            queries.UPDATE_TARGET,
            variables={"id": id, "input": input.to_wire()},
            operation_name="updateTarget",
            decode=lambda data: target_from_wire(data["updateTarget"]),
        )

    # === Report operations ===

    async def list_reports(
        self, ids: list[str], is_current: bool = False
    ) -> list[Report]:
        """Get reports by period id.

        Args:
            ids: Period identifiers (e.g., "2025-01").
            is_current: Mark the returned reports as the ongoing period.
        """
        return await self._executor.execute(
            queries.LIST_REPORTS,
            variables={"ids": list(ids)},
            operation_name="listReports",
            decode=lambda data: [
                report_from_wire(r, is_current=is_current) for r in data["listReports"]
            ],
        )
