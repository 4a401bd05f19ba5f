"""GraphQL transport executor.

This module provides:
- GraphQLClient: Executes one GraphQL operation with credential injection,
  a single forced-refresh retry on authorization failures and exponential
  backoff for transient failures
- mask_token: Hide most of a credential before logging it

Architecture:
    execute() ─► _perform() ─► TokenProvider.get_token()
        ▲            │
        │            └─► httpx POST ─► envelope ─► decode()
        │
        └── retry loop: classify() ─► next_step() ─► sleep/refresh/raise

The executor never caches anything; all retries of the remote-data layer
happen here.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import httpx

from finsync.client.errors import (
    APIError,
    DecodingError,
    GraphQLErrorsError,
    HTTPStatusError,
    NoDataError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from finsync.client.retry import RetryOutcome, backoff_delay, classify, next_step

if TYPE_CHECKING:
    from finsync.client.credentials import TokenProvider
    from finsync.core.config import ClientConfig

logger = logging.getLogger(__name__)

# Failures where the request may not have reached the server or the
# connection dropped mid-flight.
RETRYABLE_TRANSPORT_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


def mask_token(token: str) -> str:
    """Hide most of a credential for logging."""
    if len(token) <= 12:
        return "***"
    return f"{token[:6]}...{token[-4:]}"


def _parse_errors(raw: Any) -> list[RemoteError]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise DecodingError("'errors' is not a list")
    try:
        return [RemoteError.from_dict(entry) for entry in raw]
    except (KeyError, TypeError, AttributeError) as e:
        raise DecodingError(f"malformed error entry: {e}") from e


class GraphQLClient:
    """Executes GraphQL operations against one endpoint."""

    def __init__(
        self,
        config: ClientConfig,
        token_provider: TokenProvider,
        http_client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """Initialize the executor.

        Args:
            config: Endpoint, timeout and retry settings.
            token_provider: Source of the Authorization credential.
            http_client: Optional pre-built httpx client (owned by the caller).
            sleep: Coroutine used for backoff delays.
        """
        self._config = config
        self._token_provider = token_provider
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=config.timeout,
            verify=config.verify_ssl,
        )
        self._sleep = sleep

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> GraphQLClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
        decode: Callable[[Any], Any] | None = None,
    ) -> Any:
        """Execute an operation, retrying per the retry policy.

        Args:
            query: GraphQL document.
            variables: Operation variables.
            operation_name: Operation name (also used in log lines).
            decode: Converts the envelope's ``data`` into the result. Shape
                errors (KeyError, TypeError, ValueError) become DecodingError.

        Returns:
            ``decode(data)``, or ``data`` itself when no decoder is given.

        Raises:
            APIError: The terminal failure once retries are exhausted.
        """
        op = operation_name or "unknown"
        max_retries = self._config.max_retries
        attempt = 0
        force_refresh = False

        while True:
            try:
                result = await self._perform(
                    query, variables, operation_name, force_refresh, decode
                )
            except APIError as e:
                step = next_step(classify(e), attempt, max_retries)
                if step is RetryOutcome.AUTH_FAILURE:
                    logger.warning(
                        f"[{op}] Unauthorized, refreshing credential and retrying once"
                    )
                    force_refresh = True
                elif step is RetryOutcome.RETRYABLE:
                    delay = backoff_delay(self._config.base_delay, attempt)
                    logger.warning(
                        f"[{op}] Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                        f"Retrying in {delay:.1f}s..."
                    )
                    await self._sleep(delay)
                    force_refresh = False
                else:
                    logger.error(f"[{op}] Request failed: {e}")
                    raise
                attempt += 1
                continue

            logger.info(f"[{op}] Request completed successfully")
            return result

    def _authorization(self, token: str) -> str:
        if self._config.auth_scheme:
            return f"{self._config.auth_scheme} {token}"
        return token

    async def _perform(
        self,
        query: str,
        variables: dict[str, Any] | None,
        operation_name: str | None,
        force_refresh: bool,
        decode: Callable[[Any], Any] | None,
    ) -> Any:
        """Perform one attempt: authenticate, send, decode."""
        op = operation_name or "unknown"
        token = await self._token_provider.get_token(force_refresh=force_refresh)

        body: dict[str, Any] = {"query": query}
        if variables is not None:
            body["variables"] = variables
        if operation_name is not None:
            body["operationName"] = operation_name

        logger.debug(
            f"[{op}] POST {self._config.api_url} "
            f"(Authorization: {mask_token(token)}) variables={json.dumps(variables)}"
        )

        try:
            response = await self._client.post(
                self._config.api_url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": self._authorization(token),
                },
            )
        except RETRYABLE_TRANSPORT_EXCEPTIONS as e:
            raise TransportError(str(e) or type(e).__name__) from e
        except httpx.HTTPError as e:
            raise TransportError(str(e) or type(e).__name__, retryable=False) from e

        logger.debug(f"[{op}] Status Code: {response.status_code}")

        if response.status_code == 401:
            raise UnauthorizedError()
        if not 200 <= response.status_code < 300:
            raise HTTPStatusError(response.status_code)

        try:
            envelope = response.json()
        except ValueError as e:
            raise DecodingError(str(e)) from e
        if not isinstance(envelope, dict):
            raise DecodingError("response is not a JSON object")

        errors = _parse_errors(envelope.get("errors"))
        if errors:
            messages = ", ".join(err.message for err in errors)
            logger.debug(f"[{op}] GraphQL errors: {messages}")
            if any(err.is_unauthorized for err in errors):
                raise UnauthorizedError()
            raise GraphQLErrorsError(errors)

        data = envelope.get("data")
        if data is None:
            raise NoDataError()
        if decode is None:
            return data
        try:
            return decode(data)
        except (KeyError, TypeError, ValueError) as e:
            raise DecodingError(f"{type(e).__name__}: {e}") from e
