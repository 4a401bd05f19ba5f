"""Error taxonomy of the remote-data layer.

This module provides:
- APIError: Base exception, carries whether the failure is retryable
- TransportError: Connectivity loss, resets and timeouts
- HTTPStatusError: Non-2xx status (retryable for 500/502/503 only)
- UnauthorizedError: Missing or expired credential
- GraphQLErrorsError: Application errors reported in the envelope
- DecodingError: Malformed response body
- NoDataError: Successful status but empty payload
- RemoteError: One error entry of a GraphQL envelope
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

RETRYABLE_STATUS_CODES = frozenset({500, 502, 503})
UNAUTHORIZED_KINDS = frozenset({"401", "UNAUTHORIZED"})


@dataclass(frozen=True)
class RemoteError:
    """An error entry of a GraphQL response envelope.

    ``kind`` is sent as ``errorType`` on the wire.
    """

    message: str
    kind: str | None = None
    path: tuple[str, ...] | None = None
    extensions: dict[str, str] = field(default_factory=dict)

    @property
    def is_unauthorized(self) -> bool:
        return self.kind in UNAUTHORIZED_KINDS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteError:
        """Create from an envelope error entry.

        Raises:
            KeyError: If the entry has no message.
        """
        path = data.get("path")
        extensions = data.get("extensions") or {}
        return cls(
            message=str(data["message"]),
            kind=data.get("errorType"),
            path=tuple(str(p) for p in path) if path is not None else None,
            extensions={str(k): str(v) for k, v in extensions.items()},
        )


class APIError(Exception):
    """Base exception for remote-data errors."""

    retryable = False

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransportError(APIError):
    """The request never produced a response (connection lost, timeout)."""

    def __init__(self, message: str, retryable: bool = True) -> None:
        super().__init__(f"Network error: {message}")
        self.retryable = retryable


class HTTPStatusError(APIError):
    """The server answered with a non-success status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP error: {status_code}", status_code)
        self.retryable = status_code in RETRYABLE_STATUS_CODES


class UnauthorizedError(APIError):
    """The credential was rejected or could not be produced."""

    def __init__(self, message: str = "Unauthorized. Please sign in again.") -> None:
        super().__init__(message, 401)


class GraphQLErrorsError(APIError):
    """Business errors reported by the server in the response envelope."""

    def __init__(self, errors: list[RemoteError]) -> None:
        message = errors[0].message if errors else "GraphQL error"
        super().__init__(message)
        self.errors = errors


class DecodingError(APIError):
    """The response body did not have the expected shape."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to parse response: {message}")


class NoDataError(APIError):
    """The server answered successfully but without a payload."""

    def __init__(self) -> None:
        super().__init__("No data received from server")
