"""Tests for the error taxonomy and retry classification."""

from __future__ import annotations

import pytest

from finsync.client.errors import (
    DecodingError,
    GraphQLErrorsError,
    HTTPStatusError,
    NoDataError,
    RemoteError,
    TransportError,
    UnauthorizedError,
)
from finsync.client.retry import RetryOutcome, backoff_delay, classify, next_step


class TestRemoteError:
    """Tests for RemoteError."""

    def test_from_dict(self) -> None:
        error = RemoteError.from_dict(
            {
                "message": "Not allowed",
                "errorType": "UNAUTHORIZED",
                "path": ["profile", 0],
                "extensions": {"code": 401},
            }
        )
        assert error.message == "Not allowed"
        assert error.kind == "UNAUTHORIZED"
        assert error.path == ("profile", "0")
        assert error.extensions == {"code": "401"}
        assert error.is_unauthorized is True

    def test_minimal(self) -> None:
        error = RemoteError.from_dict({"message": "Boom"})
        assert error.kind is None
        assert error.path is None
        assert error.is_unauthorized is False

    def test_numeric_unauthorized_marker(self) -> None:
        assert RemoteError(message="x", kind="401").is_unauthorized is True


class TestErrors:
    """Tests for APIError subclasses."""

    @pytest.mark.parametrize("status", [500, 502, 503])
    def test_retryable_statuses(self, status: int) -> None:
        assert HTTPStatusError(status).retryable is True

    @pytest.mark.parametrize("status", [400, 403, 404, 504])
    def test_terminal_statuses(self, status: int) -> None:
        error = HTTPStatusError(status)
        assert error.retryable is False
        assert error.status_code == status
        assert str(error) == f"HTTP error: {status}"

    def test_messages(self) -> None:
        assert str(TransportError("timed out")) == "Network error: timed out"
        assert str(DecodingError("bad")) == "Failed to parse response: bad"
        assert str(NoDataError()) == "No data received from server"
        assert UnauthorizedError().status_code == 401

    def test_graphql_errors_message(self) -> None:
        error = GraphQLErrorsError([RemoteError("First"), RemoteError("Second")])
        assert str(error) == "First"
        assert len(error.errors) == 2


class TestClassify:
    """Tests for classify."""

    def test_success(self) -> None:
        assert classify(None) is RetryOutcome.SUCCESS

    def test_unauthorized(self) -> None:
        assert classify(UnauthorizedError()) is RetryOutcome.AUTH_FAILURE

    def test_retryable(self) -> None:
        assert classify(TransportError("reset")) is RetryOutcome.RETRYABLE
        assert classify(HTTPStatusError(503)) is RetryOutcome.RETRYABLE

    def test_terminal(self) -> None:
        assert classify(TransportError("bad url", retryable=False)) is RetryOutcome.TERMINAL
        assert classify(HTTPStatusError(400)) is RetryOutcome.TERMINAL
        assert classify(DecodingError("x")) is RetryOutcome.TERMINAL
        assert classify(NoDataError()) is RetryOutcome.TERMINAL
        assert classify(GraphQLErrorsError([RemoteError("x")])) is RetryOutcome.TERMINAL
        assert classify(RuntimeError("x")) is RetryOutcome.TERMINAL


class TestBackoff:
    """Tests for backoff_delay and next_step."""

    def test_backoff_doubles(self) -> None:
        assert [backoff_delay(0.1, a) for a in range(3)] == pytest.approx([0.1, 0.2, 0.4])

    def test_auth_failure_only_on_first_attempt(self) -> None:
        assert next_step(RetryOutcome.AUTH_FAILURE, 0, 3) is RetryOutcome.AUTH_FAILURE
        assert next_step(RetryOutcome.AUTH_FAILURE, 1, 3) is RetryOutcome.TERMINAL

    def test_retryable_until_budget_exhausted(self) -> None:
        assert next_step(RetryOutcome.RETRYABLE, 2, 3) is RetryOutcome.RETRYABLE
        assert next_step(RetryOutcome.RETRYABLE, 3, 3) is RetryOutcome.TERMINAL

    def test_no_retries_configured(self) -> None:
        assert next_step(RetryOutcome.RETRYABLE, 0, 0) is RetryOutcome.TERMINAL
