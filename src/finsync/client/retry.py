"""Retry classification and exponential backoff.

This module provides:
- RetryOutcome: What the executor should do after an attempt
- classify: Map an attempt's exception to a RetryOutcome
- backoff_delay: Delay before the next backoff retry
- next_step: The executor's retry decision for one failed attempt
"""

from __future__ import annotations

from enum import Enum, auto

from finsync.client.errors import APIError, UnauthorizedError

# Default retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.1  # seconds


class RetryOutcome(Enum):
    """Classification of one attempt."""

    SUCCESS = auto()
    RETRYABLE = auto()  # transient failure, back off and retry
    AUTH_FAILURE = auto()  # force a credential refresh and retry once
    TERMINAL = auto()  # surface to the caller


def classify(error: BaseException | None) -> RetryOutcome:
    """Classify the result of an attempt.

    Args:
        error: Exception raised by the attempt, or None if it succeeded.

    Returns:
        The outcome driving the retry loop.
    """
    if error is None:
        return RetryOutcome.SUCCESS
    if isinstance(error, UnauthorizedError):
        return RetryOutcome.AUTH_FAILURE
    if isinstance(error, APIError) and error.retryable:
        return RetryOutcome.RETRYABLE
    return RetryOutcome.TERMINAL


def backoff_delay(base_delay: float, attempt: int) -> float:
    """Get the delay before retrying after ``attempt`` (0-based)."""
    return base_delay * (2**attempt)


def next_step(
    outcome: RetryOutcome, attempt: int, max_retries: int
) -> RetryOutcome:
    """Decide whether a failed attempt is retried.

    An authorization failure is retried only after the very first attempt,
    and transient failures only while ``attempt < max_retries``; everything
    else becomes TERMINAL.

    Args:
        outcome: Classification of the failed attempt.
        attempt: 0-based index of the failed attempt.
        max_retries: Configured maximum of backoff retries.
    """
    if outcome is RetryOutcome.AUTH_FAILURE and attempt == 0:
        return RetryOutcome.AUTH_FAILURE
    if outcome is RetryOutcome.RETRYABLE and attempt < max_retries:
        return RetryOutcome.RETRYABLE
    return RetryOutcome.TERMINAL
