"""
Retry Engine

Bounded retry executor with exponential backoff and jitter, shared by every
outbound call of the analysis service (weather archive, delay classifier).

Built on tenacity's AsyncRetrying; this module only supplies the delay
schedule, the retryability predicate wiring, and a distinguished
RetryExhaustedError so callers can tell "gave up" apart from "not retryable".

Usage:
    from core.retry import RetryPolicy, retry_with_backoff

    policy = RetryPolicy(max_retries=3, base_delay=1000, max_delay=10000, jitter_factor=0.1)
    data = await retry_with_backoff(lambda: fetch(), policy, is_network_error)
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception, stop_after_attempt
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NETWORK_ERROR_MARKERS = (
    "timeout",
    "timed out",
    "econnrefused",
    "connection refused",
    "enotfound",
    "name or service not known",
    "network",
)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry schedule. Delays are in milliseconds."""
    max_retries: int = 3
    base_delay: float = 1000
    max_delay: float = 10000
    jitter_factor: float = 0.1

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("base_delay and max_delay must be >= 0")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError(f"jitter_factor must be within [0, 1], got {self.jitter_factor}")


class RetryExhaustedError(Exception):
    """Raised when every attempt failed with a retryable error"""

    def __init__(self, message: str, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


def compute_delay(
    attempt: int,
    policy: RetryPolicy,
    rand: Callable[[], float] = random.random,
) -> float:
    """
    Delay in milliseconds before the retry that follows attempt ``attempt`` (0-indexed).

    min(base * 2^attempt, max), perturbed uniformly by +/- jitter_factor of the
    capped value, floored at 0.
    """
    capped = min(policy.base_delay * (2 ** attempt), policy.max_delay)
    jitter_range = capped * policy.jitter_factor
    jitter = (rand() - 0.5) * 2 * jitter_range
    return max(0.0, capped + jitter)


class wait_backoff_with_jitter(wait_base):
    """tenacity wait strategy backed by compute_delay (returns seconds)"""

    def __init__(self, policy: RetryPolicy, rand: Callable[[], float] = random.random):
        self.policy = policy
        self.rand = rand

    def __call__(self, retry_state: RetryCallState) -> float:
        return compute_delay(retry_state.attempt_number - 1, self.policy, self.rand) / 1000.0


def _log_before_sleep(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0
    logger.warning(
        f"Attempt {retry_state.attempt_number} failed ({error}); retrying in {delay * 1000:.0f}ms"
    )


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    is_retryable: Callable[[BaseException], bool],
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    rand: Callable[[], float] = random.random,
) -> T:
    """
    Run ``operation`` up to ``policy.max_retries + 1`` times.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry schedule
        is_retryable: Predicate on the raised error; False re-raises immediately
        sleep: Awaitable sleep in seconds (injectable for tests)
        rand: Uniform [0, 1) source for jitter

    Returns:
        The first successful result

    Raises:
        RetryExhaustedError: All attempts failed with retryable errors
        Exception: The original error when ``is_retryable`` rejects it
    """
    # operation may be a plain callable returning an awaitable (e.g. a lambda)
    async def _attempt() -> T:
        return await operation()

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_retries + 1),
        wait=wait_backoff_with_jitter(policy, rand),
        retry=retry_if_exception(is_retryable),
        before_sleep=_log_before_sleep,
        sleep=sleep,
    )
    try:
        return await retrying(_attempt)
    except RetryError as e:
        attempts = e.last_attempt.attempt_number
        last_error = e.last_attempt.exception()
        raise RetryExhaustedError(
            f"Operation failed after {attempts} attempts",
            attempts=attempts,
            last_error=last_error,
        ) from last_error


def is_network_error(error: BaseException) -> bool:
    """Transport-level failures: timeouts, refused connections, DNS errors"""
    if isinstance(error, (httpx.TransportError, ConnectionError, asyncio.TimeoutError)):
        return True
    message = str(error).lower()
    return any(marker in message for marker in _NETWORK_ERROR_MARKERS)


def is_http_retryable(status_code: Optional[int]) -> bool:
    """429 and 5xx are retryable; everything else (including no status) is not"""
    if not status_code:
        return False
    return status_code == 429 or 500 <= status_code < 600


__all__ = [
    "RetryPolicy",
    "RetryExhaustedError",
    "compute_delay",
    "retry_with_backoff",
    "is_network_error",
    "is_http_retryable",
]
