"""
Notes Service Client — Retry With Exponential Backoff
=====================================================

What:  `call_with_resilience(send, policy)` runs one logical API call,
       re-dispatching it while the failure is transient.
How:   tenacity's AsyncRetrying drives the loop:
           stop  = stop_after_attempt(1 + max_retries)
           wait  = wait_exponential(multiplier=base_delay)  → 1s, 2s, 4s
           retry = retry_if_exception(policy.retryable)
       Every scheduled backoff is recorded so callers can see exactly how many
       retries happened and how long each one waited.

Per-call state machine:

    Pending ──success──▶ Success
       │
       ├─retryable failure, attempts left──▶ RetryScheduled ──sleep──▶ Pending
       │
       └─non-retryable, or attempts exhausted──▶ Failed (original exception re-raised)

Retries are serialized: attempt N+1 is only dispatched after attempt N has
failed and its backoff has elapsed. Attempt counters never leak between calls.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, List, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(exc: BaseException) -> bool:
    """
    Transient failures worth another attempt.

    - no response received (connection refused, reset, DNS...)
    - the request timed out (httpx.TimeoutException is a TransportError)
    - the server answered 5xx

    4xx responses, including 422 validation failures, are final.
    """
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return 500 <= exc.response.status_code < 600
    return False


@dataclass(frozen=True)
class RetryPolicy:
    """How a single call is retried."""

    max_retries: int = 3
    base_delay: float = 1.0
    retryable: Callable[[BaseException], bool] = is_retryable
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries


@dataclass
class CallResult(Generic[T]):
    """Outcome of a successful resilient call."""

    value: T
    attempts: int = 1
    delays: List[float] = field(default_factory=list)

    @property
    def retries(self) -> int:
        return self.attempts - 1


async def call_with_resilience(
    send: Callable[[], Awaitable[T]],
    policy: RetryPolicy = RetryPolicy(),
) -> CallResult[T]:
    """
    Run `send` until it succeeds, fails permanently, or runs out of attempts.

    Args:
        send:   Zero-argument coroutine factory performing one attempt. It is
                called again, unchanged, for every retry.
        policy: Attempt cap, base delay, retryable predicate and sleep function.

    Returns:
        CallResult with the value, attempt count and backoff delays.

    Raises:
        The exception of the last attempt, unchanged.
    """
    delays: List[float] = []
    log_retry = before_sleep_log(logger, logging.WARNING)

    def before_sleep(retry_state: RetryCallState) -> None:
        delays.append(retry_state.next_action.sleep)
        log_retry(retry_state)

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(multiplier=policy.base_delay, min=0),
        retry=retry_if_exception(policy.retryable),
        before_sleep=before_sleep,
        sleep=policy.sleep,
        reraise=True,
    )

    attempts = 0
    async for attempt in retrying:
        with attempt:
            attempts = attempt.retry_state.attempt_number
            value = await send()
    return CallResult(value=value, attempts=attempts, delays=delays)
