"""
HTTP calls with bounded retries and exponential backoff.

Only the statuses listed in the policy are retried. Any other response,
successful or not, is handed back to the caller on the first attempt.
Backoff has no jitter, so concurrent relayers hitting the same rate limit
retry in lockstep.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, FrozenSet, Optional

import httpx

from oracle_relayer.utils.logger import logger

SleepFunc = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration for a single HTTP call."""
    # Retries after the first attempt
    retries: int = 0
    # Response statuses that trigger a retry
    retry_on_statuses: FrozenSet[int] = field(default_factory=lambda: frozenset({429, 500}))
    # Base delay in milliseconds, doubled on every attempt
    backoff_ms: int = 500
    # Upper bound for a single delay
    max_backoff_ms: int = 4000

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError("retries must be non-negative")
        if self.backoff_ms <= 0:
            raise ValueError("backoff_ms must be positive")
        if self.max_backoff_ms < self.backoff_ms:
            raise ValueError("max_backoff_ms must be >= backoff_ms")
        object.__setattr__(self, "retry_on_statuses", frozenset(self.retry_on_statuses))

    def delay_ms(self, attempt: int) -> int:
        """Delay before the retry that follows ``attempt`` (0-based)."""
        return min(self.backoff_ms * (2 ** attempt), self.max_backoff_ms)

    def should_retry_status(self, status_code: int) -> bool:
        return status_code in self.retry_on_statuses


DEFAULT_RETRY_POLICY = RetryPolicy()

# Policy used for every governance GraphQL query
GRAPHQL_RETRY_POLICY = RetryPolicy(
    retries=2,
    retry_on_statuses=frozenset({429, 500}),
    backoff_ms=500,
    max_backoff_ms=4000,
)


async def fetch_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: SleepFunc = asyncio.sleep,
    **request_kwargs: Any,
) -> httpx.Response:
    """
    Issue an HTTP request, retrying transient failures.

    Args:
        client: HTTP client used for every attempt
        method: HTTP method
        url: Target URL
        policy: Retry policy (default: no retries, 429/500, 500ms base, 4000ms cap)
        sleep: Awaitable sleep taking seconds, injectable for tests
        **request_kwargs: Passed through to ``client.request``

    Returns:
        The first response that is not retryable, or the last response once
        the retry budget is spent.

    Raises:
        httpx.RequestError: The original network error when the last attempt fails
    """
    policy = policy or DEFAULT_RETRY_POLICY
    attempt = 0
    while True:
        try:
            response = await client.request(method, url, **request_kwargs)
            if (
                response.is_success
                or attempt >= policy.retries
                or not policy.should_retry_status(response.status_code)
            ):
                return response
            reason = f"status {response.status_code}"
        except httpx.RequestError as e:
            if attempt >= policy.retries:
                logger.error(f"[RetryClient] {method} {url} failed after {attempt + 1} attempts: {e}")
                raise
            reason = f"{type(e).__name__}: {e}"

        delay = policy.delay_ms(attempt)
        logger.warning(
            f"[RetryClient] {method} {url} attempt {attempt + 1}/{policy.retries + 1} "
            f"failed ({reason}), retrying in {delay}ms"
        )
        await sleep(delay / 1000)
        attempt += 1
