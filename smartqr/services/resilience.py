from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from smartqr.core.config import get_settings
from smartqr.services.telemetry import increment_counter


logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    timeout_ms: int
    max_attempts: int
    backoff_ms: int

    def backoff_s(self, attempt: int) -> float:
        # Exponential from backoff_ms, jittered so parallel scans spread out.
        return (self.backoff_ms / 1000.0) * (2 ** (attempt - 1)) * random.uniform(0.5, 1.5)


def default_retry_policy() -> RetryPolicy:
    settings = get_settings()
    return RetryPolicy(
        timeout_ms=settings.object_store_timeout_ms,
        max_attempts=settings.ext_retry_max_attempts,
        backoff_ms=settings.ext_retry_backoff_ms,
    )


def is_transient(exc: Exception) -> bool:
    if isinstance(exc, (TimeoutError, OSError)):
        return True
    status = getattr(exc, "status_code", None)
    return isinstance(status, int) and status >= 500


async def retry_async(
    func: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy | None = None,
    retryable: Callable[[Exception], bool] = is_transient,
) -> T:
    """Run ``func`` with a per-attempt timeout, retrying only ``retryable`` failures."""
    policy = policy or default_retry_policy()
    attempts = max(policy.max_attempts, 1)
    for attempt in range(1, attempts + 1):
        try:
            return await asyncio.wait_for(func(), timeout=policy.timeout_ms / 1000.0)
        except Exception as exc:  # noqa: BLE001 - non-transient failures are re-raised
            if attempt == attempts or not retryable(exc):
                raise
            increment_counter("external_retries_total")
            logger.info("external_call_retry attempt=%s error=%s", attempt, type(exc).__name__)
            await asyncio.sleep(policy.backoff_s(attempt))
    raise AssertionError("unreachable")
