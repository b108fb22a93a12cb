"""Exponential backoff retry for whole-pipeline re-runs and flaky HTTP calls."""

from __future__ import annotations

import asyncio
import random
from typing import TYPE_CHECKING, TypeVar

import structlog

from nichescout.metrics import retry_attempts_total, retry_exhausted_total

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

T = TypeVar("T")


class RetryExhaustedError(Exception):
    """All retry attempts failed. The last error is chained as ``__cause__``."""

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


async def async_with_retry(
    fn: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retryable: tuple[type[Exception], ...] = (Exception,),
    label: str = "",
) -> T:
    """Await *fn* with exponential backoff retries.

    Uses full jitter (delay * random(0.5, 1.5)) when *jitter* is True.
    Exceptions outside *retryable* propagate immediately.

    Raises RetryExhaustedError after *max_retries* consecutive failures.
    """
    last_exc: Exception | None = None
    fn_label = label or getattr(fn, "__name__", "fn")
    attempts = 0
    for attempt in range(max_retries + 1):
        attempts = attempt + 1
        try:
            return await fn()
        except retryable as exc:
            last_exc = exc
            if attempt == max_retries:
                break
            retry_attempts_total.labels(fn_name=fn_label).inc()
            delay = min(base_delay * (2**attempt), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())
            logger.warning(
                "Retry attempt",
                attempt=attempt + 1,
                max_retries=max_retries,
                fn=fn_label,
                delay_s=round(delay, 2),
                error=str(exc),
            )
            await asyncio.sleep(delay)
    retry_exhausted_total.labels(fn_name=fn_label).inc()
    raise RetryExhaustedError(f"Failed after {attempts} attempts", attempts) from last_exc
