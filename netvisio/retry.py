"""Retry with exponential backoff for flaky or rate-limited remote calls."""

from __future__ import annotations

import functools
import time
from typing import Callable, Optional, TypeVar

from loguru import logger
from pydantic import BaseModel, Field

from netvisio.exceptions import RemoteCallError

T = TypeVar("T")

TRANSIENT_STATUS_CODES = frozenset({429, 503})
TRANSIENT_MARKERS = ("overloaded", "quota", "RESOURCE_EXHAUSTED")


class RetryPolicy(BaseModel):
    """Attempt budget and backoff schedule.

    The delay doubles after every failed attempt. There is no jitter and no
    ceiling unless ``max_delay`` is set.
    """

    max_attempts: int = Field(default=3, ge=1)
    initial_delay: float = Field(default=2.0, ge=0.0)  # seconds
    max_delay: Optional[float] = None

    def delays(self) -> list[float]:
        """Return the waits between consecutive attempts."""
        result: list[float] = []
        delay = self.initial_delay
        for _ in range(self.max_attempts - 1):
            result.append(delay if self.max_delay is None else min(delay, self.max_delay))
            delay *= 2
        return result


def is_transient(error: BaseException) -> bool:
    """Classify an error as transient (worth retrying) or not.

    Only ``RemoteCallError`` can be transient: HTTP 429/503, or a message
    mentioning overload, quota or ``RESOURCE_EXHAUSTED``.
    """
    if not isinstance(error, RemoteCallError):
        return False
    if error.status_code in TRANSIENT_STATUS_CODES:
        return True
    lowered = str(error).lower()
    return any(marker.lower() in lowered for marker in TRANSIENT_MARKERS)


def call_with_retry(
    operation: Callable[[], T],
    policy: RetryPolicy | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Run ``operation``, retrying transient failures per ``policy``.

    Non-transient errors propagate on the first occurrence. When the budget
    runs out, the error of the final attempt propagates unchanged.
    """
    policy = policy or RetryPolicy()
    delays = policy.delays()
    attempt = 0
    while True:
        attempt += 1
        try:
            return operation()
        except RemoteCallError as e:
            if not is_transient(e):
                raise
            if attempt >= policy.max_attempts:
                logger.error(f"Giving up after {attempt} attempt(s): {e}")
                raise
            delay = delays[attempt - 1]
            logger.warning(f"Transient error (attempt {attempt}/{policy.max_attempts}), retrying in {delay:.1f}s: {e}")
            sleep(delay)


def retryable(
    policy: RetryPolicy | None = None, sleep: Callable[[float], None] = time.sleep
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of :func:`call_with_retry`."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> T:  # type: ignore[no-untyped-def]
            return call_with_retry(lambda: func(*args, **kwargs), policy=policy, sleep=sleep)

        return wrapper

    return decorator
