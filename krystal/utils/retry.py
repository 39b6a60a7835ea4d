"""Opt-in retry with exponential backoff for idempotent API reads."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, before_sleep_log, retry_if_exception, stop_after_attempt, wait_exponential

from krystal.config import Settings
from krystal.errors import KrystalApiError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3
    base_delay: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "RetryConfig":
        return cls(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            base_delay=settings.RETRY_BASE_DELAY_SECONDS,
            backoff_multiplier=settings.RETRY_BACKOFF_MULTIPLIER,
            max_delay=settings.RETRY_MAX_DELAY_SECONDS,
        )


def is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, KrystalApiError) and exc.is_retryable


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    config: Optional[RetryConfig] = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds, fails permanently or runs out of attempts.

    The n-th wait is ``base_delay * backoff_multiplier ** (n - 1)``, capped at
    ``max_delay``. Only errors whose ``is_retryable`` is true are retried; the
    last failure is re-raised unchanged.
    """
    config = config or RetryConfig()
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, config.max_attempts)),
        wait=wait_exponential(
            multiplier=config.base_delay,
            exp_base=config.backoff_multiplier,
            max=config.max_delay,
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        sleep=sleep,
        reraise=True,
    )
    return await retrying(operation)


async def retry_simple(max_attempts: int, operation: Callable[[], Awaitable[T]], **kwargs) -> T:
    config = RetryConfig(max_attempts=max_attempts, base_delay=0.1, backoff_multiplier=1.0, max_delay=0.1)
    return await retry_with_backoff(operation, config, **kwargs)
