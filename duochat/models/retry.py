"""Exponential backoff for transient provider failures."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .providers.exceptions import ProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 2.0


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay: float = DEFAULT_BASE_DELAY,
    description: str = "provider call",
) -> T:
    """Run ``operation``, retrying rate-limit and overload errors.

    Attempt ``i`` (0-indexed) that fails with a retryable error waits
    ``base_delay * 2**i`` seconds before the next attempt. Any other error is
    raised immediately. When every attempt fails the last error is re-raised.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(max_attempts - 1):
        try:
            return await operation()
        except ProviderError as e:
            if not e.retryable:
                raise
            delay = base_delay * (2**attempt)
            logger.warning(
                f"{description}: {type(e).__name__} (HTTP {e.status_code}). "
                f"Retrying in {delay:.1f}s (attempt {attempt + 1}/{max_attempts})"
            )
            await asyncio.sleep(delay)

    try:
        return await operation()
    except ProviderError as e:
        if e.retryable:
            logger.error(f"{description}: giving up after {max_attempts} attempts")
        raise
