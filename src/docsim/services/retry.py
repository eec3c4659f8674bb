"""
Retry with exponential backoff for embedding model calls.

Only the failure types listed in ``retry_on`` are retried; anything else
propagates on the first attempt. When every retry is used up the last
failure is surfaced as EmbeddingUnavailable.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel

from docsim.constants import DEFAULT_BACKOFF_BASE, DEFAULT_MAX_DELAY, DEFAULT_MAX_RETRIES
from docsim.errors import EmbeddingUnavailable, TransientEmbeddingError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryConfig(BaseModel):
    """Retry behaviour for failed model calls."""

    max_retries: int = DEFAULT_MAX_RETRIES  # retries after the first attempt
    backoff_base: float = DEFAULT_BACKOFF_BASE
    max_delay: float = DEFAULT_MAX_DELAY  # seconds


class RetryPolicy:
    """Runs an async operation, retrying transient failures with backoff.

    The delay before retry ``n`` (1-based) is ``backoff(n)``; by default
    ``backoff_base ** n`` capped at ``max_delay``, i.e. 2s, 4s, 8s.
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        *,
        backoff: Callable[[int], float] | None = None,
        retry_on: tuple[type[Exception], ...] = (TransientEmbeddingError,),
    ) -> None:
        self.config = config or RetryConfig()
        self._backoff = backoff
        self.retry_on = retry_on

    def delay(self, retry: int) -> float:
        """Seconds to wait before the given 1-based retry."""
        if self._backoff is not None:
            return self._backoff(retry)
        return min(self.config.backoff_base**retry, self.config.max_delay)

    async def run(
        self, operation: Callable[[], Awaitable[T]], *, description: str = "call"
    ) -> T:
        """Await ``operation()`` until it succeeds or retries run out."""
        max_retries = self.config.max_retries
        last_error: Exception | None = None

        for attempt in range(max_retries + 1):
            try:
                return await operation()
            except self.retry_on as e:
                last_error = e
                if attempt == max_retries:
                    break
                delay = self.delay(attempt + 1)
                logger.warning(
                    "Transient failure [%s] attempt=%d/%d, retrying in %.1fs: %s",
                    description,
                    attempt + 1,
                    max_retries + 1,
                    delay,
                    e,
                )
                await asyncio.sleep(delay)

        logger.error(
            "All retries exhausted [%s] after %d attempts: %s",
            description,
            max_retries + 1,
            last_error,
        )
        raise EmbeddingUnavailable(max_retries + 1, str(last_error)) from last_error
