"""Shared retry/backoff policy for upstream calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from gasboard.core.exceptions import RateLimitedError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with per-attempt timeout.

    Only RateLimitedError and TransportError are retried; rate-limited
    attempts back off linearly (delay * attempt), other failures wait a
    fixed delay. A timed-out attempt counts as a TransportError.
    """

    name: str = "default"
    max_attempts: int = 3
    delay_seconds: float = 0.5
    rate_limit_delay_seconds: float = 0.8
    timeout_seconds: Optional[float] = 8.0

    def delay_for(self, attempt: int, exc: Exception) -> float:
        """Seconds to wait after a failed attempt (1-based)."""
        if isinstance(exc, RateLimitedError):
            return self.rate_limit_delay_seconds * attempt
        return self.delay_seconds

    async def run(self, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Await func(*args, **kwargs) under this policy; re-raise the last error."""
        last_exc: Optional[Exception] = None
        for attempt in range(1, max(1, self.max_attempts) + 1):
            try:
                if self.timeout_seconds:
                    return await asyncio.wait_for(func(*args, **kwargs), self.timeout_seconds)
                return await func(*args, **kwargs)
            except asyncio.TimeoutError:
                last_exc = TransportError(
                    f"{self.name} timed out after {self.timeout_seconds}s"
                )
            except (RateLimitedError, TransportError) as exc:
                last_exc = exc

            if attempt < self.max_attempts:
                delay = self.delay_for(attempt, last_exc)
                logger.warning(
                    "%s attempt %d/%d failed (%s); retrying in %.2fs",
                    self.name,
                    attempt,
                    self.max_attempts,
                    last_exc,
                    delay,
                )
                await asyncio.sleep(delay)

        logger.warning("%s gave up after %d attempts: %s", self.name, self.max_attempts, last_exc)
        raise last_exc
