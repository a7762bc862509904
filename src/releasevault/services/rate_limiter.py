"""Per-provider request throttling.

Catalog lookups are throttled with a token bucket; ``RateLimiterRegistry``
makes sure every lookup against one provider draws from the same bucket.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time

from releasevault.shared.errors import ApplicationError, ErrorCode, ErrorContext
from releasevault.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 10
DEFAULT_REFILL_RATE = 4.0


class TokenBucketRateLimiter:
    """Token bucket shared by threads and asyncio tasks.

    The bucket holds up to ``capacity`` tokens and regains ``refill_rate``
    tokens per second. Each provider request consumes one token; callers
    that find the bucket empty wait (``acquire`` / ``acquire_async``) or
    back off (``try_acquire``).

    The bucket starts full. Both arguments must be positive.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        refill_rate: float = DEFAULT_REFILL_RATE,
    ):
        context = ErrorContext(
            operation="rate_limiter_init",
            additional_data={"capacity": capacity, "refill_rate": refill_rate},
        )

        if capacity <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Rate limiter capacity must be > 0 (got {capacity})",
                context=context,
            )

        if refill_rate <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Rate limiter refill rate must be > 0 (got {refill_rate})",
                context=context,
            )

        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()
        self._lock = threading.Lock()

        log_operation_success(
            logger=logger,
            operation="rate_limiter_init",
            duration_ms=0,
            context=context.additional_data,
        )

    def _refill(self) -> None:
        """Refill tokens based on elapsed time. Caller holds the lock."""
        now = time.monotonic()
        gained = (now - self.last_refill) * self.refill_rate
        if gained > 0:
            self.tokens = min(self.capacity, self.tokens + gained)
            self.last_refill = now

    def _validate_request(self, tokens: int) -> None:
        context = ErrorContext(
            operation="rate_limiter_acquire",
            additional_data={"requested_tokens": tokens, "capacity": self.capacity},
        )
        if tokens <= 0:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Cannot acquire {tokens} tokens",
                context=context,
            )
        if tokens > self.capacity:
            raise ApplicationError(
                code=ErrorCode.VALIDATION_ERROR,
                message=f"Request for {tokens} tokens can never be met by a bucket of {self.capacity}",
                context=context,
            )

    def _take_or_wait_time(self, tokens: int) -> float:
        """Consume tokens if available; otherwise return seconds to wait."""
        with self._lock:
            self._refill()
            if self.tokens >= tokens:
                self.tokens -= tokens
                return 0.0
            return (tokens - self.tokens) / self.refill_rate

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take ``tokens`` if they are available right now.

        Returns ``False`` instead of waiting. Invalid requests raise
        ``ApplicationError``.
        """
        self._validate_request(tokens)
        return self._take_or_wait_time(tokens) == 0.0

    def acquire(self, tokens: int = 1) -> float:
        """Block the calling thread until tokens are acquired.

        Returns:
            Total seconds spent waiting
        """
        self._validate_request(tokens)
        waited = 0.0
        while True:
            wait_time = self._take_or_wait_time(tokens)
            if wait_time == 0.0:
                return waited
            time.sleep(wait_time)
            waited += wait_time

    async def acquire_async(self, tokens: int = 1) -> float:
        """Suspend the calling task until tokens are acquired.

        Returns:
            Total seconds spent waiting
        """
        self._validate_request(tokens)
        waited = 0.0
        while True:
            wait_time = self._take_or_wait_time(tokens)
            if wait_time == 0.0:
                if waited:
                    logger.debug("Rate limiter delayed request by %.3fs", waited)
                return waited
            await asyncio.sleep(wait_time)
            waited += wait_time

    def get_tokens_available(self) -> int:
        """Whole tokens left after refilling."""
        with self._lock:
            self._refill()
            return int(self.tokens)

    def reset(self) -> None:
        """Refill the bucket completely."""
        with self._lock:
            self.tokens = float(self.capacity)
            self.last_refill = time.monotonic()


class RateLimiterRegistry:
    """One shared ``TokenBucketRateLimiter`` per provider name.

    Every lookup against the same provider goes through the same bucket,
    no matter how many releases are being matched concurrently.

    Example:
        >>> registry = RateLimiterRegistry(capacity=5, refill_rate=2.0)
        >>> registry.get("local") is registry.get("local")
        True
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        refill_rate: float = DEFAULT_REFILL_RATE,
    ) -> None:
        self.capacity = capacity
        self.refill_rate = refill_rate
        self._limiters: dict[str, TokenBucketRateLimiter] = {}
        self._lock = threading.Lock()

    def get(self, provider_name: str) -> TokenBucketRateLimiter:
        """Return the limiter for a provider, creating it on first use.

        Raises:
            ApplicationError: If the configured capacity or rate is invalid
        """
        limiter = self._limiters.get(provider_name)
        if limiter is not None:
            return limiter

        with self._lock:
            limiter = self._limiters.get(provider_name)
            if limiter is None:
                try:
                    limiter = TokenBucketRateLimiter(self.capacity, self.refill_rate)
                except ApplicationError as error:
                    log_operation_error(
                        logger=logger,
                        operation="rate_limiter_registry_get",
                        error=error,
                        additional_context={"provider": provider_name},
                    )
                    raise
                self._limiters[provider_name] = limiter
            return limiter

    def __contains__(self, provider_name: object) -> bool:
        return provider_name in self._limiters

    def __len__(self) -> int:
        return len(self._limiters)


__all__ = [
    "RateLimiterRegistry",
    "TokenBucketRateLimiter",
]
