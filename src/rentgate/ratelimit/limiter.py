# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fixed-window rate limiter over the selected key-value backend.

Each window is the half-open interval ``[window_start, window_start + window)``
with ``window_start = floor(now / window) * window``. Counter keys embed the
window start, so a new window always begins a fresh counter even if the old
one has not expired yet; the TTL only cleans up.

Every call increments the counter, including denied ones: a caller over
budget stays over budget until the window ends.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from rentgate.backends.selector import BackendSelector
from rentgate.core.constants import FailureMode
from rentgate.core.exceptions import BackendUnavailableError
from rentgate.ratelimit.policies import RateLimitPolicy, RateLimitResult

logger = logging.getLogger("rentgate.ratelimit.limiter")


class RateLimiter:
    """Admit or deny requests per identifier under a :class:`RateLimitPolicy`.

    Args:
        selector: Decides per call which backend holds the counters.
        failure_mode: Reaction to a durable-backend failure: ``fallback``
            counts on the ephemeral store, ``deny`` rejects the request,
            ``raise`` propagates the error.
        clock: Wall-clock source returning UNIX seconds.
    """

    def __init__(
        self,
        selector: BackendSelector,
        *,
        failure_mode: FailureMode = FailureMode.FALLBACK,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._selector = selector
        self._failure_mode = failure_mode
        self._clock = clock

    @staticmethod
    def window_bounds(now: float, window_seconds: int) -> tuple[int, int]:
        """Return ``(window_start, reset)`` in epoch seconds for *now*."""
        window_start = int(now // window_seconds) * window_seconds
        return window_start, window_start + window_seconds

    def now(self) -> float:
        """Current time from the limiter's clock, in UNIX seconds."""
        return self._clock()

    @staticmethod
    def counter_key(identifier: str, policy: RateLimitPolicy, window_start: int) -> str:
        return f"{policy.key_prefix}:{identifier}:{window_start}"

    async def admit(self, identifier: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Consume one request from *identifier*'s budget.

        Raises:
            ValueError: If *identifier* is empty.
            BackendUnavailableError: Only in ``raise`` failure mode.
        """
        if not identifier:
            raise ValueError("identifier must be a non-empty string")

        window_start, reset = self.window_bounds(self._clock(), policy.window_seconds)
        key = self.counter_key(identifier, policy, window_start)

        backend = self._selector.resolve()
        try:
            count = await backend.incr(key, policy.window_seconds)
        except BackendUnavailableError as exc:
            if backend is self._selector.ephemeral or self._failure_mode is FailureMode.RAISE:
                raise
            if self._failure_mode is FailureMode.DENY:
                logger.warning("Rate-limit backend failed, denying request: %s", exc)
                return RateLimitResult(success=False, remaining=0, reset=reset, limit=policy.limit)
            logger.warning("Rate-limit backend failed, counting in memory: %s", exc)
            count = await self._selector.ephemeral.incr(key, policy.window_seconds)

        result = RateLimitResult(
            success=count <= policy.limit,
            remaining=max(0, policy.limit - count),
            reset=reset,
            limit=policy.limit,
        )
        if not result.success:
            logger.debug("Rate limit exceeded for %s (%d/%d)", key, count, policy.limit)
        return result
