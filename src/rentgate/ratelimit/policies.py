# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rate-limit policy and result types."""

from __future__ import annotations

import math
from dataclasses import dataclass

from rentgate.core.config import Settings
from rentgate.core.constants import DEFAULT_LIMITS, DEFAULT_RATE_LIMIT_PREFIX, PolicyName


@dataclass(frozen=True)
class RateLimitPolicy:
    """Immutable limit configuration for one request class.

    Attributes:
        limit: Requests allowed per window.
        window_seconds: Window length in seconds.
        key_prefix: Namespace for the counters.
    """

    limit: int
    window_seconds: int
    key_prefix: str = DEFAULT_RATE_LIMIT_PREFIX

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("limit must be >= 1")
        if self.window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")


@dataclass(frozen=True)
class RateLimitResult:
    """Admission decision plus quota metadata.

    Attributes:
        success: Whether the request may proceed.
        remaining: Requests left in the current window (0 when blocked).
        reset: UNIX epoch seconds when the current window ends.
        limit: Max requests per window.
    """

    success: bool
    remaining: int
    reset: int
    limit: int

    def retry_after(self, now: float) -> int:
        """Seconds from *now* until the window resets, never negative."""
        return max(0, math.ceil(self.reset - now))

    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset),
        }


DEFAULT_POLICIES: dict[PolicyName, RateLimitPolicy] = {
    name: RateLimitPolicy(limit, window, f"{DEFAULT_RATE_LIMIT_PREFIX}:{name}")
    for name, (limit, window) in DEFAULT_LIMITS.items()
}


def build_policies(
    settings: Settings, key_prefix: str | None = None
) -> dict[PolicyName, RateLimitPolicy]:
    """Build the per-class policy table from settings.

    Each class counts in its own ``{key_prefix}:{class}`` namespace.

    Args:
        settings: Source of the limits and the shared window length.
        key_prefix: Counter namespace; defaults to ``settings.rate_limit_key_prefix``.
    """
    prefix = key_prefix or settings.rate_limit_key_prefix
    window = settings.rate_limit_window
    limits = {
        PolicyName.API: settings.rate_limit_api,
        PolicyName.AUTH: settings.rate_limit_auth,
        PolicyName.RESERVATION: settings.rate_limit_reservation,
        PolicyName.SEARCH: settings.rate_limit_search,
    }
    return {
        name: RateLimitPolicy(limit, window, f"{prefix}:{name}")
        for name, limit in limits.items()
    }
