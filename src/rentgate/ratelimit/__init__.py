# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Fixed-window rate limiting keyed by client identifier and request class."""

from rentgate.ratelimit.classifier import classify, get_client_ip
from rentgate.ratelimit.limiter import RateLimiter
from rentgate.ratelimit.policies import (
    DEFAULT_POLICIES,
    RateLimitPolicy,
    RateLimitResult,
    build_policies,
)

__all__ = [
    "DEFAULT_POLICIES",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimiter",
    "build_policies",
    "classify",
    "get_client_ip",
]
