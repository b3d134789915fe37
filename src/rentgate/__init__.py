# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""rentgate - Request governance (caching and rate limiting) for the rental API."""

__version__ = "0.1.0"

from rentgate.backends.selector import BackendSelector, get_selector
from rentgate.cache.manager import CacheFacade
from rentgate.ratelimit.classifier import classify, get_client_ip
from rentgate.ratelimit.limiter import RateLimiter
from rentgate.ratelimit.policies import RateLimitPolicy, RateLimitResult

__all__ = [
    "BackendSelector",
    "CacheFacade",
    "RateLimitPolicy",
    "RateLimitResult",
    "RateLimiter",
    "__version__",
    "classify",
    "get_client_ip",
    "get_selector",
]
