# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Key-value backends shared by the cache and the rate limiter."""

from rentgate.backends.base import KeyValueBackend
from rentgate.backends.memory import EphemeralStore
from rentgate.backends.selector import BackendSelector, get_selector, reset_selector

__all__ = [
    "BackendSelector",
    "EphemeralStore",
    "KeyValueBackend",
    "get_selector",
    "reset_selector",
]
