# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Read-through / write-through cache over the selected backend."""

from rentgate.cache.manager import CacheFacade, CacheStats
from rentgate.core.constants import TTLPreset

__all__ = ["CacheFacade", "CacheStats", "TTLPreset"]
