# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""In-process key-value store used when the durable backend is unavailable.

Entries live in an insertion-ordered ``dict`` with per-entry expiry
timestamps. Expired entries are treated as absent on every read and are
removed by :meth:`EphemeralStore.sweep`, which runs opportunistically before
reads (never on a timer). Data is lost when the process exits.

No operation awaits internally, so each one is atomic with respect to other
coroutines on the same event loop.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable

from rentgate.backends.base import KeyValueBackend

logger = logging.getLogger("rentgate.backends.memory")

# Default maximum number of entries before eviction kicks in.
_DEFAULT_MAX_ENTRIES = 10_000


class _Entry:
    """A stored value with its expiry timestamp."""

    __slots__ = ("expires_at", "value")

    def __init__(self, value: str, expires_at: float) -> None:
        self.value = value
        self.expires_at = expires_at

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def _prefix_of(pattern: str) -> str | None:
    """Return the literal prefix of a wildcard pattern, or ``None`` if it has none."""
    if "*" not in pattern:
        return None
    return pattern.split("*", 1)[0]


class EphemeralStore(KeyValueBackend):
    """Process-local TTL map.

    Args:
        max_entries: Maximum number of entries. When exceeded the oldest
            entry is evicted.
        sweep_interval: Minimum seconds between two full sweeps triggered by
            reads. ``0`` sweeps before every read.
        clock: Monotonic time source, injectable for tests.
    """

    name = "memory"

    def __init__(
        self,
        max_entries: int = _DEFAULT_MAX_ENTRIES,
        sweep_interval: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self._store: OrderedDict[str, _Entry] = OrderedDict()
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._last_sweep: float | None = None

    def __len__(self) -> int:
        return len(self._store)

    # ------------------------------------------------------------------
    # KeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        self._maybe_sweep()
        return self._live_value(key)

    async def set(self, key: str, value: str, ttl: int) -> None:
        self._put(key, _Entry(value, self._clock() + ttl))

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._store.pop(key, None) is not None:
                removed += 1
        return removed

    async def incr(self, key: str, ttl: int) -> int:
        self._maybe_sweep()
        now = self._clock()
        entry = self._store.get(key)
        if entry is None or entry.is_expired(now):
            count = 1
        else:
            try:
                count = int(entry.value) + 1
            except ValueError:
                # Same as Redis: a non-integer value cannot be incremented.
                raise ValueError(f"value at {key!r} is not an integer") from None
        self._put(key, _Entry(str(count), now + ttl))
        return count

    async def keys(self, pattern: str) -> list[str]:
        self._maybe_sweep()
        prefix = _prefix_of(pattern)
        if prefix is None:
            return [pattern] if self._live_value(pattern) is not None else []
        now = self._clock()
        return [
            k
            for k, entry in self._store.items()
            if k.startswith(prefix) and not entry.is_expired(now)
        ]

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._store.clear()

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Remove every expired entry.

        Returns:
            The number of entries removed.
        """
        now = self._clock()
        expired = [k for k, entry in self._store.items() if entry.is_expired(now)]
        for k in expired:
            del self._store[k]
        self._last_sweep = now
        if expired:
            logger.debug("Swept %d expired entries", len(expired))
        return len(expired)

    def delete_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with *prefix*, expired or not."""
        doomed = [k for k in self._store if k.startswith(prefix)]
        for k in doomed:
            del self._store[k]
        return len(doomed)

    def clear(self, prefix: str | None = None) -> int:
        """Remove every entry, or only the ``{prefix}:`` namespace when given."""
        if prefix is None:
            count = len(self._store)
            self._store.clear()
            return count
        return self.delete_by_prefix(f"{prefix}:")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _live_value(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry.value

    def _put(self, key: str, entry: _Entry) -> None:
        if key in self._store:
            self._store.move_to_end(key)
        self._store[key] = entry
        # Evict oldest if over capacity
        while len(self._store) > self._max_entries:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("Evicted %s (store full)", evicted)

    def _maybe_sweep(self) -> None:
        if (
            self._last_sweep is None
            or self._clock() - self._last_sweep >= self._sweep_interval
        ):
            self.sweep()
