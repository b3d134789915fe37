# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Abstract key-value backend interface with TTL and counter support."""

from __future__ import annotations

import abc


class KeyValueBackend(abc.ABC):
    """Capability interface implemented by the durable and ephemeral stores.

    Values are opaque strings; encoding is the caller's concern. Every
    operation is async so the cache and limiter can treat both backends
    identically, even though the ephemeral store never suspends.
    """

    #: Short identifier used in logs and health output.
    name: str = "abstract"

    @abc.abstractmethod
    async def get(self, key: str) -> str | None:
        """Retrieve a value by key.

        Returns:
            The stored string, or ``None`` if the key does not exist or has
            expired.
        """

    @abc.abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds."""

    @abc.abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete the given keys.

        Returns:
            The number of keys that existed and were removed.
        """

    @abc.abstractmethod
    async def incr(self, key: str, ttl: int) -> int:
        """Atomically increment the counter at *key* and reset its expiry.

        A missing or expired counter starts from zero, so the first call
        returns ``1``.

        Returns:
            The counter value after the increment.
        """

    @abc.abstractmethod
    async def keys(self, pattern: str) -> list[str]:
        """Return the live keys matching a trailing-wildcard *pattern*."""

    @abc.abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the backend is reachable."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release any resources held by the backend."""
