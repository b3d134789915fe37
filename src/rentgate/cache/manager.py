# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache façade that namespaces keys, serialises values, and picks a backend.

The :class:`CacheFacade` is the public interface of the caching layer. Keys
are stored as ``{key_prefix}:{key}``; values are encoded as JSON text so the
durable and ephemeral backends hold identical payloads. A stored payload
that fails to decode (or to validate against ``model``) is treated exactly
like a miss.

``get_or_set`` is check, compute, store: two concurrent misses for the same
key may both call the producer, and the last write wins.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from rentgate.backends.base import KeyValueBackend
from rentgate.backends.selector import BackendSelector
from rentgate.core.constants import DEFAULT_CACHE_PREFIX, DEFAULT_CACHE_TTL, FailureMode
from rentgate.core.exceptions import BackendUnavailableError, SerializationError

logger = logging.getLogger("rentgate.cache.manager")

T = TypeVar("T")

# Distinguishes "not cached" from a cached ``None``
_MISS = object()


class CacheStats:
    """Simple hit/miss counter."""

    __slots__ = ("fallbacks", "hits", "misses")

    def __init__(self) -> None:
        self.hits: int = 0
        self.misses: int = 0
        self.fallbacks: int = 0

    @property
    def total(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        return self.hits / self.total if self.total else 0.0

    def to_dict(self) -> dict[str, object]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "total": self.total,
            "hit_rate": round(self.hit_rate, 4),
            "fallbacks": self.fallbacks,
        }


def make_key(key: str, key_prefix: str = DEFAULT_CACHE_PREFIX) -> str:
    return f"{key_prefix}:{key}"


def encode(value: Any) -> str:
    """Serialise *value* to JSON text, dumping pydantic models first."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise SerializationError(
            f"Value of type {type(value).__name__} is not JSON encodable"
        ) from exc


def decode(raw: str, model: type[BaseModel] | None = None) -> Any:
    """Decode stored JSON text; returns ``_MISS`` when the payload is malformed."""
    try:
        if model is not None:
            return model.model_validate_json(raw)
        return json.loads(raw)
    except (ValueError, ValidationError):
        return _MISS


class CacheFacade:
    """High-level cache interface over a :class:`BackendSelector`.

    Args:
        selector: Decides per call which backend stores the data.
        default_ttl: TTL in seconds used when a call does not pass one.
        failure_mode: Reaction to a durable-backend failure. ``raise``
            propagates the error; any other mode repeats the operation on
            the ephemeral store.
    """

    def __init__(
        self,
        selector: BackendSelector,
        default_ttl: int = DEFAULT_CACHE_TTL,
        failure_mode: FailureMode = FailureMode.FALLBACK,
    ) -> None:
        if default_ttl < 1:
            raise ValueError("default_ttl must be >= 1")
        self._selector = selector
        self._default_ttl = default_ttl
        self._failure_mode = failure_mode
        self._stats = CacheStats()

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    async def get_or_set(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]] | Callable[[], T],
        *,
        ttl: int | None = None,
        key_prefix: str = DEFAULT_CACHE_PREFIX,
        model: type[BaseModel] | None = None,
    ) -> T:
        """Return the cached value for *key*, producing and storing it on a miss.

        Args:
            key: Logical cache key.
            producer: Zero-argument callable (sync or async) computing the value.
            ttl: Time-to-live in seconds; defaults to ``default_ttl``.
            key_prefix: Namespace for the key.
            model: Optional pydantic model used to validate cached payloads.

        Returns:
            The cached or freshly produced value.
        """
        self._resolve_ttl(ttl)
        cached = await self._lookup(key, key_prefix, model)
        if cached is not _MISS:
            return cached

        value = producer()
        if inspect.isawaitable(value):
            value = await value
        await self.set(key, value, ttl=ttl, key_prefix=key_prefix)
        return value

    async def get(
        self,
        key: str,
        *,
        key_prefix: str = DEFAULT_CACHE_PREFIX,
        model: type[BaseModel] | None = None,
    ) -> Any | None:
        """Look up *key*; ``None`` on miss, expiry, or malformed payload."""
        cached = await self._lookup(key, key_prefix, model)
        return None if cached is _MISS else cached

    async def set(
        self,
        key: str,
        value: Any,
        *,
        ttl: int | None = None,
        key_prefix: str = DEFAULT_CACHE_PREFIX,
    ) -> None:
        """Unconditionally store *value* under *key*.

        Raises:
            ValueError: If *ttl* is less than one second.
            SerializationError: If *value* cannot be encoded as JSON.
        """
        effective_ttl = self._resolve_ttl(ttl)
        payload = encode(value)
        full_key = make_key(key, key_prefix)
        await self._run(lambda b: b.set(full_key, payload, effective_ttl))
        logger.debug("Cached %s (ttl=%s)", full_key, effective_ttl)

    async def delete(self, key: str, *, key_prefix: str = DEFAULT_CACHE_PREFIX) -> bool:
        """Remove *key*; no error if it is absent.

        Returns:
            ``True`` if the entry existed.
        """
        full_key = make_key(key, key_prefix)
        return bool(await self._run(lambda b: b.delete(full_key)))

    async def delete_pattern(
        self, pattern: str, *, key_prefix: str = DEFAULT_CACHE_PREFIX
    ) -> int:
        """Remove every key matching a trailing-wildcard *pattern* (e.g. ``"cars:*"``).

        The ephemeral store only honours the literal part before the first
        ``*`` as a prefix.

        Returns:
            Number of entries removed.
        """
        return await self._delete_matching(make_key(pattern, key_prefix))

    async def clear(self, key_prefix: str = DEFAULT_CACHE_PREFIX) -> int:
        """Flush the whole ``key_prefix`` namespace. Maintenance use only.

        Returns:
            Number of entries removed.
        """
        count = await self._delete_matching(make_key("*", key_prefix))
        logger.info("Cache namespace %r cleared: %d entries removed", key_prefix, count)
        return count

    @property
    def stats(self) -> CacheStats:
        """Return the hit/miss statistics object."""
        return self._stats

    @property
    def selector(self) -> BackendSelector:
        return self._selector

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _resolve_ttl(self, ttl: int | None) -> int:
        effective = self._default_ttl if ttl is None else ttl
        if effective < 1:
            raise ValueError("ttl must be >= 1")
        return effective

    async def _lookup(
        self, key: str, key_prefix: str, model: type[BaseModel] | None
    ) -> Any:
        full_key = make_key(key, key_prefix)
        raw = await self._run(lambda b: b.get(full_key))
        if raw is None:
            self._stats.misses += 1
            logger.debug("Cache MISS for key %s", full_key)
            return _MISS
        value = decode(raw, model)
        if value is _MISS:
            self._stats.misses += 1
            logger.debug("Cache MISS for key %s (malformed payload)", full_key)
            return _MISS
        self._stats.hits += 1
        logger.debug("Cache HIT for key %s", full_key)
        return value

    async def _delete_matching(self, full_pattern: str) -> int:
        async def _op(backend: KeyValueBackend) -> int:
            keys = await backend.keys(full_pattern)
            return await backend.delete(*keys) if keys else 0

        return await self._run(_op)

    async def _run(self, op: Callable[[KeyValueBackend], Awaitable[T]]) -> T:
        backend = self._selector.resolve()
        try:
            return await op(backend)
        except BackendUnavailableError as exc:
            ephemeral = self._selector.ephemeral
            if backend is ephemeral or self._failure_mode is FailureMode.RAISE:
                raise
            self._stats.fallbacks += 1
            logger.warning("Durable cache backend failed, using in-memory store: %s", exc)
            return await op(ephemeral)
