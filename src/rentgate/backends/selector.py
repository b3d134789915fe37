# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Per-call choice between the durable Redis backend and the ephemeral store.

The :class:`BackendSelector` is constructed explicitly and passed to the
cache and rate limiter. It decides on every call whether the durable backend
is enabled and configured; the Redis handle itself is built lazily once and
reused for the selector's lifetime.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from rentgate.backends.base import KeyValueBackend
from rentgate.backends.memory import EphemeralStore
from rentgate.backends.redis import RedisBackend
from rentgate.core.config import Settings, get_settings

logger = logging.getLogger("rentgate.backends.selector")

_REDIS_SCHEMES = {"redis", "rediss"}
# Upstash publishes an HTTPS REST URL; the TLS Redis endpoint shares its host.
_REST_SCHEMES = {"https"}
_UPSTASH_TLS_PORT = 6379

# Module-level singleton
_selector: BackendSelector | None = None


def normalise_redis_url(url: str, token: str) -> str | None:
    """Validate durable-backend credentials and return a connectable URL.

    Args:
        url: ``redis://``, ``rediss://`` or Upstash ``https://`` REST URL.
        token: Access token / password.

    Returns:
        The Redis URL to connect to, or ``None`` if either credential is
        missing or malformed.
    """
    if not url or not token or any(ch.isspace() for ch in token):
        return None
    try:
        parts = urlsplit(url)
        port = parts.port
    except ValueError:
        return None
    if not parts.hostname:
        return None
    if parts.scheme in _REDIS_SCHEMES:
        return url
    if parts.scheme in _REST_SCHEMES:
        return f"rediss://{parts.hostname}:{port or _UPSTASH_TLS_PORT}"
    return None


class BackendSelector:
    """Resolve the backend to use for a single cache or rate-limit operation.

    Args:
        settings: Configuration; read once at construction.
        ephemeral: Fallback store. A fresh :class:`EphemeralStore` sized from
            settings is created when omitted.
        durable: Pre-built durable backend, bypassing URL/token handling.
            Still subject to ``use_redis``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        ephemeral: EphemeralStore | None = None,
        durable: KeyValueBackend | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._ephemeral = ephemeral or EphemeralStore(
            max_entries=self._settings.memory_max_entries,
            sweep_interval=self._settings.memory_sweep_interval,
        )
        self._durable = durable
        self._warned = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def ephemeral(self) -> EphemeralStore:
        return self._ephemeral

    def resolve_durable(self) -> KeyValueBackend | None:
        """Return the durable handle, or ``None`` to signal "use the fallback".

        Never raises. An enabled-but-misconfigured backend logs one warning
        per selector.
        """
        if not self._settings.use_redis:
            return None
        if self._durable is not None:
            return self._durable

        url = normalise_redis_url(self._settings.redis_url, self._settings.redis_token)
        if url is None:
            if not self._warned:
                logger.warning(
                    "Redis is enabled but RENTGATE_REDIS_URL or RENTGATE_REDIS_TOKEN "
                    "is missing or malformed; using the in-memory store"
                )
                self._warned = True
            return None

        self._durable = RedisBackend(
            url,
            token=self._settings.redis_token,
            timeout=self._settings.redis_timeout,
        )
        logger.info("Redis backend initialised for %s", url)
        return self._durable

    def resolve(self) -> KeyValueBackend:
        """Return the durable backend when available, else the ephemeral store."""
        return self.resolve_durable() or self._ephemeral

    @property
    def durable_enabled(self) -> bool:
        return self.resolve_durable() is not None

    async def close(self) -> None:
        """Release the durable handle (if any) and drop ephemeral state."""
        if self._durable is not None:
            await self._durable.close()
            self._durable = None
        await self._ephemeral.close()


def get_selector() -> BackendSelector:
    """Return the process-wide :class:`BackendSelector`, creating it on first use."""
    global _selector
    if _selector is None:
        _selector = BackendSelector(get_settings())
    return _selector


def reset_selector() -> None:
    """Reset the singleton (useful for testing)."""
    global _selector
    _selector = None
