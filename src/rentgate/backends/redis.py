# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Redis backend using the ``redis`` async client.

Every round trip is bounded by a timeout. Transport errors, Redis errors and
timeouts are all raised as :class:`~rentgate.core.exceptions.BackendUnavailableError`
so callers handle a single failure type regardless of cause.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from rentgate.backends.base import KeyValueBackend
from rentgate.core.exceptions import BackendUnavailableError

logger = logging.getLogger("rentgate.backends.redis")

# SCAN batch size hint for pattern lookups
_SCAN_COUNT = 500
_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


class RedisBackend(KeyValueBackend):
    """Redis-backed store using ``redis-py``'s asyncio client.

    Args:
        redis_url: Connection URL (e.g. ``rediss://host:6379``).
        token: Password / access token sent with ``AUTH``.
        timeout: Seconds allowed for each operation before it is abandoned.
        client: Pre-built client, mainly for tests.
    """

    name = "redis"

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        token: str | None = None,
        *,
        timeout: float = 2.0,
        client: aioredis.Redis | None = None,
    ) -> None:
        self._client: aioredis.Redis = client or aioredis.from_url(
            redis_url,
            password=token or None,
            decode_responses=True,
        )
        self._timeout = timeout

    @property
    def client(self) -> aioredis.Redis:
        return self._client

    # ------------------------------------------------------------------
    # KeyValueBackend interface
    # ------------------------------------------------------------------

    async def get(self, key: str) -> str | None:
        async with self._guard("GET"):
            result = await self._client.get(key)
        return str(result) if result is not None else None

    async def set(self, key: str, value: str, ttl: int) -> None:
        async with self._guard("SETEX"):
            await self._client.setex(key, ttl, value)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        async with self._guard("DEL"):
            result = await self._client.delete(*keys)
        return int(result)

    async def incr(self, key: str, ttl: int) -> int:
        """INCR and EXPIRE in one MULTI/EXEC round trip."""
        async with self._guard("INCR"):
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, ttl)
                count, _ = await pipe.execute()
        return int(count)

    async def keys(self, pattern: str) -> list[str]:
        """Collect matching keys with SCAN to avoid blocking Redis with KEYS.

        Only a trailing wildcard is honoured: text before the first ``*`` is
        matched literally, the same way :class:`EphemeralStore` matches it.
        """
        literal, star, _ = pattern.partition("*")
        match = _GLOB_SPECIAL.sub(r"\\\1", literal) + star
        async with self._guard("SCAN"):
            return [
                str(k)
                async for k in self._client.scan_iter(match=match, count=_SCAN_COUNT)
            ]

    async def ping(self) -> bool:
        try:
            async with self._guard("PING"):
                return bool(await self._client.ping())
        except BackendUnavailableError as exc:
            logger.warning("Redis ping failed: %s", exc)
            return False

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _guard(self, command: str) -> AsyncIterator[None]:
        try:
            async with asyncio.timeout(self._timeout):
                yield
        except TimeoutError as exc:
            raise BackendUnavailableError(
                f"Redis {command} timed out after {self._timeout}s"
            ) from exc
        except (RedisError, OSError) as exc:
            raise BackendUnavailableError(f"Redis {command} failed: {exc}") from exc
