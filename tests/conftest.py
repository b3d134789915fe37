# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Shared test fixtures: a controllable clock and an in-process Redis double."""

from __future__ import annotations

import re

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from rentgate.backends.memory import EphemeralStore
from rentgate.backends.redis import RedisBackend
from rentgate.backends.selector import BackendSelector, reset_selector
from rentgate.core.config import Settings

# Aligned to a 60-second window boundary
EPOCH = 1_699_999_980.0


def redis_glob_match(key: str, pattern: str) -> bool:
    """Match like Redis SCAN MATCH: ``*``, ``?``, ``[...]`` and backslash escapes."""
    out = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        elif ch == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(ch))
            else:
                out.append("[" + re.escape(pattern[i + 1 : end]) + "]")
                i = end
        else:
            out.append(re.escape(ch))
        i += 1
    return re.fullmatch("".join(out), key, flags=re.DOTALL) is not None


class FakeClock:
    """Manually advanced time source usable as both wall and monotonic clock."""

    def __init__(self, start: float = EPOCH) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._ops: list[tuple] = []

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *exc: object) -> None:
        self._ops.clear()

    def incr(self, key: str) -> FakePipeline:
        self._ops.append(("incr", key))
        return self

    def expire(self, key: str, ttl: int) -> FakePipeline:
        self._ops.append(("expire", key, ttl))
        return self

    async def execute(self) -> list:
        results = []
        for op, key, *args in self._ops:
            if op == "incr":
                results.append(self._redis.incr_now(key))
            else:
                results.append(self._redis.expire_now(key, *args))
        self._ops.clear()
        return results


class FakeRedis:
    """Just enough of ``redis.asyncio.Redis`` for :class:`RedisBackend`."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.data: dict[str, tuple[str, float | None]] = {}
        self.closed = False

    def _alive(self, key: str) -> str | None:
        item = self.data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and self.clock() >= expires_at:
            del self.data[key]
            return None
        return value

    def incr_now(self, key: str) -> int:
        current = self._alive(key)
        count = int(current or 0) + 1
        expires_at = self.data[key][1] if current is not None else None
        self.data[key] = (str(count), expires_at)
        return count

    def expire_now(self, key: str, ttl: int) -> bool:
        if self._alive(key) is None:
            return False
        self.data[key] = (self.data[key][0], self.clock() + ttl)
        return True

    async def get(self, key: str) -> str | None:
        return self._alive(key)

    async def setex(self, key: str, ttl: int, value: str) -> bool:
        self.data[key] = (value, self.clock() + ttl)
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._alive(key) is not None:
                del self.data[key]
                removed += 1
        return removed

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        for key in list(self.data):
            if self._alive(key) is not None and (match is None or redis_glob_match(key, match)):
                yield key

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        self.closed = True

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)


class BrokenRedis(FakeRedis):
    """Every command fails as if the server were unreachable."""

    def _fail(self, *args: object, **kwargs: object):
        raise RedisConnectionError("Connection refused")

    get = setex = delete = ping = _fail  # type: ignore[assignment]

    def incr_now(self, key: str) -> int:
        raise RedisConnectionError("Connection refused")

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        raise RedisConnectionError("Connection refused")
        yield  # pragma: no cover


@pytest.fixture(autouse=True)
def _reset_selector():
    """Ensure the module-level selector singleton is cleared between tests."""
    reset_selector()
    yield
    reset_selector()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> EphemeralStore:
    return EphemeralStore(max_entries=128, clock=clock)


@pytest.fixture
def fake_redis(clock: FakeClock) -> FakeRedis:
    return FakeRedis(clock)


@pytest.fixture
def redis_backend(fake_redis: FakeRedis) -> RedisBackend:
    return RedisBackend(client=fake_redis, timeout=1.0)


@pytest.fixture
def memory_selector(memory_store: EphemeralStore) -> BackendSelector:
    return BackendSelector(Settings(use_redis=False), ephemeral=memory_store)


@pytest.fixture
def redis_selector(memory_store: EphemeralStore, redis_backend: RedisBackend) -> BackendSelector:
    return BackendSelector(Settings(use_redis=True), ephemeral=memory_store, durable=redis_backend)


@pytest.fixture(params=["memory", "redis"])
def selector(request: pytest.FixtureRequest) -> BackendSelector:
    """Run a test once against each backend."""
    return request.getfixturevalue(f"{request.param}_selector")


@pytest.fixture
def broken_selector(memory_store: EphemeralStore, clock: FakeClock) -> BackendSelector:
    durable = RedisBackend(client=BrokenRedis(clock), timeout=1.0)
    return BackendSelector(Settings(use_redis=True), ephemeral=memory_store, durable=durable)
