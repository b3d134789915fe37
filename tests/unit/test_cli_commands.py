# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Unit tests for CLI commands: backend status, cache, rate limit, serve."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from rentgate.backends.memory import EphemeralStore
from rentgate.backends.selector import BackendSelector
from rentgate.cli.app import app as root_app
from rentgate.core.config import Settings

runner = CliRunner()


@pytest.fixture
def store() -> EphemeralStore:
    return EphemeralStore()


@pytest.fixture
def cli_selector(store: EphemeralStore):
    selector = BackendSelector(Settings(use_redis=False, rate_limit_reservation=1), ephemeral=store)
    with patch("rentgate.backends.selector.get_selector", return_value=selector):
        yield selector


def _seed(store: EphemeralStore, **entries: str) -> None:
    async def _run() -> None:
        for key, value in entries.items():
            await store.set(key.replace("__", ":"), value, 60)

    asyncio.run(_run())


class TestCacheCommands:
    def test_clear(self, cli_selector, store) -> None:
        from rentgate.cli.commands.cache import app

        _seed(store, cache__a="1", cache__b="2", other__c="3")
        result = runner.invoke(app, ["clear"])
        assert result.exit_code == 0
        assert "2 entries removed from 'cache'" in result.output

    def test_clear_custom_prefix(self, cli_selector, store) -> None:
        from rentgate.cli.commands.cache import app

        _seed(store, cache__a="1", other__c="3")
        result = runner.invoke(app, ["clear", "--prefix", "other"])
        assert result.exit_code == 0
        assert "1 entries removed from 'other'" in result.output

    def test_delete_pattern(self, cli_selector, store) -> None:
        from rentgate.cli.commands.cache import app

        _seed(store, cache__cars__1="1", cache__cars__2="2", cache__locations="3")
        result = runner.invoke(app, ["delete", "cars:*"])
        assert result.exit_code == 0
        assert "Deleted 2 entries." in result.output

    def test_delete_single_key(self, cli_selector, store) -> None:
        from rentgate.cli.commands.cache import app

        _seed(store, cache__cars="1")
        result = runner.invoke(app, ["delete", "cars"])
        assert result.exit_code == 0
        assert "Deleted 1 entries." in result.output

    def test_get_hit(self, cli_selector, store) -> None:
        from rentgate.cli.commands.cache import app

        _seed(store, cache__cars='["yaris"]')
        result = runner.invoke(app, ["get", "cars"])
        assert result.exit_code == 0
        assert '"yaris"' in result.output

    def test_get_miss(self, cli_selector) -> None:
        from rentgate.cli.commands.cache import app

        result = runner.invoke(app, ["get", "cars"])
        assert result.exit_code == 1


class TestBackendCommands:
    def test_status(self, cli_selector) -> None:
        result = runner.invoke(root_app, ["backend", "status"])
        assert result.exit_code == 0
        assert "Backend Status" in result.output
        assert "memory" in result.output


class TestRateLimitCommands:
    def test_check_allowed(self, cli_selector) -> None:
        result = runner.invoke(root_app, ["ratelimit", "check", "1.2.3.4", "--path", "/api/cars"])
        assert result.exit_code == 0
        assert "allowed: policy=api limit=100 remaining=99" in result.output

    def test_check_denied(self, cli_selector, store) -> None:
        args = ["ratelimit", "check", "9.9.9.9", "--path", "/reservation"]
        # Keep the in-memory counter alive across both invocations.
        with patch.object(BackendSelector, "close", new_callable=AsyncMock):
            first = runner.invoke(root_app, args)
            second = runner.invoke(root_app, args)
        assert first.exit_code == 0
        assert second.exit_code == 1
        assert "denied: policy=reservation" in second.output


class TestServe:
    def test_serve_uses_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RENTGATE_API_PORT", "9123")
        with patch("uvicorn.run") as run:
            result = runner.invoke(root_app, ["serve", "--host", "0.0.0.0"])
        assert result.exit_code == 0
        run.assert_called_once_with(
            "rentgate.api.app:create_app",
            host="0.0.0.0",
            port=9123,
            workers=1,
            factory=True,
        )
