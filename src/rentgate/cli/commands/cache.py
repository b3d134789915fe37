# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Cache maintenance CLI commands."""

from __future__ import annotations

import asyncio
import json
from typing import Annotated

import typer

from rentgate.core.constants import DEFAULT_CACHE_PREFIX

app = typer.Typer()

PrefixOption = Annotated[
    str, typer.Option("--prefix", "-p", help="Cache key namespace")
]


def _build_cache():
    from rentgate.backends.selector import get_selector
    from rentgate.cache.manager import CacheFacade

    selector = get_selector()
    return CacheFacade(
        selector,
        default_ttl=selector.settings.cache_ttl,
        failure_mode=selector.settings.backend_failure_mode,
    )


@app.command()
def clear(prefix: PrefixOption = DEFAULT_CACHE_PREFIX) -> None:
    """Flush every entry in a cache namespace."""
    asyncio.run(_async_clear(prefix))


async def _async_clear(prefix: str) -> None:
    cache = _build_cache()
    try:
        count = await cache.clear(prefix)
    finally:
        await cache.selector.close()
    typer.echo(f"Cache cleared: {count} entries removed from '{prefix}'.")


@app.command()
def delete(
    pattern: Annotated[str, typer.Argument(help="Key or trailing-wildcard pattern, e.g. 'cars:*'")],
    prefix: PrefixOption = DEFAULT_CACHE_PREFIX,
) -> None:
    """Delete one key, or every key matching a wildcard pattern."""
    asyncio.run(_async_delete(pattern, prefix))


async def _async_delete(pattern: str, prefix: str) -> None:
    cache = _build_cache()
    try:
        if "*" in pattern:
            count = await cache.delete_pattern(pattern, key_prefix=prefix)
        else:
            count = int(await cache.delete(pattern, key_prefix=prefix))
    finally:
        await cache.selector.close()
    typer.echo(f"Deleted {count} entries.")


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Logical cache key")],
    prefix: PrefixOption = DEFAULT_CACHE_PREFIX,
) -> None:
    """Print a cached value as JSON."""
    asyncio.run(_async_get(key, prefix))


async def _async_get(key: str, prefix: str) -> None:
    cache = _build_cache()
    try:
        value = await cache.get(key, key_prefix=prefix)
    finally:
        await cache.selector.close()
    if value is None:
        typer.echo(f"No cached value for '{prefix}:{key}'.", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(value, indent=2))
