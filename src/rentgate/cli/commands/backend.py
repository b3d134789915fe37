# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Backend inspection CLI commands."""

from __future__ import annotations

import asyncio

import typer

app = typer.Typer()


@app.command()
def status() -> None:
    """Show which backend is active and whether it responds."""
    asyncio.run(_async_status())


async def _async_status() -> None:
    from rich.console import Console
    from rich.table import Table

    from rentgate.backends.selector import get_selector

    selector = get_selector()
    settings = selector.settings
    try:
        backend = selector.resolve()
        reachable = await backend.ping()
    finally:
        await selector.close()

    console = Console()
    table = Table(title="Backend Status")
    table.add_column("Setting", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Redis enabled", str(settings.use_redis))
    table.add_row("Active backend", backend.name)
    table.add_row("Reachable", "yes" if reachable else "no")
    table.add_row("Failure mode", str(settings.backend_failure_mode))
    table.add_row("Timeout (s)", f"{settings.redis_timeout:g}")

    console.print(table)
