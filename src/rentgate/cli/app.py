# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Typer CLI application root."""

from __future__ import annotations

import typer

from rentgate.cli.commands import backend as backend_cmd
from rentgate.cli.commands import cache as cache_cmd
from rentgate.cli.commands import ratelimit as ratelimit_cmd

app = typer.Typer(
    name="rentgate",
    help="Caching and rate limiting for the rental API",
    no_args_is_help=True,
)

app.add_typer(backend_cmd.app, name="backend", help="Inspect the active key-value backend")
app.add_typer(cache_cmd.app, name="cache", help="Manage cached entries")
app.add_typer(ratelimit_cmd.app, name="ratelimit", help="Inspect rate-limit counters")


@app.callback()
def main() -> None:
    """Configure logging before any command runs."""
    from rentgate.core.config import get_settings
    from rentgate.core.logging import setup_logging

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    workers: int | None = typer.Option(None, "--workers", "-w", help="Worker count"),
) -> None:
    """Start the rentgate API server."""
    import uvicorn

    from rentgate.core.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "rentgate.api.app:create_app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        workers=workers or settings.api_workers,
        factory=True,
    )


if __name__ == "__main__":
    app()
