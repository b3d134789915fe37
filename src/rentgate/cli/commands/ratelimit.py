# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Rate-limit CLI commands."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer

app = typer.Typer()


@app.command()
def check(
    identifier: Annotated[str, typer.Argument(help="Client identifier, usually an IP")],
    path: Annotated[
        str, typer.Option("--path", help="Request path used to pick the policy")
    ] = "/api/",
) -> None:
    """Consume one request for IDENTIFIER and print the decision."""
    asyncio.run(_async_check(identifier, path))


async def _async_check(identifier: str, path: str) -> None:
    from rentgate.backends.selector import get_selector
    from rentgate.ratelimit.classifier import classify
    from rentgate.ratelimit.limiter import RateLimiter
    from rentgate.ratelimit.policies import build_policies

    selector = get_selector()
    settings = selector.settings
    policy_name = classify(path)
    policy = build_policies(settings)[policy_name]
    limiter = RateLimiter(selector, failure_mode=settings.backend_failure_mode)
    try:
        result = await limiter.admit(identifier, policy)
    finally:
        await selector.close()

    verdict = "allowed" if result.success else "denied"
    typer.echo(
        f"{verdict}: policy={policy_name} limit={result.limit} "
        f"remaining={result.remaining} reset={result.reset}"
    )
    if not result.success:
        raise typer.Exit(code=1)
