# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""FastAPI application factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from rentgate import __version__
from rentgate.api.middleware import RateLimitMiddleware, RequestMiddleware
from rentgate.api.routes import health
from rentgate.backends.selector import BackendSelector
from rentgate.cache.manager import CacheFacade
from rentgate.core.config import Settings, get_settings
from rentgate.core.exceptions import BackendUnavailableError
from rentgate.ratelimit.limiter import RateLimiter
from rentgate.ratelimit.policies import build_policies

logger = logging.getLogger("rentgate.api.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    yield
    await app.state.selector.close()


async def _backend_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Backend unavailable during %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"error": "Service temporarily unavailable."})


def create_app(
    settings: Settings | None = None,
    *,
    selector: BackendSelector | None = None,
    limiter: RateLimiter | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    selector = selector or BackendSelector(settings)

    app = FastAPI(
        title="rentgate",
        description="Request governance (caching and rate limiting) for the rental API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    app.state.settings = settings
    app.state.selector = selector
    app.state.cache = CacheFacade(
        selector,
        default_ttl=settings.cache_ttl,
        failure_mode=settings.backend_failure_mode,
    )
    app.state.limiter = limiter or RateLimiter(
        selector, failure_mode=settings.backend_failure_mode
    )

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.add_exception_handler(BackendUnavailableError, _backend_unavailable_handler)

    app.add_middleware(RequestMiddleware)
    if settings.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=app.state.limiter,
            policies=build_policies(settings),
        )

    return app
