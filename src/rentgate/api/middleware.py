# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Request middleware for request ID tracking and rate limiting."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from rentgate.core.constants import RATE_LIMIT_MESSAGE, PolicyName
from rentgate.core.exceptions import BackendUnavailableError
from rentgate.ratelimit.classifier import classify, get_client_ip
from rentgate.ratelimit.limiter import RateLimiter
from rentgate.ratelimit.policies import DEFAULT_POLICIES, RateLimitPolicy

logger = logging.getLogger("rentgate.api.middleware")

API_PREFIX = "/api/"
_RATE_LIMIT_SKIP_PATHS: set[str] = {"/api/health", "/api/ready"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window rate limiting for every path under ``/api/``.

    * The policy comes from :func:`~rentgate.ratelimit.classifier.classify`
      and the identifier from the proxy headers.
    * Returns **429 Too Many Requests** with ``{"error": ...}`` and a
      ``Retry-After`` header when the budget is spent.
    * Adds ``X-RateLimit-Limit``, ``X-RateLimit-Remaining``, and
      ``X-RateLimit-Reset`` headers to admitted and rejected responses.
    * Skips the health probes.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        limiter: RateLimiter,
        policies: Mapping[PolicyName, RateLimitPolicy] | None = None,
    ) -> None:
        super().__init__(app)
        self._limiter = limiter
        self._policies = dict(policies or DEFAULT_POLICIES)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if not path.startswith(API_PREFIX) or path in _RATE_LIMIT_SKIP_PATHS:
            return await call_next(request)

        identifier = get_client_ip(request.headers)
        policy = self._policies[classify(path)]

        try:
            result = await self._limiter.admit(identifier, policy)
        except BackendUnavailableError as exc:
            logger.error("Rate limiting unavailable for %s: %s", path, exc)
            return JSONResponse(
                status_code=503,
                content={"error": "Service temporarily unavailable."},
            )

        if not result.success:
            logger.info("Rate limit exceeded: %s %s (limit=%d)", identifier, path, result.limit)
            retry_after = result.retry_after(self._limiter.now())
            return JSONResponse(
                status_code=429,
                content={"error": RATE_LIMIT_MESSAGE},
                headers={**result.headers(), "Retry-After": str(retry_after)},
            )

        response = await call_next(request)

        # Add rate-limit headers to every admitted response
        response.headers.update(result.headers())
        return response


class RequestMiddleware(BaseHTTPMiddleware):
    """Adds request logging and X-Request-ID header to every response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        start = time.monotonic()

        response = await call_next(request)

        duration_ms = round((time.monotonic() - start) * 1000, 1)
        response.headers["X-Request-ID"] = request_id

        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={"request_id": request_id},
        )

        return response
