# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Map request paths to rate-limit policies and extract caller identifiers."""

from __future__ import annotations

from collections.abc import Mapping

from rentgate.core.constants import UNKNOWN_CLIENT, PolicyName

# Checked in order; first substring match wins.
_PATH_RULES: tuple[tuple[str, PolicyName], ...] = (
    ("/api/auth", PolicyName.AUTH),
    ("/reservation", PolicyName.RESERVATION),
)

# Proxy headers in order of preference (Vercel / nginx / Cloudflare)
_SINGLE_IP_HEADERS = ("x-real-ip", "cf-connecting-ip")


def classify(path: str) -> PolicyName:
    """Return the policy name for a request path."""
    for fragment, policy in _PATH_RULES:
        if fragment in path:
            return policy
    return PolicyName.API


def get_client_ip(headers: Mapping[str, str]) -> str:
    """Extract the caller's IP from proxy headers.

    Prefers the first ``X-Forwarded-For`` hop, then ``X-Real-IP``, then
    ``CF-Connecting-IP``. Callers without any of these share the
    ``"unknown"`` identifier (and therefore one rate-limit bucket).
    """
    # First occurrence wins when a header is repeated.
    lowered: dict[str, str] = {}
    for name, value in headers.items():
        lowered.setdefault(name.lower(), value)

    forwarded = lowered.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip() or UNKNOWN_CLIENT

    for name in _SINGLE_IP_HEADERS:
        value = lowered.get(name)
        if value:
            return value
    return UNKNOWN_CLIENT
