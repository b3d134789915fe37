# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Enumerations, TTL presets, and default rate-limit thresholds."""

from enum import IntEnum, StrEnum


class PolicyName(StrEnum):
    API = "api"
    AUTH = "auth"
    RESERVATION = "reservation"
    SEARCH = "search"


class FailureMode(StrEnum):
    """What to do when the durable backend fails mid-operation."""

    FALLBACK = "fallback"
    DENY = "deny"
    RAISE = "raise"


class TTLPreset(IntEnum):
    SHORT = 60  # frequently changing data
    MEDIUM = 300
    LONG = 3600  # semi-static data
    DAY = 86400  # static/reference data


DEFAULT_CACHE_TTL = int(TTLPreset.MEDIUM)
DEFAULT_CACHE_PREFIX = "cache"
DEFAULT_RATE_LIMIT_PREFIX = "rl"
MIDDLEWARE_RATE_LIMIT_PREFIX = "mw"

UNKNOWN_CLIENT = "unknown"

# (limit, window_seconds) per request class
DEFAULT_LIMITS: dict[PolicyName, tuple[int, int]] = {
    PolicyName.API: (100, 60),
    PolicyName.AUTH: (10, 60),
    PolicyName.RESERVATION: (5, 60),
    PolicyName.SEARCH: (60, 60),
}

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."
