# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Custom exception hierarchy for rentgate."""


class RentgateError(Exception):
    """Base exception for all rentgate errors."""


class ConfigurationError(RentgateError):
    """Invalid or missing configuration."""


class BackendError(RentgateError):
    """A key-value backend operation failed."""


class BackendUnavailableError(BackendError):
    """The durable backend could not be reached or timed out."""


class SerializationError(RentgateError):
    """A value could not be encoded for storage."""
