from __future__ import annotations


class SmartQRError(Exception):
    """Base error for SmartQR."""

    status_code = 500
    code = "INTERNAL_FAULT"


class NotFoundError(SmartQRError):
    """Unknown code id or payload reference."""

    status_code = 404
    code = "NOT_FOUND"


class NoMatchError(SmartQRError):
    """Known code, but no configuration fits the current context."""

    status_code = 404
    code = "NO_MATCH"


class UpstreamFailureError(SmartQRError):
    """Object or metadata store unreachable or returned a non-success status."""

    status_code = 502
    code = "UPSTREAM_FAILURE"


class ValidationFailureError(SmartQRError):
    """Malformed upload or definition request."""

    status_code = 422
    code = "VALIDATION_FAILURE"


class InternalFaultError(SmartQRError):
    """Unexpected failure inside the service."""


class StoreConfigError(SmartQRError):
    """Missing or invalid store configuration."""
