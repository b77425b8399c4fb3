from __future__ import annotations

from typing import Any

from smartqr.apps.api.response import ErrorBody


def _error(description: str, code: str, message: str) -> dict[str, Any]:
    return {
        "model": ErrorBody,
        "description": description,
        "content": {"application/json": {"example": {"error": code, "message": message}}},
    }


DEFAULT_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    422: _error("Validation failure", "VALIDATION_FAILURE", "configurations.0.start: invalid clock time"),
    500: _error("Internal fault", "INTERNAL_FAULT", "Internal server error"),
}

NOT_FOUND_RESPONSE: dict[int | str, dict[str, Any]] = {
    404: _error("Unknown code or payload", "NOT_FOUND", "Code 'abc' not found"),
}

UPSTREAM_RESPONSE: dict[int | str, dict[str, Any]] = {
    502: _error("Storage failure", "UPSTREAM_FAILURE", "Failed to reach object storage"),
}

SCAN_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"description": "Resolved payload bytes", "content": {"application/octet-stream": {}}},
    404: _error(
        "Unknown code, or no configuration matches the request context",
        "NO_MATCH",
        "No content available for current conditions",
    ),
    **UPSTREAM_RESPONSE,
}
