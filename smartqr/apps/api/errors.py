from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from smartqr.apps.api.response import error_body
from smartqr.core.config import get_settings
from smartqr.core.errors import SmartQRError
from smartqr.services.telemetry import increment_counter


logger = logging.getLogger(__name__)


_DEFAULT_ERROR_CODES: dict[int, str] = {
    400: "VALIDATION_FAILURE",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    413: "VALIDATION_FAILURE",
    415: "VALIDATION_FAILURE",
    422: "VALIDATION_FAILURE",
    500: "INTERNAL_FAULT",
    502: "UPSTREAM_FAILURE",
}


def _default_code(status_code: int) -> str:
    return _DEFAULT_ERROR_CODES.get(status_code, "INTERNAL_FAULT" if status_code >= 500 else "BAD_REQUEST")


async def smartqr_exception_handler(request: Request, exc: SmartQRError) -> JSONResponse:
    # Domain errors carry their own status and code.
    if exc.status_code >= 500:
        logger.warning("request_failed path=%s code=%s", request.url.path, exc.code, exc_info=exc)
    message = str(exc) or exc.__class__.__doc__ or "Request failed"
    return JSONResponse(content=error_body(exc.code, message), status_code=exc.status_code)


async def http_exception_handler(
    request: Request, exc: HTTPException | StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        content=error_body(_default_code(exc.status_code), message),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "Validation error"
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    return JSONResponse(content=error_body("VALIDATION_FAILURE", message), status_code=422)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Avoid leaking stack traces; this handler runs outside the CORS middleware.
    increment_counter("internal_faults_total")
    logger.error("unhandled_exception path=%s", request.url.path, exc_info=exc)
    headers = None
    if get_settings().cors_allow_origins.strip() == "*":
        headers = {"Access-Control-Allow-Origin": "*"}
    return JSONResponse(
        content=error_body("INTERNAL_FAULT", "Internal server error"),
        status_code=500,
        headers=headers,
    )
