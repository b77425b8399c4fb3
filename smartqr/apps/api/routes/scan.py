from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response

from smartqr.apps.api.deps import get_gateway, get_now
from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES, SCAN_RESPONSES
from smartqr.apps.api.response import payload_response
from smartqr.core.config import get_settings
from smartqr.services.gateway import ContentGateway
from smartqr.services.request_context import derive_request_context


router = APIRouter(tags=["scan"], responses=DEFAULT_ERROR_RESPONSES)


@router.get("/code/{code_id}", response_class=Response, responses=SCAN_RESPONSES)
async def scan_code(
    code_id: str,
    request: Request,
    gateway: ContentGateway = Depends(get_gateway),
    now: datetime = Depends(get_now),
) -> Response:
    context = derive_request_context(request.headers, now=now)
    served = await gateway.serve(code_id, context)
    # Content depends on time and location, so shared caches keep it briefly.
    max_age = get_settings().scan_cache_max_age_s
    return payload_response(
        served,
        disposition="inline",
        cache_control=f"public, max-age={max_age}",
    )
