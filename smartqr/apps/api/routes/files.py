from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from smartqr.apps.api.deps import get_gateway
from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES, NOT_FOUND_RESPONSE, UPSTREAM_RESPONSE
from smartqr.apps.api.response import payload_response
from smartqr.services.gateway import ContentGateway


router = APIRouter(prefix="/file", tags=["files"], responses=DEFAULT_ERROR_RESPONSES)


@router.get(
    "/{payload_ref}",
    response_class=Response,
    responses={**NOT_FOUND_RESPONSE, **UPSTREAM_RESPONSE},
)
async def download_file(
    payload_ref: str,
    gateway: ContentGateway = Depends(get_gateway),
) -> Response:
    served = await gateway.download(payload_ref)
    return payload_response(served, disposition="attachment")
