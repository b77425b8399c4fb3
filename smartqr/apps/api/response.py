from __future__ import annotations

from urllib.parse import quote

from fastapi import Response
from pydantic import BaseModel

from smartqr.services.gateway import ServedPayload


class ErrorBody(BaseModel):
    # Every error response uses this shape.
    error: str
    message: str


def error_body(code: str, message: str) -> dict[str, str]:
    return ErrorBody(error=code, message=message).model_dump()


def content_disposition(kind: str, filename: str) -> str:
    # Latin-1 header values cannot carry arbitrary names; send an ASCII fallback plus RFC 5987 form.
    fallback = filename.encode("ascii", "replace").decode("ascii").replace('"', "'")
    return f"{kind}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def payload_response(
    served: ServedPayload,
    *,
    disposition: str,
    cache_control: str | None = None,
) -> Response:
    headers = {"Content-Disposition": content_disposition(disposition, served.filename)}
    if cache_control:
        headers["Cache-Control"] = cache_control
    return Response(content=served.content, media_type=served.mime_type, headers=headers)
