from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile

from smartqr.apps.api.deps import get_metadata_store, get_now, get_object_store
from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES, UPSTREAM_RESPONSE
from smartqr.core.errors import ValidationFailureError
from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.objects.base import ObjectStore
from smartqr.services.payloads import store_payload


router = APIRouter(tags=["uploads"], responses=DEFAULT_ERROR_RESPONSES)


@router.post("/upload", responses=UPSTREAM_RESPONSE)
async def upload_file(
    file: UploadFile | None = File(default=None),
    metadata: MetadataStore = Depends(get_metadata_store),
    objects: ObjectStore = Depends(get_object_store),
    now: datetime = Depends(get_now),
) -> dict[str, Any]:
    if file is None:
        raise ValidationFailureError("No file provided")
    data = await file.read()
    descriptor = await store_payload(
        metadata,
        objects,
        filename=file.filename,
        content_type=file.content_type,
        data=data,
        now=now,
    )
    return descriptor.to_document()
