from __future__ import annotations

import logging
from datetime import datetime
from pathlib import PurePath
from uuid import uuid4

from smartqr.core.config import get_settings
from smartqr.core.errors import NotFoundError, ValidationFailureError
from smartqr.domain.documents import PayloadDescriptor
from smartqr.domain.keys import descriptor_key
from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.objects.base import ObjectStore


logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def _safe_filename(filename: str | None) -> str:
    # Browsers may send full client paths; keep only the final component.
    name = PurePath((filename or "").replace("\\", "/")).name.strip()
    if not name:
        raise ValidationFailureError("Uploaded file must have a name")
    return name


async def store_payload(
    metadata: MetadataStore,
    objects: ObjectStore,
    *,
    filename: str | None,
    content_type: str | None,
    data: bytes,
    now: datetime,
) -> PayloadDescriptor:
    """Write bytes to the object store and persist their descriptor."""
    settings = get_settings()
    original_name = _safe_filename(filename)
    if len(data) > settings.upload_max_bytes:
        raise ValidationFailureError(
            f"File exceeds the {settings.upload_max_bytes} byte upload limit"
        )
    mime_type = content_type or DEFAULT_MIME_TYPE
    payload_ref = str(uuid4())
    storage_locator = await objects.put(f"{payload_ref}-{original_name}", data, mime_type)

    descriptor = PayloadDescriptor(
        payload_ref=payload_ref,
        original_name=original_name,
        mime_type=mime_type,
        byte_size=len(data),
        storage_locator=storage_locator,
        uploaded_at=now,
    )
    await metadata.put(descriptor_key(payload_ref), descriptor.to_document())
    logger.info("payload_stored payload_ref=%s bytes=%s", payload_ref, len(data))
    return descriptor


async def get_descriptor(metadata: MetadataStore, payload_ref: str) -> PayloadDescriptor:
    document = await metadata.get(descriptor_key(payload_ref))
    if document is None:
        raise NotFoundError(f"Payload '{payload_ref}' not found")
    return PayloadDescriptor.model_validate(document)
