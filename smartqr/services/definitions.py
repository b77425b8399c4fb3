from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Sequence
from uuid import uuid4

from pydantic import ValidationError

from smartqr.core.errors import InternalFaultError, NotFoundError, ValidationFailureError
from smartqr.domain.documents import CodeDefinition, CodeMode, Configuration
from smartqr.domain.keys import definition_key
from smartqr.providers.metadata.base import MetadataStore


logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", "invalid value"))
    return f"{location}: {message}" if location else message


async def get_definition(store: MetadataStore, code_id: str) -> CodeDefinition:
    document = await store.get(definition_key(code_id))
    if document is None:
        raise NotFoundError(f"Code '{code_id}' not found")
    try:
        return CodeDefinition.model_validate(document)
    except ValidationError as exc:
        logger.error("definition_document_invalid code_id=%s", code_id, exc_info=exc)
        raise InternalFaultError(f"Stored definition for '{code_id}' is unreadable") from exc


async def save_definition(
    store: MetadataStore,
    *,
    mode: CodeMode | str,
    configurations: Sequence[Configuration | dict[str, Any]],
    now: datetime,
    code_id: str | None = None,
) -> CodeDefinition:
    """Create or fully overwrite a definition; a missing id is generated server-side."""
    try:
        definition = CodeDefinition(
            id=code_id or str(uuid4()),
            mode=mode,
            configurations=tuple(configurations),
            created_at=now,
        )
    except ValidationError as exc:
        raise ValidationFailureError(_validation_message(exc)) from exc
    await store.put(definition_key(definition.id), definition.to_document())
    logger.info(
        "definition_saved code_id=%s mode=%s configurations=%s",
        definition.id,
        definition.mode.value,
        len(definition.configurations),
    )
    return definition


async def delete_definition(store: MetadataStore, code_id: str) -> bool:
    # Payload descriptors and stored bytes are left in place.
    deleted = await store.delete(definition_key(code_id))
    if deleted:
        logger.info("definition_deleted code_id=%s", code_id)
    return deleted
