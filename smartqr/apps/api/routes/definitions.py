from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from smartqr.apps.api.deps import get_metadata_store, get_now
from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES, NOT_FOUND_RESPONSE
from smartqr.domain.documents import CodeMode, Configuration
from smartqr.providers.metadata.base import MetadataStore
from smartqr.services import definitions as definitions_service


router = APIRouter(prefix="/definitions", tags=["definitions"], responses=DEFAULT_ERROR_RESPONSES)


class DefinitionRequest(BaseModel):
    # Dashboards written against the first API send "type" instead of "mode".
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "mode": "time",
                    "configurations": [
                        {
                            "payloadRef": "5f0c7a0e-3d7e-4d53-9d5f-0a7a4c1b2e11",
                            "displayName": "Breakfast menu",
                            "start": "06:00",
                            "end": "11:00",
                        }
                    ],
                }
            ]
        },
    )

    id: str | None = None
    mode: CodeMode = Field(validation_alias=AliasChoices("mode", "type"))
    configurations: list[Configuration] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    id: str
    deleted: bool


@router.post("")
async def create_definition(
    payload: DefinitionRequest,
    store: MetadataStore = Depends(get_metadata_store),
    now: datetime = Depends(get_now),
) -> dict[str, Any]:
    definition = await definitions_service.save_definition(
        store,
        mode=payload.mode,
        configurations=payload.configurations,
        now=now,
        code_id=payload.id,
    )
    return definition.to_document()


@router.api_route("/{code_id}", methods=["POST", "PUT"])
async def replace_definition(
    code_id: str,
    payload: DefinitionRequest,
    store: MetadataStore = Depends(get_metadata_store),
    now: datetime = Depends(get_now),
) -> dict[str, Any]:
    # Definitions are immutable; writing to an id overwrites the whole document.
    definition = await definitions_service.save_definition(
        store,
        mode=payload.mode,
        configurations=payload.configurations,
        now=now,
        code_id=code_id,
    )
    return definition.to_document()


@router.get("/{code_id}", responses=NOT_FOUND_RESPONSE)
async def get_definition(
    code_id: str,
    store: MetadataStore = Depends(get_metadata_store),
) -> dict[str, Any]:
    definition = await definitions_service.get_definition(store, code_id)
    return definition.to_document()


@router.delete("/{code_id}", response_model=DeleteResponse)
async def delete_definition(
    code_id: str,
    store: MetadataStore = Depends(get_metadata_store),
) -> DeleteResponse:
    deleted = await definitions_service.delete_definition(store, code_id)
    return DeleteResponse(id=code_id, deleted=deleted)
