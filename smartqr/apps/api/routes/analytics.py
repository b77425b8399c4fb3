from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from smartqr.apps.api.deps import get_aggregator
from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from smartqr.services.analytics import AnalyticsAggregator


router = APIRouter(prefix="/analytics", tags=["analytics"], responses=DEFAULT_ERROR_RESPONSES)


class BatchAnalyticsRequest(BaseModel):
    ids: list[str] = Field(max_length=500)

    model_config = {
        "json_schema_extra": {"examples": [{"ids": ["menu-qr", "event-poster"]}]},
    }


@router.post("/batch")
async def batch_analytics(
    payload: BatchAnalyticsRequest,
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> list[dict[str, Any]]:
    # Unknown ids come back as zero-valued summaries.
    results = await aggregator.load_many(payload.ids)
    return [{"id": code_id, **summary.to_document()} for code_id, summary in results]


@router.get("/{code_id}")
async def get_analytics(
    code_id: str,
    aggregator: AnalyticsAggregator = Depends(get_aggregator),
) -> dict[str, Any]:
    summary = await aggregator.load(code_id)
    return summary.to_document()
