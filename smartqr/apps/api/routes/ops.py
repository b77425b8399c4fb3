from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from smartqr.apps.api.openapi import DEFAULT_ERROR_RESPONSES
from smartqr.services.telemetry import metrics_snapshot


router = APIRouter(prefix="/ops", tags=["ops"], responses=DEFAULT_ERROR_RESPONSES)


@router.get("/metrics")
async def metrics(window_s: int = Query(default=300, ge=1, le=86400)) -> dict[str, Any]:
    # In-process counters only; each worker reports its own view.
    return metrics_snapshot(window_s)
