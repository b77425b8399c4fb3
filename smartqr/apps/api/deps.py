from __future__ import annotations

from datetime import datetime, timezone

from fastapi import Request

from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.objects.base import ObjectStore
from smartqr.services.analytics import AnalyticsAggregator
from smartqr.services.gateway import ContentGateway


def get_metadata_store(request: Request) -> MetadataStore:
    return request.app.state.metadata_store


def get_object_store(request: Request) -> ObjectStore:
    return request.app.state.object_store


def get_aggregator(request: Request) -> AnalyticsAggregator:
    return request.app.state.aggregator


def get_gateway(request: Request) -> ContentGateway:
    return request.app.state.gateway


def get_now() -> datetime:
    # Single clock seam for scans, uploads and definitions; tests override it.
    return datetime.now(timezone.utc)
