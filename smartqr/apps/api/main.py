from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from smartqr.apps.api.errors import (
    http_exception_handler,
    smartqr_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from smartqr.apps.api.routes.analytics import router as analytics_router
from smartqr.apps.api.routes.definitions import router as definitions_router
from smartqr.apps.api.routes.files import router as files_router
from smartqr.apps.api.routes.health import router as health_router
from smartqr.apps.api.routes.ops import router as ops_router
from smartqr.apps.api.routes.scan import router as scan_router
from smartqr.apps.api.routes.uploads import router as uploads_router
from smartqr.core.config import get_settings
from smartqr.core.errors import SmartQRError
from smartqr.core.logging import configure_logging
from smartqr.persistence.db import create_tables, dispose_engine, get_engine
from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.metadata.factory import get_metadata_store
from smartqr.providers.metadata.sql import SqlMetadataStore
from smartqr.providers.objects.base import ObjectStore
from smartqr.providers.objects.factory import get_object_store
from smartqr.services.analytics import AnalyticsAggregator
from smartqr.services.gateway import ContentGateway
from smartqr.services.locks import build_analytics_lock
from smartqr.services.telemetry import record_request


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    if isinstance(app.state.metadata_store, SqlMetadataStore) and settings.database_url.startswith("sqlite"):
        # Local sqlite databases are created on demand instead of through migrations.
        await create_tables(get_engine())
    logger.info(
        "app_started app=%s metadata=%s objects=%s",
        settings.app_name,
        settings.metadata_store_provider,
        settings.object_store_provider,
    )
    yield
    # Let detached analytics updates finish before connections close.
    await app.state.aggregator.drain()
    for resource in (app.state.object_store, app.state.analytics_lock):
        close = getattr(resource, "aclose", None)
        if close is not None:
            await close()
    await dispose_engine()


def create_app(
    *,
    metadata_store: MetadataStore | None = None,
    object_store: ObjectStore | None = None,
) -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(title="SmartQR API", lifespan=lifespan)

    # Stores live on app state so every request in this process shares them.
    app.state.metadata_store = metadata_store or get_metadata_store()
    app.state.object_store = object_store or get_object_store()
    app.state.analytics_lock = build_analytics_lock()
    app.state.aggregator = AnalyticsAggregator(app.state.metadata_store, app.state.analytics_lock)
    app.state.gateway = ContentGateway(
        app.state.metadata_store,
        app.state.object_store,
        app.state.aggregator,
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):  # type: ignore[override]
        # Preserve incoming request IDs or assign a new one for traceability.
        request_id = request.headers.get("X-Request-Id") or str(uuid4())
        request.state.request_id = request_id
        start = time.monotonic()
        response = await call_next(request)
        record_request(
            path=request.url.path,
            status_code=response.status_code,
            latency_ms=(time.monotonic() - start) * 1000.0,
        )
        response.headers.setdefault("X-Request-Id", request_id)
        return response

    origins = [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(SmartQRError)
    async def _smartqr_exception_handler(request: Request, exc: SmartQRError):
        return await smartqr_exception_handler(request, exc)

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(request: Request, exc: StarletteHTTPException):
        return await http_exception_handler(request, exc)

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException):
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return await validation_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        return await unhandled_exception_handler(request, exc)

    app.include_router(health_router)
    app.include_router(scan_router)
    app.include_router(analytics_router)
    app.include_router(uploads_router)
    app.include_router(definitions_router)
    app.include_router(files_router)
    app.include_router(ops_router)

    return app


app = create_app()
