from __future__ import annotations

import logging

import pytest

from smartqr.apps.api.main import lifespan
from smartqr.core.config import get_settings


@pytest.mark.asyncio
async def test_health(client) -> None:
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-request-id"]


@pytest.mark.asyncio
async def test_request_id_is_preserved(client) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_cors_preflight(client) -> None:
    response = await client.options(
        "/definitions",
        headers={
            "Origin": "https://dashboard.example.com",
            "Access-Control-Request-Method": "PUT",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "PUT" in response.headers["access-control-allow-methods"]


@pytest.mark.asyncio
async def test_ops_metrics_reports_requests(client) -> None:
    await client.get("/health")
    await client.get("/code/unknown")
    response = await client.get("/ops/metrics", params={"window_s": 60})
    assert response.status_code == 200
    body = response.json()
    assert body["window_s"] == 60
    assert body["requests"] == 2
    assert body["availability"] == 100.0


@pytest.mark.asyncio
async def test_unknown_route_uses_error_shape(client) -> None:
    response = await client.get("/nope")
    assert response.status_code == 404
    assert response.json() == {"error": "NOT_FOUND", "message": "Not Found"}


@pytest.mark.asyncio
async def test_lifespan_logs_app_name(app, caplog, monkeypatch) -> None:
    monkeypatch.setenv("APP_NAME", "smartqr-test")
    get_settings.cache_clear()
    caplog.set_level(logging.INFO, logger="smartqr.apps.api.main")

    async with lifespan(app):
        pass

    assert "app_started app=smartqr-test metadata=memory objects=memory" in caplog.text
