from __future__ import annotations

import pytest

from smartqr.services.telemetry import get_counter
from smartqr.tests.utils.clock import at, set_clock


async def _upload(client, name: str, data: bytes, content_type: str) -> dict:
    response = await client.post("/upload", files={"file": (name, data, content_type)})
    assert response.status_code == 200
    return response.json()


async def _define(client, code_id: str, body: dict) -> None:
    response = await client.put(f"/definitions/{code_id}", json=body)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_time_code_serves_payload_inside_window(app, client) -> None:
    descriptor = await _upload(client, "menu.pdf", b"%PDF-menu", "application/pdf")
    await _define(
        client,
        "menu",
        {
            "mode": "time",
            "configurations": [
                {"payloadRef": descriptor["payloadRef"], "displayName": "Day", "start": "09:00", "end": "17:00"}
            ],
        },
    )

    set_clock(app, at(10))
    response = await client.get(
        "/code/menu",
        headers={"Origin": "https://dashboard.example.com", "cf-ipcountry": "US"},
    )
    assert response.status_code == 200
    assert response.content == b"%PDF-menu"
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["cache-control"] == "public, max-age=3600"
    assert response.headers["content-disposition"].startswith('inline; filename="menu.pdf"')
    assert response.headers["access-control-allow-origin"] == "*"

    set_clock(app, at(20))
    response = await client.get("/code/menu")
    assert response.status_code == 404
    assert response.json() == {
        "error": "NO_MATCH",
        "message": "No content available for current conditions",
    }

    await app.state.aggregator.drain()
    analytics = (await client.get("/analytics/menu")).json()
    assert analytics["total"] == 2
    assert analytics["byRegion"] == {"US": 1, "Unknown": 1}
    assert get_counter("scans_no_match_total") == 1


@pytest.mark.asyncio
async def test_overnight_window_matches_after_midnight(app, client) -> None:
    descriptor = await _upload(client, "late.txt", b"late", "text/plain")
    await _define(
        client,
        "late",
        {
            "mode": "time",
            "configurations": [{"payloadRef": descriptor["payloadRef"], "start": "22:00", "end": "02:00"}],
        },
    )
    set_clock(app, at(1, 30))
    response = await client.get("/code/late")
    assert response.status_code == 200
    assert response.content == b"late"


@pytest.mark.asyncio
async def test_location_code_uses_edge_country_header(app, client) -> None:
    french = await _upload(client, "fr.txt", b"bonjour", "text/plain")
    german = await _upload(client, "de.txt", b"hallo", "text/plain")
    await _define(
        client,
        "greeting",
        {
            "mode": "location",
            "configurations": [
                {"payloadRef": french["payloadRef"], "regionCode": "FR"},
                {"payloadRef": german["payloadRef"], "regionCode": "DE"},
            ],
        },
    )

    response = await client.get("/code/greeting", headers={"cf-ipcountry": "DE"})
    assert response.status_code == 200
    assert response.content == b"hallo"

    response = await client.get("/code/greeting", headers={"cf-ipcountry": "fr"})
    assert response.status_code == 404
    assert response.json()["error"] == "NO_MATCH"

    response = await client.get("/code/greeting")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_code_is_not_found_and_not_recorded(app, client) -> None:
    response = await client.get("/code/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"

    await app.state.aggregator.drain()
    assert (await app.state.metadata_store.get("analytics-missing")) is None


@pytest.mark.asyncio
async def test_missing_stored_bytes_is_upstream_failure(app, client, object_store) -> None:
    descriptor = await _upload(client, "gone.txt", b"gone", "text/plain")
    await _define(
        client,
        "gone",
        {
            "mode": "time",
            "configurations": [{"payloadRef": descriptor["payloadRef"], "start": "00:00", "end": "23:59"}],
        },
    )
    await object_store.remove(f"{descriptor['payloadRef']}-gone.txt")

    response = await client.get("/code/gone")
    assert response.status_code == 502
    assert response.json()["error"] == "UPSTREAM_FAILURE"
