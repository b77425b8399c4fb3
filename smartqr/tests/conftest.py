from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from smartqr.apps.api.main import create_app
from smartqr.core.config import get_settings
from smartqr.providers.metadata.memory import InMemoryMetadataStore
from smartqr.providers.objects.memory import InMemoryObjectStore
from smartqr.services.telemetry import reset_telemetry


@pytest.fixture(autouse=True)
def memory_backed_settings(monkeypatch) -> None:
    # Keep every test on in-process stores and a fixed display timezone.
    monkeypatch.setenv("METADATA_STORE_PROVIDER", "memory")
    monkeypatch.setenv("OBJECT_STORE_PROVIDER", "memory")
    monkeypatch.setenv("ANALYTICS_LOCK_BACKEND", "local")
    monkeypatch.setenv("DISPLAY_TIMEZONE", "UTC")
    get_settings.cache_clear()
    reset_telemetry()
    yield
    get_settings.cache_clear()


@pytest.fixture
def metadata_store() -> InMemoryMetadataStore:
    return InMemoryMetadataStore()


@pytest.fixture
def object_store() -> InMemoryObjectStore:
    return InMemoryObjectStore()


@pytest.fixture
def app(metadata_store, object_store):
    return create_app(metadata_store=metadata_store, object_store=object_store)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    await app.state.aggregator.drain()
