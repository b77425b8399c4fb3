from __future__ import annotations

from smartqr.core.config import get_settings
from smartqr.core.errors import StoreConfigError
from smartqr.providers.objects.base import ObjectStore
from smartqr.providers.objects.http_store import HttpObjectStore
from smartqr.providers.objects.memory import InMemoryObjectStore


def get_object_store() -> ObjectStore:
    settings = get_settings()
    provider = (settings.object_store_provider or "http").lower()

    if provider == "memory":
        return InMemoryObjectStore()
    if provider == "http":
        return HttpObjectStore()

    raise StoreConfigError(f"Unsupported object store provider: {provider}")
