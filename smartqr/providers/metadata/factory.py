from __future__ import annotations

from smartqr.core.config import get_settings
from smartqr.core.errors import StoreConfigError
from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.metadata.memory import InMemoryMetadataStore
from smartqr.providers.metadata.sql import SqlMetadataStore


def get_metadata_store() -> MetadataStore:
    settings = get_settings()
    provider = (settings.metadata_store_provider or "sql").lower()

    if provider == "memory":
        return InMemoryMetadataStore()
    if provider == "sql":
        return SqlMetadataStore()

    raise StoreConfigError(f"Unsupported metadata store provider: {provider}")
