from __future__ import annotations

import copy
from typing import Any


class InMemoryMetadataStore:
    def __init__(self) -> None:
        # Copy on read and write so callers never alias stored documents.
        self._entries: dict[str, dict[str, Any]] = {}

    async def get(self, key: str) -> dict[str, Any] | None:
        value = self._entries.get(key)
        return copy.deepcopy(value) if value is not None else None

    async def put(self, key: str, value: dict[str, Any]) -> None:
        self._entries[key] = copy.deepcopy(value)

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None
