from __future__ import annotations

from typing import Any, Protocol


class MetadataStore(Protocol):
    # Durable key -> JSON document store; last write wins, no cross-key transactions.
    async def get(self, key: str) -> dict[str, Any] | None:
        ...

    async def put(self, key: str, value: dict[str, Any]) -> None:
        ...

    async def delete(self, key: str) -> bool:
        ...
