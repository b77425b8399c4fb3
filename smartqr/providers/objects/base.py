from __future__ import annotations

from typing import Protocol


class ObjectStore(Protocol):
    # Durable name -> bytes store; put returns the locator later passed to get.
    async def put(self, name: str, data: bytes, content_type: str) -> str:
        ...

    async def get(self, locator: str) -> bytes:
        ...
