from __future__ import annotations

from smartqr.core.errors import UpstreamFailureError


LOCATOR_SCHEME = "memory://"


class InMemoryObjectStore:
    def __init__(self) -> None:
        self._objects: dict[str, tuple[bytes, str]] = {}

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        self._objects[name] = (bytes(data), content_type)
        return f"{LOCATOR_SCHEME}{name}"

    async def get(self, locator: str) -> bytes:
        name = locator.removeprefix(LOCATOR_SCHEME)
        if name not in self._objects:
            # Missing objects look like a non-success upstream response.
            raise UpstreamFailureError(f"Object not found in storage: {name}")
        return self._objects[name][0]

    async def remove(self, name: str) -> None:
        self._objects.pop(name, None)
