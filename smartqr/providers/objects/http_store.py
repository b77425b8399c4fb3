from __future__ import annotations

import asyncio
import hashlib
import logging
import time
from typing import Awaitable, Callable
from urllib.parse import quote

import httpx

from smartqr.core.config import get_settings
from smartqr.core.errors import UpstreamFailureError
from smartqr.services.resilience import RetryPolicy, retry_async
from smartqr.services.telemetry import record_external_call


logger = logging.getLogger(__name__)


class ObjectStoreStatusError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


def _retryable(exc: Exception) -> bool:
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, asyncio.TimeoutError)):
        return True
    status = getattr(exc, "status_code", None)
    return isinstance(status, int) and status >= 500


class HttpObjectStore:
    """B2-style object store reached over HTTP with basic auth.

    Uploads POST the raw bytes to ``{endpoint}/file/{bucket}/{name}`` with the
    file name and SHA-1 digest in ``X-Bz-*`` headers; that same URL is the
    storage locator used for downloads.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        endpoint: str | None = None,
        bucket: str | None = None,
        key_id: str | None = None,
        key: str | None = None,
        policy: RetryPolicy | None = None,
    ) -> None:
        settings = get_settings()
        self._client = client
        self._endpoint = (endpoint or settings.object_store_endpoint).rstrip("/")
        self._bucket = bucket or settings.object_store_bucket
        self._key_id = key_id if key_id is not None else settings.object_store_key_id
        self._key = key if key is not None else settings.object_store_key
        self._timeout_s = settings.object_store_timeout_ms / 1000.0
        self._policy = policy

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        # Reuse a single client per store for connection pooling.
        self._client = httpx.AsyncClient(timeout=self._timeout_s)
        return self._client

    def _auth(self) -> httpx.BasicAuth | None:
        if not self._key_id or not self._key:
            return None
        return httpx.BasicAuth(self._key_id, self._key)

    def locator_for(self, name: str) -> str:
        return f"{self._endpoint}/file/{self._bucket}/{quote(name)}"

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        locator = self.locator_for(name)
        headers = {
            "Content-Type": content_type,
            "X-Bz-File-Name": quote(name),
            "X-Bz-Content-Sha1": hashlib.sha1(data).hexdigest(),
        }

        async def _call() -> httpx.Response:
            response = await self._get_client().post(
                locator, content=data, headers=headers, auth=self._auth()
            )
            if response.status_code >= 500:
                raise ObjectStoreStatusError(response.status_code, response.text)
            return response

        response = await self._send("objects.put", _call, locator)
        if response.status_code >= 400:
            logger.warning(
                "object_store_upload_rejected status=%s name=%s", response.status_code, name
            )
            raise UpstreamFailureError(f"Object store upload failed with status {response.status_code}")
        return locator

    async def get(self, locator: str) -> bytes:
        async def _call() -> httpx.Response:
            response = await self._get_client().get(locator, auth=self._auth())
            if response.status_code >= 500:
                raise ObjectStoreStatusError(response.status_code, response.text)
            return response

        response = await self._send("objects.get", _call, locator)
        if response.status_code >= 400:
            logger.warning(
                "object_store_fetch_rejected status=%s locator=%s", response.status_code, locator
            )
            raise UpstreamFailureError(f"Object store fetch failed with status {response.status_code}")
        return response.content

    async def _send(
        self,
        integration: str,
        call: Callable[[], Awaitable[httpx.Response]],
        locator: str,
    ) -> httpx.Response:
        start = time.monotonic()
        try:
            response = await retry_async(call, policy=self._policy, retryable=_retryable)
        except (httpx.HTTPError, ObjectStoreStatusError, asyncio.TimeoutError) as exc:
            record_external_call(
                integration=integration,
                latency_ms=(time.monotonic() - start) * 1000.0,
                success=False,
            )
            logger.warning(
                "object_store_call_failed integration=%s locator=%s",
                integration,
                locator,
                exc_info=exc,
            )
            raise UpstreamFailureError("Failed to reach object storage") from exc
        record_external_call(
            integration=integration,
            latency_ms=(time.monotonic() - start) * 1000.0,
            success=response.status_code < 400,
        )
        return response

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
