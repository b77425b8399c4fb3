from __future__ import annotations

import base64
import hashlib

import httpx
import pytest

from smartqr.core.errors import UpstreamFailureError
from smartqr.providers.objects.http_store import HttpObjectStore
from smartqr.services.resilience import RetryPolicy


_POLICY = RetryPolicy(timeout_ms=1000, max_attempts=2, backoff_ms=1)


def _store(handler) -> HttpObjectStore:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpObjectStore(
        client,
        endpoint="https://objects.example.com/",
        bucket="codes",
        key_id="key-id",
        key="secret",
        policy=_POLICY,
    )


@pytest.mark.asyncio
async def test_put_posts_bytes_with_b2_headers() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"fileId": "x"})

    store = _store(handler)
    locator = await store.put("abc-menu card.pdf", b"pdf-bytes", "application/pdf")

    assert locator == "https://objects.example.com/file/codes/abc-menu%20card.pdf"
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == locator
    assert request.content == b"pdf-bytes"
    assert request.headers["X-Bz-File-Name"] == "abc-menu%20card.pdf"
    assert request.headers["X-Bz-Content-Sha1"] == hashlib.sha1(b"pdf-bytes").hexdigest()
    assert request.headers["Content-Type"] == "application/pdf"
    expected_auth = base64.b64encode(b"key-id:secret").decode("ascii")
    assert request.headers["Authorization"] == f"Basic {expected_auth}"


@pytest.mark.asyncio
async def test_get_returns_content() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        return httpx.Response(200, content=b"payload")

    store = _store(handler)
    assert await store.get("https://objects.example.com/file/codes/a.bin") == b"payload"


@pytest.mark.asyncio
async def test_get_client_error_is_upstream_failure() -> None:
    store = _store(lambda request: httpx.Response(404))
    with pytest.raises(UpstreamFailureError):
        await store.get("https://objects.example.com/file/codes/missing.bin")


@pytest.mark.asyncio
async def test_get_retries_server_errors() -> None:
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503)
        return httpx.Response(200, content=b"ok")

    store = _store(handler)
    assert await store.get("https://objects.example.com/file/codes/a.bin") == b"ok"
    assert calls["count"] == 2


@pytest.mark.asyncio
async def test_network_errors_become_upstream_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    store = _store(handler)
    with pytest.raises(UpstreamFailureError):
        await store.get("https://objects.example.com/file/codes/a.bin")


@pytest.mark.asyncio
async def test_rejected_upload_raises() -> None:
    store = _store(lambda request: httpx.Response(401, text="bad auth"))
    with pytest.raises(UpstreamFailureError):
        await store.put("a.bin", b"x", "application/octet-stream")
