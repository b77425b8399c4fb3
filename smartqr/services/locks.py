from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Protocol

from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, LockNotOwnedError, RedisError

from smartqr.core.config import get_settings
from smartqr.core.errors import StoreConfigError
from smartqr.services.telemetry import increment_counter


logger = logging.getLogger(__name__)


class KeyedLock(Protocol):
    def hold(self, key: str) -> AsyncContextManager[None]:
        ...


class LocalKeyedLock:
    """One ``asyncio.Lock`` per key, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] = self._users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def active_keys(self) -> list[str]:
        return list(self._locks)


class RedisKeyedLock:
    """Cross-process per-key lock backed by ``redis.asyncio`` locks.

    If Redis cannot be reached when acquiring, the update runs under an
    in-process lock instead, so analytics keep their single-process guarantee.
    A lock that expired before release is logged; the guarded write has
    already completed by then.
    """

    def __init__(
        self,
        redis: Redis | None = None,
        *,
        url: str | None = None,
        prefix: str,
        timeout_s: int,
    ) -> None:
        self._redis = redis
        self._url = url
        self._prefix = prefix
        self._timeout_s = timeout_s
        self._fallback = LocalKeyedLock()

    def _client(self) -> Redis:
        if self._redis is None:
            # from_url does not connect; failures surface on first command.
            self._redis = Redis.from_url(
                self._url or get_settings().redis_url,
                socket_connect_timeout=self._timeout_s,
            )
        return self._redis

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock: Lock | None = self._client().lock(
            f"{self._prefix}:{key}",
            timeout=self._timeout_s,
            blocking_timeout=self._timeout_s,
        )
        try:
            acquired = await lock.acquire()
        except (RedisError, OSError) as exc:
            increment_counter("analytics_lock_fallbacks_total")
            logger.warning("analytics_lock_redis_unavailable key=%s", key, exc_info=exc)
            lock = None
        if lock is None:
            async with self._fallback.hold(key):
                yield
            return
        if not acquired:
            raise LockError(f"Timed out waiting for analytics lock on {key}")
        try:
            yield
        finally:
            await self._release(lock, key)

    async def _release(self, lock: Lock, key: str) -> None:
        try:
            await lock.release()
        except LockNotOwnedError:
            increment_counter("analytics_lock_expired_total")
            logger.warning("analytics_lock_expired key=%s timeout_s=%s", key, self._timeout_s)
        except (RedisError, OSError) as exc:
            # The key still expires after timeout_s.
            logger.warning("analytics_lock_release_failed key=%s", key, exc_info=exc)

    async def aclose(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()


def build_analytics_lock() -> KeyedLock:
    settings = get_settings()
    backend = (settings.analytics_lock_backend or "local").lower()

    if backend == "local":
        return LocalKeyedLock()
    if backend == "redis":
        return RedisKeyedLock(
            url=settings.redis_url,
            prefix=settings.analytics_lock_prefix,
            timeout_s=settings.analytics_lock_timeout_s,
        )

    raise StoreConfigError(f"Unsupported analytics lock backend: {backend}")
