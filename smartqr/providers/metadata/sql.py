from __future__ import annotations

import logging
import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from smartqr.core.errors import UpstreamFailureError
from smartqr.persistence.db import get_sessionmaker
from smartqr.persistence.repos import metadata as metadata_repo
from smartqr.services.telemetry import record_external_call


logger = logging.getLogger(__name__)


class SqlMetadataStore:
    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession] | None = None) -> None:
        self._sessionmaker = sessionmaker

    def _session(self) -> AsyncSession:
        maker = self._sessionmaker or get_sessionmaker()
        return maker()

    async def get(self, key: str) -> dict[str, Any] | None:
        start = time.monotonic()
        try:
            async with self._session() as session:
                value = await metadata_repo.get_entry(session, key)
        except SQLAlchemyError as exc:
            self._record(start, success=False)
            logger.warning("metadata_get_failed key=%s", key, exc_info=exc)
            raise UpstreamFailureError("Metadata store read failed") from exc
        self._record(start, success=True)
        return value

    async def put(self, key: str, value: dict[str, Any]) -> None:
        start = time.monotonic()
        try:
            async with self._session() as session:
                await metadata_repo.put_entry(session, key, value)
                await session.commit()
        except SQLAlchemyError as exc:
            self._record(start, success=False)
            logger.warning("metadata_put_failed key=%s", key, exc_info=exc)
            raise UpstreamFailureError("Metadata store write failed") from exc
        self._record(start, success=True)

    async def delete(self, key: str) -> bool:
        start = time.monotonic()
        try:
            async with self._session() as session:
                deleted = await metadata_repo.delete_entry(session, key)
                await session.commit()
        except SQLAlchemyError as exc:
            self._record(start, success=False)
            logger.warning("metadata_delete_failed key=%s", key, exc_info=exc)
            raise UpstreamFailureError("Metadata store delete failed") from exc
        self._record(start, success=True)
        return deleted

    @staticmethod
    def _record(start: float, *, success: bool) -> None:
        record_external_call(
            integration="metadata.sql",
            latency_ms=(time.monotonic() - start) * 1000.0,
            success=success,
        )
