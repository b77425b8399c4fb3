from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from smartqr.domain.models import MetadataEntry


async def get_entry(session: AsyncSession, key: str) -> dict[str, Any] | None:
    result = await session.execute(select(MetadataEntry.value_json).where(MetadataEntry.key == key))
    return result.scalar_one_or_none()


async def put_entry(session: AsyncSession, key: str, value: dict[str, Any]) -> None:
    # Whole-document overwrite; merge keeps insert and update on one code path.
    await session.merge(MetadataEntry(key=key, value_json=value))


async def delete_entry(session: AsyncSession, key: str) -> bool:
    result = await session.execute(delete(MetadataEntry).where(MetadataEntry.key == key))
    return bool(result.rowcount)
