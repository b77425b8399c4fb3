from __future__ import annotations

import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime, timezone

from smartqr.core.config import get_settings
from smartqr.domain.keys import definition_key
from smartqr.persistence.db import create_tables, dispose_engine, get_engine
from smartqr.providers.metadata.factory import get_metadata_store
from smartqr.providers.objects.factory import get_object_store
from smartqr.services.definitions import save_definition
from smartqr.services.payloads import store_payload


DEMO_CODE_ID = "demo-menu"


@dataclass(frozen=True)
class DemoPayload:
    # Small text payloads keep the seed fast and the scan output readable.
    filename: str
    text: str
    start: str
    end: str


DEMO_PAYLOADS: tuple[DemoPayload, ...] = (
    DemoPayload("breakfast.txt", "Breakfast menu: eggs, toast, coffee.", "06:00", "10:59"),
    DemoPayload("lunch.txt", "Lunch menu: soup, sandwiches, salad.", "11:00", "16:59"),
    DemoPayload("dinner.txt", "Dinner menu: pasta, steak, dessert.", "17:00", "05:59"),
)


async def seed_demo() -> int:
    settings = get_settings()
    if settings.database_url.startswith("sqlite"):
        await create_tables(get_engine())
    metadata = get_metadata_store()
    objects = get_object_store()
    now = datetime.now(timezone.utc)

    if await metadata.get(definition_key(DEMO_CODE_ID)) is not None:
        print(f"Demo code '{DEMO_CODE_ID}' already seeded; skipping.")
        return 0

    configurations = []
    for payload in DEMO_PAYLOADS:
        descriptor = await store_payload(
            metadata,
            objects,
            filename=payload.filename,
            content_type="text/plain",
            data=payload.text.encode("utf-8"),
            now=now,
        )
        configurations.append(
            {
                "payloadRef": descriptor.payload_ref,
                "displayName": payload.filename.removesuffix(".txt").title(),
                "start": payload.start,
                "end": payload.end,
            }
        )

    await save_definition(
        metadata,
        mode="time",
        configurations=configurations,
        now=now,
        code_id=DEMO_CODE_ID,
    )
    print(f"Seeded demo code '{DEMO_CODE_ID}' with {len(configurations)} time windows.")
    return 0


async def _run() -> int:
    try:
        return await seed_demo()
    finally:
        await dispose_engine()


def main() -> int:
    # Surface clear failures and exit non-zero so CI/dev scripts can detect issues.
    try:
        return asyncio.run(_run())
    except Exception as exc:  # noqa: BLE001 - surface any setup or store errors
        print(f"seed_demo failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
