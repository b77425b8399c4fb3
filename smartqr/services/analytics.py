from __future__ import annotations

import asyncio
import logging
from datetime import tzinfo
from typing import Iterable

from smartqr.core.config import get_settings
from smartqr.domain.documents import AnalyticsSummary, ScanEvent
from smartqr.domain.keys import analytics_key
from smartqr.providers.metadata.base import MetadataStore
from smartqr.services.device_class import classify_device
from smartqr.services.insights import derive_insights
from smartqr.services.locks import KeyedLock, LocalKeyedLock
from smartqr.services.telemetry import increment_counter


logger = logging.getLogger(__name__)


def apply_scan(
    summary: AnalyticsSummary,
    event: ScanEvent,
    *,
    recent_limit: int,
    tz: tzinfo | None = None,
) -> AnalyticsSummary:
    """Fold one scan into ``summary`` in place and return it."""
    summary.total += 1
    summary.last_scan_at = event.timestamp

    device = classify_device(event.user_agent_raw).value
    summary.by_device_class[device] = summary.by_device_class.get(device, 0) + 1
    summary.by_region[event.region] = summary.by_region.get(event.region, 0) + 1
    summary.by_city[event.city] = summary.by_city.get(event.city, 0) + 1

    summary.recent_events.append(event)
    overflow = len(summary.recent_events) - recent_limit
    if overflow > 0:
        # FIFO eviction: oldest events leave first.
        del summary.recent_events[:overflow]

    summary.insights = derive_insights(summary, tz)
    return summary


class AnalyticsAggregator:
    """Maintains one rolling summary document per code.

    Updates are read-modify-write against the metadata store, serialized per
    code id through ``lock``. With the default in-process lock, writers in
    other processes can still overwrite each other, so totals are advisory.
    """

    def __init__(
        self,
        store: MetadataStore,
        lock: KeyedLock | None = None,
        *,
        recent_limit: int | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self._store = store
        self._lock = lock or LocalKeyedLock()
        self._recent_limit = recent_limit or get_settings().analytics_recent_events_limit
        self._tz = tz
        self._pending: set[asyncio.Task[None]] = set()

    async def load(self, code_id: str) -> AnalyticsSummary:
        document = await self._store.get(analytics_key(code_id))
        if document is None:
            return AnalyticsSummary()
        return AnalyticsSummary.model_validate(document)

    async def load_many(self, code_ids: Iterable[str]) -> list[tuple[str, AnalyticsSummary]]:
        ids = list(code_ids)
        summaries = await asyncio.gather(*(self.load(code_id) for code_id in ids))
        return list(zip(ids, summaries))

    async def record(self, code_id: str, event: ScanEvent) -> None:
        # Best-effort: failures are logged and never reach the scanning client.
        try:
            async with self._lock.hold(code_id):
                summary = await self.load(code_id)
                apply_scan(summary, event, recent_limit=self._recent_limit, tz=self._tz)
                await self._store.put(analytics_key(code_id), summary.to_document())
        except Exception as exc:  # noqa: BLE001 - analytics is a side channel
            increment_counter("analytics_failures_total")
            logger.warning("analytics_record_failed code_id=%s", code_id, exc_info=exc)
            return
        increment_counter("analytics_recorded_total")

    def schedule(self, code_id: str, event: ScanEvent) -> asyncio.Task[None]:
        # Keep a strong reference so detached tasks are not garbage collected mid-flight.
        task = asyncio.create_task(self.record(code_id, event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled update; used at shutdown and in tests."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
