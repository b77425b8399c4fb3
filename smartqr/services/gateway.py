from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import tzinfo

from smartqr.core.config import get_settings
from smartqr.core.errors import NoMatchError, NotFoundError, UpstreamFailureError
from smartqr.domain.documents import PayloadDescriptor, RequestContext
from smartqr.providers.metadata.base import MetadataStore
from smartqr.providers.objects.base import ObjectStore
from smartqr.services.analytics import AnalyticsAggregator
from smartqr.services.definitions import get_definition
from smartqr.services.payloads import get_descriptor
from smartqr.services.resolution import resolve
from smartqr.services.telemetry import increment_counter


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServedPayload:
    content: bytes
    mime_type: str
    filename: str


class ContentGateway:
    def __init__(
        self,
        metadata: MetadataStore,
        objects: ObjectStore,
        aggregator: AnalyticsAggregator,
        *,
        tz: tzinfo | None = None,
        fetch_timeout_ms: int | None = None,
    ) -> None:
        self._metadata = metadata
        self._objects = objects
        self._aggregator = aggregator
        self._tz = tz
        self._fetch_timeout_ms = fetch_timeout_ms or get_settings().scan_fetch_timeout_ms

    async def serve(self, code_id: str, context: RequestContext) -> ServedPayload:
        """Resolve a scan to payload bytes.

        Raises ``NotFoundError`` for unknown codes or descriptors,
        ``NoMatchError`` when no configuration fits ``context`` and
        ``UpstreamFailureError`` when storage cannot deliver the bytes. The
        analytics update is scheduled before resolution and never awaited.
        """
        definition = await get_definition(self._metadata, code_id)

        increment_counter("scans_total")
        self._aggregator.schedule(code_id, context.to_scan_event())

        match = resolve(definition.configurations, definition.mode, context, tz=self._tz)
        if match is None:
            increment_counter("scans_no_match_total")
            raise NoMatchError("No content available for current conditions")

        try:
            descriptor = await get_descriptor(self._metadata, match.payload_ref)
        except NotFoundError:
            # The definition points at a payload that no longer has metadata.
            logger.error(
                "payload_descriptor_missing code_id=%s payload_ref=%s",
                code_id,
                match.payload_ref,
            )
            raise
        return await self._fetch(descriptor)

    async def download(self, payload_ref: str) -> ServedPayload:
        # Direct, non-contextual download by descriptor reference.
        descriptor = await get_descriptor(self._metadata, payload_ref)
        return await self._fetch(descriptor)

    async def _fetch(self, descriptor: PayloadDescriptor) -> ServedPayload:
        try:
            content = await asyncio.wait_for(
                self._objects.get(descriptor.storage_locator),
                timeout=self._fetch_timeout_ms / 1000.0,
            )
        except asyncio.TimeoutError as exc:
            increment_counter("object_fetch_timeouts_total")
            logger.warning("object_fetch_timeout payload_ref=%s", descriptor.payload_ref)
            raise UpstreamFailureError("Timed out retrieving content from storage") from exc
        return ServedPayload(
            content=content,
            mime_type=descriptor.mime_type or "application/octet-stream",
            filename=descriptor.original_name,
        )
