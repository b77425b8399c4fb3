from __future__ import annotations

from datetime import datetime
from typing import Mapping
from urllib.parse import unquote

from smartqr.core.config import get_settings
from smartqr.domain.documents import UNKNOWN, RequestContext


# Edge placeholders that carry no usable location.
_UNRESOLVED_REGIONS = {"XX", "T1"}


def _clean(value: str | None) -> str:
    if value is None:
        return UNKNOWN
    # Proxies percent-encode non-ASCII city names.
    value = unquote(value).strip()
    return value or UNKNOWN


def derive_request_context(
    headers: Mapping[str, str],
    *,
    now: datetime,
) -> RequestContext:
    """Extract scan context from request headers; missing facts become ``"Unknown"``."""
    settings = get_settings()
    lookup = {key.lower(): value for key, value in headers.items()}

    region = _clean(lookup.get(settings.geo_region_header.lower()))
    if region in _UNRESOLVED_REGIONS:
        region = UNKNOWN

    return RequestContext(
        now=now,
        region=region,
        city=_clean(lookup.get(settings.geo_city_header.lower())),
        user_agent=_clean(lookup.get("user-agent")),
    )
