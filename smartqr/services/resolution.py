from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from functools import lru_cache
from typing import Sequence
from zoneinfo import ZoneInfo

from smartqr.core.config import get_settings
from smartqr.domain.documents import CodeMode, Configuration, RequestContext


@lru_cache(maxsize=32)
def _zone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def display_zone() -> tzinfo:
    return _zone(get_settings().display_timezone)


def to_local(moment: datetime, tz: tzinfo | None = None) -> datetime:
    # Naive timestamps are treated as UTC.
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz or display_zone())


def clock_time(moment: datetime, tz: tzinfo | None = None) -> str:
    return to_local(moment, tz).strftime("%H:%M")


def _minutes(clock: str) -> int:
    hours, minutes = clock.split(":")
    return int(hours) * 60 + int(minutes)


def in_window(clock: str, start: str, end: str) -> bool:
    """Inclusive window check; ``start > end`` means the window crosses midnight."""
    current, lower, upper = _minutes(clock), _minutes(start), _minutes(end)
    if lower <= upper:
        return lower <= current <= upper
    return current >= lower or current <= upper


def resolve(
    configurations: Sequence[Configuration],
    mode: CodeMode | str,
    context: RequestContext,
    *,
    tz: tzinfo | None = None,
) -> Configuration | None:
    # First match in authored order wins; authors control priority by ordering.
    mode = CodeMode(mode)
    if mode is CodeMode.TIME:
        clock = clock_time(context.now, tz)
        for config in configurations:
            if config.start is None or config.end is None:
                continue
            if in_window(clock, config.start, config.end):
                return config
        return None
    for config in configurations:
        if config.region_code == context.region:
            return config
    return None
