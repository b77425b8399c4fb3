from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


UNKNOWN = "Unknown"

_CLOCK_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


class CodeMode(str, Enum):
    TIME = "time"
    LOCATION = "location"


class DeviceClass(str, Enum):
    MOBILE = "Mobile"
    DESKTOP = "Desktop"
    TABLET = "Tablet"
    OTHER = "Other"


def empty_device_buckets() -> dict[str, int]:
    return {device.value: 0 for device in DeviceClass}


class Document(BaseModel):
    # Stored documents and API payloads use camelCase keys; Python code uses snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def normalize_clock(value: str) -> str:
    """Validate an ``H:MM``/``HH:MM`` clock string and return it zero padded."""
    match = _CLOCK_RE.match(value.strip())
    if not match:
        raise ValueError(f"invalid clock time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"clock time out of range: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


class Configuration(Document):
    model_config = ConfigDict(frozen=True)

    payload_ref: str = Field(min_length=1)
    display_name: str = ""
    start: str | None = None
    end: str | None = None
    region_code: str | None = None

    @field_validator("start", "end")
    @classmethod
    def _clock(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_clock(value)


class CodeDefinition(Document):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    mode: CodeMode
    configurations: tuple[Configuration, ...] = ()
    created_at: datetime

    @model_validator(mode="after")
    def _configurations_match_mode(self) -> "CodeDefinition":
        # Every configuration must carry the matching rule for its parent's mode.
        for index, config in enumerate(self.configurations):
            if self.mode is CodeMode.TIME and (config.start is None or config.end is None):
                raise ValueError(f"configuration {index} needs start and end for time mode")
            if self.mode is CodeMode.LOCATION and not config.region_code:
                raise ValueError(f"configuration {index} needs regionCode for location mode")
        return self


class PayloadDescriptor(Document):
    model_config = ConfigDict(frozen=True)

    payload_ref: str
    original_name: str
    mime_type: str
    byte_size: int = Field(ge=0)
    storage_locator: str
    uploaded_at: datetime


class ScanEvent(Document):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    region: str = UNKNOWN
    city: str = UNKNOWN
    user_agent_raw: str = UNKNOWN


class Insight(Document):
    kind: str
    title: str
    message: str
    hour: int | None = None
    region: str | None = None
    percent: int | None = None


class AnalyticsSummary(Document):
    total: int = Field(default=0, ge=0)
    by_region: dict[str, int] = Field(default_factory=dict)
    by_city: dict[str, int] = Field(default_factory=dict)
    by_device_class: dict[str, int] = Field(default_factory=empty_device_buckets)
    recent_events: list[ScanEvent] = Field(default_factory=list)
    last_scan_at: datetime | None = None
    insights: list[Insight] = Field(default_factory=list)

    @field_validator("by_device_class")
    @classmethod
    def _all_buckets(cls, value: dict[str, int]) -> dict[str, int]:
        # Older documents may miss buckets; keep the fixed device enum complete.
        buckets = empty_device_buckets()
        for key, count in value.items():
            if key in buckets:
                buckets[key] = count
        return buckets


@dataclass(frozen=True)
class RequestContext:
    # Facts derived from one inbound scan request.
    now: datetime
    region: str = UNKNOWN
    city: str = UNKNOWN
    user_agent: str = UNKNOWN

    def to_scan_event(self) -> ScanEvent:
        return ScanEvent(
            timestamp=self.now,
            region=self.region,
            city=self.city,
            user_agent_raw=self.user_agent,
        )
