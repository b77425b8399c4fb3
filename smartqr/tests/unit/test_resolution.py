from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from smartqr.domain.documents import UNKNOWN, CodeMode, Configuration, RequestContext
from smartqr.services.resolution import clock_time, in_window, resolve
from smartqr.tests.utils.clock import at


def _window(ref: str, start: str, end: str) -> Configuration:
    return Configuration(payload_ref=ref, start=start, end=end)


def _region(ref: str, code: str) -> Configuration:
    return Configuration(payload_ref=ref, region_code=code)


@pytest.mark.parametrize(
    ("hour", "minute", "expected"),
    [(23, 30, True), (1, 0, True), (22, 0, True), (2, 0, True), (12, 0, False), (2, 1, False)],
)
def test_wraparound_window(hour: int, minute: int, expected: bool) -> None:
    configs = [_window("night", "22:00", "02:00")]
    match = resolve(configs, CodeMode.TIME, RequestContext(now=at(hour, minute)))
    assert (match is not None) is expected


def test_window_bounds_are_inclusive() -> None:
    assert in_window("09:00", "09:00", "17:00")
    assert in_window("17:00", "09:00", "17:00")
    assert not in_window("08:59", "09:00", "17:00")
    assert not in_window("17:01", "09:00", "17:00")


def test_time_mode_first_match_wins_for_overlaps() -> None:
    configs = [
        _window("all-day", "00:00", "23:59"),
        _window("lunch", "11:00", "14:00"),
    ]
    match = resolve(configs, CodeMode.TIME, RequestContext(now=at(12)))
    assert match is not None
    assert match.payload_ref == "all-day"

    reordered = list(reversed(configs))
    match = resolve(reordered, CodeMode.TIME, RequestContext(now=at(12)))
    assert match is not None
    assert match.payload_ref == "lunch"


def test_time_mode_uses_display_timezone() -> None:
    configs = [_window("morning", "09:00", "11:00")]
    plus_two = timezone(timedelta(hours=2))
    # 08:00 UTC is 10:00 at UTC+2.
    assert resolve(configs, CodeMode.TIME, RequestContext(now=at(8)), tz=plus_two) is not None
    assert resolve(configs, CodeMode.TIME, RequestContext(now=at(8))) is None


def test_naive_timestamps_are_treated_as_utc() -> None:
    assert clock_time(datetime(2026, 3, 14, 7, 5)) == "07:05"


def test_location_mode_exact_first_match() -> None:
    configs = [_region("us-a", "US"), _region("fr", "FR"), _region("us-b", "US")]
    match = resolve(configs, CodeMode.LOCATION, RequestContext(now=at(9), region="US"))
    assert match is not None
    assert match.payload_ref == "us-a"


def test_location_mode_is_case_sensitive() -> None:
    configs = [_region("us", "US")]
    assert resolve(configs, CodeMode.LOCATION, RequestContext(now=at(9), region="us")) is None


def test_unknown_region_only_matches_explicit_unknown() -> None:
    context = RequestContext(now=at(9), region=UNKNOWN)
    assert resolve([_region("us", "US")], CodeMode.LOCATION, context) is None
    fallback = _region("fallback", UNKNOWN)
    assert resolve([_region("us", "US"), fallback], CodeMode.LOCATION, context) == fallback


def test_empty_configurations_resolve_to_none() -> None:
    assert resolve([], CodeMode.TIME, RequestContext(now=at(9))) is None
    assert resolve([], "location", RequestContext(now=at(9), region="US")) is None


def test_resolve_is_idempotent() -> None:
    configs = [_window("a", "08:00", "10:00"), _window("b", "09:00", "12:00")]
    context = RequestContext(now=at(9, 30))
    assert resolve(configs, CodeMode.TIME, context) == resolve(configs, CodeMode.TIME, context)
