from __future__ import annotations

import math
import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Deque


@dataclass(frozen=True)
class RequestSample:
    ts: float
    path: str
    status_code: int
    latency_ms: float


@dataclass(frozen=True)
class ExternalCallSample:
    ts: float
    integration: str
    latency_ms: float
    success: bool


_request_samples: Deque[RequestSample] = deque(maxlen=20000)
_external_samples: Deque[ExternalCallSample] = deque(maxlen=10000)
_counters: dict[str, int] = defaultdict(int)


def record_request(*, path: str, status_code: int, latency_ms: float) -> None:
    _request_samples.append(
        RequestSample(ts=time.time(), path=path, status_code=status_code, latency_ms=latency_ms)
    )


def record_external_call(*, integration: str, latency_ms: float, success: bool) -> None:
    # Capture store call latency and outcomes.
    _external_samples.append(
        ExternalCallSample(
            ts=time.time(),
            integration=integration,
            latency_ms=latency_ms,
            success=success,
        )
    )


def increment_counter(name: str, value: int = 1) -> None:
    _counters[name] += value


def get_counter(name: str) -> int:
    return _counters.get(name, 0)


def _percentile(values: list[float], pct: float) -> float | None:
    if not values:
        return None
    ordered = sorted(values)
    index = max(0, math.ceil(pct / 100.0 * len(ordered)) - 1)
    return ordered[index]


def _window_samples(window_s: int) -> list[RequestSample]:
    cutoff = time.time() - window_s
    return [sample for sample in _request_samples if sample.ts >= cutoff]


def availability(window_s: int) -> float | None:
    # Percentage of non-5xx requests over the window.
    samples = _window_samples(window_s)
    if not samples:
        return None
    failures = sum(1 for sample in samples if sample.status_code >= 500)
    return ((len(samples) - failures) / len(samples)) * 100.0


def external_call_stats(window_s: int) -> dict[str, dict[str, Any]]:
    cutoff = time.time() - window_s
    grouped: dict[str, list[ExternalCallSample]] = defaultdict(list)
    for sample in _external_samples:
        if sample.ts >= cutoff:
            grouped[sample.integration].append(sample)
    stats: dict[str, dict[str, Any]] = {}
    for integration, samples in grouped.items():
        failures = sum(1 for sample in samples if not sample.success)
        stats[integration] = {
            "calls": len(samples),
            "failures": failures,
            "p95_ms": _percentile([sample.latency_ms for sample in samples], 95),
        }
    return stats


def metrics_snapshot(window_s: int = 300) -> dict[str, Any]:
    samples = _window_samples(window_s)
    return {
        "window_s": window_s,
        "requests": len(samples),
        "availability": availability(window_s),
        "p95_latency_ms": _percentile([sample.latency_ms for sample in samples], 95),
        "external": external_call_stats(window_s),
        "counters": dict(_counters),
    }


def reset_telemetry() -> None:
    _request_samples.clear()
    _external_samples.clear()
    _counters.clear()
