from __future__ import annotations

from collections import Counter
from datetime import tzinfo

from smartqr.domain.documents import AnalyticsSummary, Insight
from smartqr.services.resolution import to_local


# Peak-time insight needs more than this many recent events.
PEAK_MIN_EVENTS = 10
# Geo-dominance insight fires when the top region's share strictly exceeds this percentage.
GEO_DOMINANCE_PCT = 40

PEAK_TIME = "peak_time"
GEO_DOMINANCE = "geo_dominance"


def peak_hour(summary: AnalyticsSummary, tz: tzinfo | None = None) -> int | None:
    """Return the busiest hour of day across recent events, smallest hour on ties."""
    if len(summary.recent_events) <= PEAK_MIN_EVENTS:
        return None
    counts = Counter(to_local(event.timestamp, tz).hour for event in summary.recent_events)
    best = max(counts.values())
    return min(hour for hour, count in counts.items() if count == best)


def _round_half_up(numerator: int, denominator: int) -> int:
    return (2 * numerator + denominator) // (2 * denominator)


def dominant_region(summary: AnalyticsSummary) -> tuple[str, int] | None:
    if not summary.by_region or summary.total <= 0:
        return None
    # max() keeps the first-inserted region among equal counts.
    region, count = max(summary.by_region.items(), key=lambda item: item[1])
    if count * 100 <= GEO_DOMINANCE_PCT * summary.total:
        return None
    return region, _round_half_up(count * 100, summary.total)


def derive_insights(summary: AnalyticsSummary, tz: tzinfo | None = None) -> list[Insight]:
    insights: list[Insight] = []

    hour = peak_hour(summary, tz)
    if hour is not None:
        insights.append(
            Insight(
                kind=PEAK_TIME,
                title="Peak Activity",
                message=(
                    f"Most scans occur around {hour}:00. "
                    "Consider time-based content changes."
                ),
                hour=hour,
            )
        )

    dominant = dominant_region(summary)
    if dominant is not None:
        region, percent = dominant
        insights.append(
            Insight(
                kind=GEO_DOMINANCE,
                title="Targeting Opportunity",
                message=(
                    f"{percent}% of traffic is from {region}. "
                    "Localized content could boost conversion."
                ),
                region=region,
                percent=percent,
            )
        )

    return insights
