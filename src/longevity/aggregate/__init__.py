"""Average line age aggregation."""

from longevity.aggregate._aggregator import (
    SECONDS_PER_DAY,
    Fact,
    FactKey,
    LongevityAggregator,
    LongevitySummary,
    TrackedIdentities,
    normalize_email,
    summarize,
)

__all__ = [
    "SECONDS_PER_DAY",
    "Fact",
    "FactKey",
    "LongevityAggregator",
    "LongevitySummary",
    "TrackedIdentities",
    "normalize_email",
    "summarize",
]
