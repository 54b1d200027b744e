"""Line longevity analysis for git repositories.

Reconstructs, for every line that existed in a range of history, the commit
that introduced it and the last commit it was seen in, and reduces those
lifetimes to average line age for the repository and selected authors.

Example:
    >>> from longevity import reconstruct, summarize, TrackedIdentities
    >>> records = reconstruct(".", tail_ref="v1.0")  # doctest: +SKIP
    >>> summary = summarize(records, TrackedIdentities.of("me@example.com"))  # doctest: +SKIP
    >>> summary.repository_average_age_days  # doctest: +SKIP
    42
"""

from longevity.aggregate import (
    Fact,
    FactKey,
    LongevityAggregator,
    LongevitySummary,
    TrackedIdentities,
    summarize,
)
from longevity.exceptions import (
    ConfigError,
    LineTableError,
    LongevityError,
    RepositoryError,
    RepositoryNotFoundError,
    RevisionNotFoundError,
)
from longevity.provenance import (
    LineLifetime,
    ProvenanceReconstructor,
    RevisionMarker,
    collect_lines,
    reconstruct,
)
from longevity.repository import Commit, GitRepository

__all__ = [
    "Commit",
    "ConfigError",
    "Fact",
    "FactKey",
    "GitRepository",
    "LineLifetime",
    "LineTableError",
    "LongevityAggregator",
    "LongevityError",
    "LongevitySummary",
    "ProvenanceReconstructor",
    "RepositoryError",
    "RepositoryNotFoundError",
    "RevisionMarker",
    "RevisionNotFoundError",
    "TrackedIdentities",
    "collect_lines",
    "reconstruct",
    "summarize",
]
