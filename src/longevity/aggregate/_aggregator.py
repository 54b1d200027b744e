"""Line age aggregation.

This module reduces line lifetime records into repository-wide and
per-author average line age. It knows nothing about version control beyond
the author email and the age carried by each record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

    from longevity.provenance import LineLifetime

SECONDS_PER_DAY: Final = 86_400


def normalize_email(email: str) -> str:
    """Normalize an email for identity matching: trimmed and lowercased."""
    return email.strip().lower()


@dataclass(frozen=True, slots=True)
class TrackedIdentities:
    """The author emails whose lines are averaged separately.

    Matching is case-insensitive and ignores surrounding whitespace. Emails
    are kept in their normalized form.

    Attributes:
        emails: Normalized emails, in the order they were first given.
    """

    emails: tuple[str, ...] = ()

    @classmethod
    def of(cls, *emails: str) -> TrackedIdentities:
        """Build the set from raw emails, dropping blanks and duplicates."""
        seen: dict[str, None] = {}
        for email in emails:
            normalized = normalize_email(email)
            if normalized:
                seen.setdefault(normalized, None)
        return cls(emails=tuple(seen))

    def match(self, email: str) -> str | None:
        """Return the tracked identity ``email`` belongs to, if any."""
        normalized = normalize_email(email)
        return normalized if normalized in self.emails else None

    def __len__(self) -> int:
        return len(self.emails)


class FactKey(StrEnum):
    """Keys of the statistics reported for a repository."""

    LINE_LONGEVITY_REPO = "line-longevity-repo"
    LINE_LONGEVITY = "line-longevity"


@dataclass(frozen=True, slots=True)
class Fact:
    """A single reportable statistic.

    Attributes:
        key: What the value measures.
        value: The measured value, average line age in seconds.
        author: The author email the fact is about, or None for
            repository-wide facts.
    """

    key: FactKey
    value: int
    author: str | None = None


@dataclass(frozen=True, slots=True)
class LongevitySummary:
    """Average line age for a repository and for each tracked identity.

    Averages are truncated to whole seconds and are zero when no line
    contributed.

    Attributes:
        repository_average_age_seconds: Average over every line.
        repository_line_count: Number of lines averaged.
        per_author_average_age_seconds: Average per tracked email.
        per_author_line_count: Lines averaged per tracked email.
    """

    repository_average_age_seconds: int = 0
    repository_line_count: int = 0
    per_author_average_age_seconds: dict[str, int] = field(default_factory=dict)
    per_author_line_count: dict[str, int] = field(default_factory=dict)

    @property
    def repository_average_age_days(self) -> int:
        return _truncate(self.repository_average_age_seconds, SECONDS_PER_DAY)

    def author_average_age_days(self, email: str) -> int:
        """Return a tracked author's average line age in whole days."""
        seconds = self.per_author_average_age_seconds.get(normalize_email(email), 0)
        return _truncate(seconds, SECONDS_PER_DAY)

    def to_facts(self) -> tuple[Fact, ...]:
        """Render the summary as reportable facts.

        One repository-wide fact, followed by one fact per tracked identity
        in the order the identities were given.
        """
        facts = [
            Fact(
                key=FactKey.LINE_LONGEVITY_REPO,
                value=self.repository_average_age_seconds,
            )
        ]
        facts.extend(
            Fact(key=FactKey.LINE_LONGEVITY, value=average, author=email)
            for email, average in self.per_author_average_age_seconds.items()
        )
        return tuple(facts)


def _truncate(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // denominator
    return quotient if numerator >= 0 else -quotient


def _average(total: int, count: int) -> int:
    return _truncate(total, count) if count > 0 else 0


class LongevityAggregator:
    """Accumulate line ages into repository and per-author totals.

    Example:
        >>> aggregator = LongevityAggregator(TrackedIdentities.of("me@example.com"))
        >>> aggregator.consume(records)  # doctest: +SKIP
        >>> aggregator.summary().repository_average_age_days  # doctest: +SKIP
        42
    """

    __slots__ = ("_author_counts", "_author_sums", "_count", "_sum", "_tracked")

    def __init__(self, tracked: TrackedIdentities | None = None) -> None:
        self._tracked = tracked if tracked is not None else TrackedIdentities()
        self._sum = 0
        self._count = 0
        self._author_sums: dict[str, int] = dict.fromkeys(self._tracked.emails, 0)
        self._author_counts: dict[str, int] = dict.fromkeys(self._tracked.emails, 0)

    def add(self, record: LineLifetime) -> None:
        """Add one record, attributing it to the author of its birth commit."""
        age = record.age_seconds
        self._sum += age
        self._count += 1

        email = self._tracked.match(record.birth.commit.author_email)
        if email is not None:
            self._author_sums[email] += age
            self._author_counts[email] += 1

    def consume(
        self, records: Iterable[LineLifetime], *, limit: int | None = None
    ) -> int:
        """Add records until exhausted or ``limit`` records have been added.

        Stopping early leaves the rest of ``records`` unconsumed, so a lazy
        sequence is not pulled further than needed.

        Returns:
            Number of records added.
        """
        added = 0
        if limit is not None and limit <= 0:
            return added
        for record in records:
            self.add(record)
            added += 1
            if limit is not None and added >= limit:
                break
        return added

    def summary(self) -> LongevitySummary:
        return LongevitySummary(
            repository_average_age_seconds=_average(self._sum, self._count),
            repository_line_count=self._count,
            per_author_average_age_seconds={
                email: _average(self._author_sums[email], self._author_counts[email])
                for email in self._tracked.emails
            },
            per_author_line_count=dict(self._author_counts),
        )


def summarize(
    records: Iterable[LineLifetime],
    tracked: TrackedIdentities | None = None,
    *,
    limit: int | None = None,
) -> LongevitySummary:
    """Summarize line lifetimes into average line age.

    Args:
        records: Line lifetime records, typically from ``reconstruct``.
        tracked: Identities to average separately.
        limit: Stop after this many records.

    Returns:
        The repository-wide and per-identity averages.
    """
    aggregator = LongevityAggregator(tracked)
    aggregator.consume(records, limit=limit)
    return aggregator.summary()
