from collections.abc import Callable, Iterator

import pytest

from longevity.aggregate import (
    Fact,
    FactKey,
    LongevityAggregator,
    LongevitySummary,
    TrackedIdentities,
    summarize,
)
from longevity.provenance import LineLifetime, RevisionMarker
from longevity.repository import Commit

DAY = 86_400


@pytest.fixture
def make_record(make_commit: Callable[..., Commit]) -> Callable[..., LineLifetime]:
    def _make(age_days: int, author_email: str = "dev@example.com") -> LineLifetime:
        birth = make_commit(1, author_email=author_email)
        death = make_commit(1 + age_days)
        return LineLifetime(
            birth=RevisionMarker(commit=birth, path="a", index=0),
            death=RevisionMarker(commit=death, path="a", index=0),
        )

    return _make


class TestTrackedIdentities:
    def test_normalizes_and_deduplicates(self) -> None:
        tracked = TrackedIdentities.of(" Me@Example.com ", "me@example.com", "", "you@x.io")

        assert tracked.emails == ("me@example.com", "you@x.io")
        assert len(tracked) == 2

    def test_match_is_case_insensitive(self) -> None:
        tracked = TrackedIdentities.of("me@example.com")

        assert tracked.match("ME@example.COM") == "me@example.com"
        assert tracked.match("other@example.com") is None


class TestLongevityAggregator:
    def test_empty_input_yields_zero_averages(self) -> None:
        summary = LongevityAggregator(TrackedIdentities.of("me@example.com")).summary()

        assert summary.repository_average_age_seconds == 0
        assert summary.repository_line_count == 0
        assert summary.per_author_average_age_seconds == {"me@example.com": 0}
        assert summary.per_author_line_count == {"me@example.com": 0}

    def test_repository_and_author_averages(
        self, make_record: Callable[..., LineLifetime]
    ) -> None:
        aggregator = LongevityAggregator(TrackedIdentities.of("Me@Example.com"))
        for record in (
            make_record(2, "me@example.com"),
            make_record(4, "ME@EXAMPLE.COM"),
            make_record(9, "other@example.com"),
        ):
            aggregator.add(record)

        summary = aggregator.summary()

        assert summary.repository_average_age_seconds == 5 * DAY
        assert summary.repository_line_count == 3
        assert summary.per_author_average_age_seconds == {"me@example.com": 3 * DAY}
        assert summary.per_author_line_count == {"me@example.com": 2}

    def test_average_truncates_to_whole_seconds(
        self, make_commit: Callable[..., Commit]
    ) -> None:
        birth = make_commit(1)
        records = [
            LineLifetime(
                birth=RevisionMarker(commit=birth, path="a", index=0),
                death=RevisionMarker(
                    commit=make_commit(2, commit_time=birth.commit_time + seconds),
                    path="a",
                    index=0,
                ),
            )
            for seconds in (1, 2)
        ]

        assert summarize(records).repository_average_age_seconds == 1

    def test_negative_ages_are_summed_and_truncated_toward_zero(
        self, make_commit: Callable[..., Commit]
    ) -> None:
        birth = make_commit(1)
        records = [
            LineLifetime(
                birth=RevisionMarker(commit=birth, path="a", index=0),
                death=RevisionMarker(
                    commit=make_commit(2, commit_time=birth.commit_time + seconds),
                    path="a",
                    index=0,
                ),
            )
            for seconds in (-DAY - 1, -DAY - 2)
        ]

        summary = summarize(records)

        assert summary.repository_average_age_seconds == -DAY - 1
        assert summary.repository_average_age_days == -1

    def test_consume_respects_limit(
        self, make_record: Callable[..., LineLifetime]
    ) -> None:
        pulled = 0

        def records() -> Iterator[LineLifetime]:
            nonlocal pulled
            for days in range(10):
                pulled += 1
                yield make_record(days)

        aggregator = LongevityAggregator()

        assert aggregator.consume(records(), limit=3) == 3
        assert pulled == 3
        assert aggregator.summary().repository_line_count == 3

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_limit_consumes_nothing(
        self, limit: int, make_record: Callable[..., LineLifetime]
    ) -> None:
        aggregator = LongevityAggregator()

        assert aggregator.consume([make_record(1)], limit=limit) == 0


class TestLongevitySummary:
    def test_days_are_whole_days(self) -> None:
        summary = LongevitySummary(
            repository_average_age_seconds=3 * DAY - 1,
            repository_line_count=1,
            per_author_average_age_seconds={"me@example.com": 2 * DAY},
            per_author_line_count={"me@example.com": 1},
        )

        assert summary.repository_average_age_days == 2
        assert summary.author_average_age_days("Me@Example.com") == 2
        assert summary.author_average_age_days("unknown@example.com") == 0

    def test_to_facts(self, make_record: Callable[..., LineLifetime]) -> None:
        summary = summarize(
            [make_record(2, "a@x.io"), make_record(4, "b@x.io")],
            TrackedIdentities.of("b@x.io", "a@x.io"),
        )

        assert summary.to_facts() == (
            Fact(key=FactKey.LINE_LONGEVITY_REPO, value=3 * DAY),
            Fact(key=FactKey.LINE_LONGEVITY, value=4 * DAY, author="b@x.io"),
            Fact(key=FactKey.LINE_LONGEVITY, value=2 * DAY, author="a@x.io"),
        )
        assert FactKey.LINE_LONGEVITY_REPO == "line-longevity-repo"
