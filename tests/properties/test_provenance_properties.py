"""Property-based tests for line provenance reconstruction."""

from hypothesis import given, settings, strategies as st

from longevity.provenance import LineLifetime, ProvenanceReconstructor
from longevity.repository import Commit, FakeRepository
from longevity.repository._edits import compute_edits

# =============================================================================
# Strategies
# =============================================================================

# A file version as a list of lines drawn from a small alphabet, so that
# successive versions share lines and the diffs mix keeps, inserts and deletes
file_version = st.lists(st.sampled_from(["a", "b", "c", "d", "e"]), max_size=8)

single_file_history = st.lists(file_version, min_size=1, max_size=6)

tree_version = st.dictionaries(
    keys=st.sampled_from(["x.txt", "y.txt", "dir/z.txt"]),
    values=file_version,
    min_size=1,
)

multi_file_history = st.lists(tree_version, min_size=1, max_size=5)

Key = tuple[tuple[str, int], tuple[str, int, bool]]


def _content(lines: list[str]) -> str:
    return "".join(f"{line}\n" for line in lines)


def _record_history(versions: list[dict[str, list[str]]]) -> tuple[FakeRepository, list[Commit]]:
    repo = FakeRepository()
    commits = [
        repo.commit({path: _content(lines) for path, lines in version.items()})
        for version in versions
    ]
    return repo, commits


def _records(repo: FakeRepository) -> list[LineLifetime]:
    return list(ProvenanceReconstructor(repo, repo).records())


def _key(record: LineLifetime) -> Key:
    return (
        (record.birth.commit.sha, record.birth.index),
        (record.death.commit.sha, record.death.index, record.death.removed),
    )


def _replay_forward(versions: list[list[str]], commits: list[Commit]) -> list[Key]:
    """Follow every line forward through history and record its fate."""
    lifetimes: list[Key] = []
    alive = [(commits[0].sha, index) for index in range(len(versions[0]))]

    for previous, current, commit in zip(versions, versions[1:], commits[1:], strict=False):
        edits = compute_edits(
            [line.encode() for line in previous], [line.encode() for line in current]
        )
        survivors: list[tuple[str, int]] = []
        position = 0
        for edit in edits:
            survivors.extend(alive[position : edit.old_start])
            lifetimes.extend(
                (alive[index], (commit.sha, index, True))
                for index in range(edit.old_start, edit.old_end)
            )
            survivors.extend((commit.sha, index) for index in range(edit.new_start, edit.new_end))
            position = edit.old_end
        survivors.extend(alive[position:])
        alive = survivors

    head = commits[-1]
    lifetimes.extend(
        (birth, (head.sha, index, False)) for index, birth in enumerate(alive)
    )
    return lifetimes


# =============================================================================
# Reconstruction Properties
# =============================================================================


@settings(max_examples=75, deadline=None)
@given(versions=single_file_history)
def test_backward_reconstruction_matches_forward_replay(versions: list[list[str]]) -> None:
    """Property: every line's birth and death match a forward replay of history."""
    repo, commits = _record_history([{"a.txt": lines} for lines in versions])

    reconstructed = sorted(_key(record) for record in _records(repo))

    assert reconstructed == sorted(_replay_forward(versions, commits))


@settings(max_examples=50, deadline=None)
@given(versions=multi_file_history)
def test_every_head_line_is_reported_exactly_once(
    versions: list[dict[str, list[str]]],
) -> None:
    """Property: each line of the head tree is the death of exactly one live record."""
    repo, commits = _record_history(versions)
    head = commits[-1]

    live = [
        (record.death.path, record.death.index)
        for record in _records(repo)
        if record.death.commit == head and not record.death.removed
    ]

    expected = [
        (path, index) for path, lines in versions[-1].items() for index in range(len(lines))
    ]
    assert sorted(live) == sorted(expected)


@settings(max_examples=50, deadline=None)
@given(versions=multi_file_history)
def test_record_count_equals_inserted_line_count(
    versions: list[dict[str, list[str]]],
) -> None:
    """Property: walking to the root reports one record per line ever inserted."""
    repo, commits = _record_history(versions)

    inserted = 0
    parent: Commit | None = None
    for commit in commits:
        inserted += sum(
            edit.new_length for diff in repo.diff(parent, commit) for edit in diff.edits
        )
        parent = commit

    assert len(_records(repo)) == inserted


@settings(max_examples=50, deadline=None)
@given(versions=multi_file_history)
def test_births_never_follow_deaths(versions: list[dict[str, list[str]]]) -> None:
    """Property: with increasing commit times, every age is the raw time difference."""
    repo, _ = _record_history(versions)

    for record in _records(repo):
        elapsed = record.death.commit.commit_time - record.birth.commit.commit_time
        assert elapsed >= 0
        assert record.age_seconds == elapsed


@settings(max_examples=30, deadline=None)
@given(versions=multi_file_history)
def test_reconstruction_is_deterministic(versions: list[dict[str, list[str]]]) -> None:
    """Property: two runs over the same history yield identical records."""
    repo, _ = _record_history(versions)

    assert _records(repo) == _records(repo)
