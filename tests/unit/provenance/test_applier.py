from collections.abc import Callable

import pytest
from pytest_mock import MockerFixture

from longevity.exceptions import LineTableError
from longevity.provenance import DiffApplier, DiffStep, LineTable, RevisionMarker
from longevity.repository import ChangeType, Commit, Edit, FakeRepository, PathDiff


@pytest.fixture
def head(make_commit: Callable[..., Commit]) -> Commit:
    return make_commit(9)


@pytest.fixture
def commit(make_commit: Callable[..., Commit]) -> Commit:
    return make_commit(5)


@pytest.fixture
def table() -> LineTable:
    return LineTable()


def _modify(path: str, *edits: Edit) -> PathDiff:
    return PathDiff(ChangeType.MODIFY, old_path=path, new_path=path, edits=edits)


class TestInsertions:
    def test_replaced_line_is_finished_and_placeholder_opened(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("a.txt", 3, head)
        step = DiffStep(commit=commit, parent=None, diffs=(_modify("a.txt", Edit(1, 2, 1, 2)),))

        records = list(DiffApplier(table).apply(step))

        assert len(records) == 1
        assert records[0].birth == RevisionMarker(commit=commit, path="a.txt", index=1)
        assert records[0].death == RevisionMarker(commit=head, path="a.txt", index=1)
        assert table.get("a.txt") == [
            RevisionMarker(commit=head, path="a.txt", index=0),
            RevisionMarker(commit=commit, path="a.txt", index=1, removed=True),
            RevisionMarker(commit=head, path="a.txt", index=2),
        ]

    def test_ranges_are_taken_highest_first(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        # parent ["x", "y"] -> commit ["n0", "x", "y", "n3"]
        table.seed("a.txt", 4, head)
        step = DiffStep(
            commit=commit,
            parent=None,
            diffs=(_modify("a.txt", Edit(0, 0, 0, 1), Edit(2, 2, 3, 4)),),
        )

        records = list(DiffApplier(table).apply(step))

        assert [(r.birth.index, r.death.index) for r in records] == [(3, 3), (0, 0)]
        assert [m.index for m in table.get("a.txt")] == [1, 2]

    def test_addition_drains_the_path(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("new.txt", 2, head)
        diff = PathDiff(
            ChangeType.ADD, old_path=None, new_path="new.txt", edits=(Edit(0, 0, 0, 2),)
        )

        records = list(DiffApplier(table).apply(DiffStep(commit=commit, parent=None, diffs=(diff,))))

        assert [r.birth.index for r in records] == [0, 1]
        assert all(r.birth.commit == commit for r in records)
        assert table.get("new.txt") == []

    def test_text_is_read_from_provider(
        self, table: LineTable, head: Commit, fake_repo: FakeRepository
    ) -> None:
        commit = fake_repo.commit({"a.txt": "first\nsecond\n"})
        blob_id = fake_repo.blob_at(commit, "a.txt")
        table.seed("a.txt", 2, head)
        diff = PathDiff(
            ChangeType.ADD,
            old_path=None,
            new_path="a.txt",
            edits=(Edit(0, 0, 0, 2),),
            new_id=blob_id,
        )

        applier = DiffApplier(table, provider=fake_repo)
        records = list(applier.apply(DiffStep(commit=commit, parent=None, diffs=(diff,))))

        assert [r.text for r in records] == ["first", "second"]


class TestDeletions:
    def test_deleted_lines_get_placeholders(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        # parent ["x", "d", "y"] -> commit ["x", "y"]
        table.seed("a.txt", 2, head)
        step = DiffStep(commit=commit, parent=None, diffs=(_modify("a.txt", Edit(1, 2, 1, 1)),))

        records = list(DiffApplier(table).apply(step))

        assert records == []
        assert table.get("a.txt")[1] == RevisionMarker(
            commit=commit, path="a.txt", index=1, removed=True
        )
        assert len(table.get("a.txt")) == 3

    def test_deleted_file_is_reborn_under_old_path(
        self, table: LineTable, commit: Commit
    ) -> None:
        diff = PathDiff(
            ChangeType.DELETE, old_path="gone.txt", new_path=None, edits=(Edit(0, 2, 0, 0),)
        )

        list(DiffApplier(table).apply(DiffStep(commit=commit, parent=None, diffs=(diff,))))

        assert table.get("gone.txt") == [
            RevisionMarker(commit=commit, path="gone.txt", index=0, removed=True),
            RevisionMarker(commit=commit, path="gone.txt", index=1, removed=True),
        ]

    def test_replacement_keeps_deleted_and_inserted_lines_distinct(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("a.txt", 1, head)
        step = DiffStep(commit=commit, parent=None, diffs=(_modify("a.txt", Edit(0, 1, 0, 1)),))

        (inserted,) = DiffApplier(table).apply(step)
        (placeholder,) = table.get("a.txt")

        assert inserted.birth.index == placeholder.index == 0
        assert inserted.birth.commit == placeholder.commit
        assert inserted.birth != placeholder


class TestRenames:
    def test_sequence_moves_back_to_old_path(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("new.txt", 3, head)
        diff = PathDiff(
            ChangeType.RENAME,
            old_path="old.txt",
            new_path="new.txt",
            edits=(Edit(1, 1, 1, 2),),
        )

        records = list(DiffApplier(table).apply(DiffStep(commit=commit, parent=None, diffs=(diff,))))

        assert [(r.birth.path, r.birth.index) for r in records] == [("new.txt", 1)]
        assert "new.txt" not in table
        assert [m.index for m in table.get("old.txt")] == [0, 2]

    def test_swapped_paths(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("a", 2, head)
        table.seed("b", 1, head)
        diffs = (
            PathDiff(ChangeType.RENAME, old_path="a", new_path="b"),
            PathDiff(ChangeType.RENAME, old_path="b", new_path="a"),
        )

        list(DiffApplier(table).apply(DiffStep(commit=commit, parent=None, diffs=diffs)))

        assert [m.path for m in table.get("a")] == ["b"]
        assert [m.path for m in table.get("b")] == ["a", "a"]

    def test_rename_into_re_added_path(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        # "a" was renamed to "b" and a new "a" was added in the same commit
        table.seed("a", 1, head)
        table.seed("b", 2, head)
        diffs = (
            PathDiff(ChangeType.ADD, old_path=None, new_path="a", edits=(Edit(0, 0, 0, 1),)),
            PathDiff(ChangeType.RENAME, old_path="a", new_path="b"),
        )

        records = list(DiffApplier(table).apply(DiffStep(commit=commit, parent=None, diffs=diffs)))

        assert len(records) == 1
        assert [m.path for m in table.get("a")] == ["b", "b"]
        assert "b" not in table


class TestSkipped:
    def test_binary_and_copy_diffs_leave_table_untouched(
        self, table: LineTable, head: Commit, commit: Commit, mocker: MockerFixture
    ) -> None:
        table.seed("a.txt", 2, head)
        logger = mocker.Mock()
        diffs = (
            PathDiff(ChangeType.MODIFY, old_path="img", new_path="img", binary=True),
            PathDiff(
                ChangeType.COPY, old_path="a.txt", new_path="c.txt", edits=(Edit(0, 0, 0, 1),)
            ),
        )

        records = list(
            DiffApplier(table, logger=logger).apply(DiffStep(commit=commit, parent=None, diffs=diffs))
        )

        assert records == []
        assert len(table.get("a.txt")) == 2
        assert "c.txt" not in table
        assert logger.debug.call_count == 2
        logger.debug.assert_any_call(
            "path_diff_skipped",
            path="c.txt",
            change_type="copy",
            binary=False,
            commit=commit.sha,
        )


class TestErrors:
    def test_untracked_path_raises(self, table: LineTable, commit: Commit) -> None:
        step = DiffStep(commit=commit, parent=None, diffs=(_modify("a.txt", Edit(0, 1, 0, 1)),))

        with pytest.raises(LineTableError):
            list(DiffApplier(table).apply(step))

    def test_range_past_end_raises(
        self, table: LineTable, head: Commit, commit: Commit
    ) -> None:
        table.seed("a.txt", 1, head)
        step = DiffStep(commit=commit, parent=None, diffs=(_modify("a.txt", Edit(0, 0, 0, 3)),))

        with pytest.raises(LineTableError):
            list(DiffApplier(table).apply(step))
