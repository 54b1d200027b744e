from datetime import timedelta

from longevity.repository import ChangeType, Commit, PathDiff


class TestCommit:
    def test_timestamp_uses_commit_timezone(self) -> None:
        commit = Commit(sha="a" * 40, commit_time=1_700_000_000, commit_timezone=3600)

        assert commit.timestamp.utcoffset() == timedelta(hours=1)
        assert int(commit.timestamp.timestamp()) == 1_700_000_000

    def test_short_sha(self) -> None:
        assert Commit(sha="0123456789" + "0" * 30).short_sha == "0123456"

    def test_subject_is_first_message_line(self) -> None:
        commit = Commit(sha="a" * 40, message="Fix parser\n\nLonger body.\n")

        assert commit.subject == "Fix parser"

    def test_first_parent(self) -> None:
        assert Commit(sha="a" * 40).first_parent is None
        assert Commit(sha="a" * 40, parents=("b" * 40, "c" * 40)).first_parent == "b" * 40


class TestPathDiff:
    def test_path_prefers_new_path(self) -> None:
        diff = PathDiff(ChangeType.RENAME, old_path="old.txt", new_path="new.txt")

        assert diff.path == "new.txt"

    def test_path_of_deletion_is_old_path(self) -> None:
        diff = PathDiff(ChangeType.DELETE, old_path="gone.txt", new_path=None)

        assert diff.path == "gone.txt"
