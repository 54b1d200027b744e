from collections.abc import Iterator, Mapping
from pathlib import Path

import pytest
from dulwich.index import commit_tree
from dulwich.objects import Blob, Tag
from dulwich.objects import Commit as GitCommit
from dulwich.repo import Repo

_BASE_TIMESTAMP = 1_700_000_000
_DAY_SECONDS = 86_400
_FILE_MODE = 0o100644


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


class GitRepoBuilder:
    """Write commits with fixed timestamps straight into a git object store.

    Each commit records a complete tree. Commits are one day apart unless a
    timestamp is given. A commit extends HEAD unless explicit parents are
    given, and moves HEAD unless update_head is False.
    """

    def __init__(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.repo = Repo.init(str(path))
        self.head: bytes | None = None
        self._count = 0

    def commit(  # noqa: PLR0913
        self,
        files: Mapping[str, str | bytes],
        *,
        message: str = "",
        author_email: str = "dev@example.com",
        timestamp: int | None = None,
        timezone: int = 0,
        parents: tuple[str, ...] | None = None,
        update_head: bool = True,
    ) -> str:
        self._count += 1
        store = self.repo.object_store

        entries: list[tuple[bytes, bytes, int]] = []
        for file_path, content in files.items():
            blob = Blob.from_string(content.encode() if isinstance(content, str) else content)
            store.add_object(blob)
            entries.append((file_path.encode(), blob.id, _FILE_MODE))

        commit = GitCommit()
        commit.tree = commit_tree(store, entries)
        if parents is not None:
            commit.parents = [sha.encode("ascii") for sha in parents]
        else:
            commit.parents = [self.head] if self.head is not None else []
        identity = f"Dev <{author_email}>".encode()
        commit.author = commit.committer = identity
        when = (
            timestamp
            if timestamp is not None
            else _BASE_TIMESTAMP + self._count * _DAY_SECONDS
        )
        commit.author_time = commit.commit_time = when
        commit.author_timezone = commit.commit_timezone = timezone
        commit.encoding = b"UTF-8"
        commit.message = (message or f"commit {self._count}").encode() + b"\n"
        store.add_object(commit)

        if update_head:
            self.repo.refs[b"HEAD"] = commit.id
            self.head = commit.id
        return commit.id.decode("ascii")

    def branch(self, name: str, sha: str) -> None:
        self.repo.refs[f"refs/heads/{name}".encode()] = sha.encode("ascii")

    def tag(self, name: str, sha: str, *, annotated: bool = False) -> None:
        target = sha.encode("ascii")
        if annotated:
            tag = Tag()
            tag.tagger = b"Dev <dev@example.com>"
            tag.message = f"Release {name}\n".encode()
            tag.name = name.encode()
            tag.object = (GitCommit, target)
            tag.tag_time = _BASE_TIMESTAMP
            tag.tag_timezone = 0
            self.repo.object_store.add_object(tag)
            target = tag.id
        self.repo.refs[f"refs/tags/{name}".encode()] = target

    def close(self) -> None:
        self.repo.close()


@pytest.fixture
def git_repo(tmp_path: Path) -> Iterator[GitRepoBuilder]:
    """Create an empty git repository with a commit builder."""
    builder = GitRepoBuilder(tmp_path / "repo")
    yield builder
    builder.close()
