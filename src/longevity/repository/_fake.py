"""In-memory history for exercising reconstruction without git.

FakeRepository satisfies both RepositoryProvider and DiffEngine. Commits
are whole-tree snapshots built up one call at a time.
"""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import TracebackType
from typing import Final, Self

from dulwich.objects import Blob
from dulwich.patch import is_binary

from longevity.exceptions import RepositoryError, RevisionNotFoundError
from longevity.repository._edits import build_path_diff, decode_lines
from longevity.repository._models import ChangeType, Commit, PathDiff, TreeFile

_BASE_TIMESTAMP: Final = 1_700_000_000
_DAY_SECONDS: Final = 86_400
_MIN_SHA_ABBREV_LENGTH: Final = 4

FileContent = str | bytes


@dataclass(slots=True)
class FakeRepository:
    """Scripted commit history kept entirely in memory.

    Each call to ``commit`` records a full snapshot of the file tree. Diffs
    between snapshots are computed with the same edit-list code the real
    repository uses; renames and copies are never inferred and must be
    declared on the commit that performs them.

    Example:
        >>> repo = FakeRepository()
        >>> root = repo.commit({"a.txt": "one\\ntwo\\n"})
        >>> head = repo.commit(
        ...     {"b.txt": "one\\ntwo\\n"}, renames={"b.txt": "a.txt"}
        ... )
        >>> [d.change_type for d in repo.diff(root, head)]
        [<ChangeType.RENAME: 'rename'>]
    """

    commits: dict[str, Commit] = field(default_factory=dict)
    blobs: dict[str, bytes] = field(default_factory=dict)
    trees: dict[str, dict[str, str]] = field(default_factory=dict)
    refs: dict[str, str] = field(default_factory=dict)
    renames: dict[str, dict[str, str]] = field(default_factory=dict)
    copies: dict[str, dict[str, str]] = field(default_factory=dict)
    head: str | None = None
    closed: bool = False
    _commit_counter: int = field(default=0)

    # =========================================================================
    # Context Manager Protocol
    # =========================================================================

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True

    # =========================================================================
    # History Construction
    # =========================================================================

    def commit(  # noqa: PLR0913
        self,
        files: Mapping[str, FileContent],
        *,
        author_email: str = "dev@example.com",
        author_name: str = "Dev",
        timestamp: int | None = None,
        message: str = "",
        renames: Mapping[str, str] | None = None,
        copies: Mapping[str, str] | None = None,
        parents: tuple[str, ...] | None = None,
    ) -> Commit:
        """Record a new commit and move HEAD to it.

        Args:
            files: Complete tree of the new commit, path to content.
            author_email: Author email.
            author_name: Author name.
            timestamp: Commit time; defaults to one day after the previous
                commit.
            message: Commit message; defaults to "commit <n>".
            renames: Renames performed by this commit, new path to old path.
            copies: Copies performed by this commit, new path to source path.
            parents: Parent commit ids; defaults to the current HEAD.

        Returns:
            The recorded commit.
        """
        self._commit_counter += 1
        sha = f"{self._commit_counter:040x}"
        if parents is None:
            parents = (self.head,) if self.head is not None else ()
        if timestamp is None:
            timestamp = _BASE_TIMESTAMP + self._commit_counter * _DAY_SECONDS

        tree: dict[str, str] = {}
        for path, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            blob_id = Blob.from_string(data).id.decode("ascii")
            self.blobs[blob_id] = data
            tree[path] = blob_id

        new_commit = Commit(
            sha=sha,
            parents=parents,
            author_name=author_name,
            author_email=author_email,
            commit_time=timestamp,
            message=message or f"commit {self._commit_counter}",
        )
        self.commits[sha] = new_commit
        self.trees[sha] = tree
        self.renames[sha] = dict(renames or {})
        self.copies[sha] = dict(copies or {})
        self.head = sha
        return new_commit

    def tag(self, name: str, sha: str) -> None:
        """Point a named reference at a commit."""
        self.refs[name] = sha

    # =========================================================================
    # RepositoryProvider
    # =========================================================================

    def resolve_commit(self, ref: str) -> Commit:
        if ref == "HEAD" and self.head is not None:
            return self.commits[self.head]
        if ref in self.refs:
            return self.commits[self.refs[ref]]
        if ref in self.commits:
            return self.commits[ref]
        if len(ref) >= _MIN_SHA_ABBREV_LENGTH:
            matches = [sha for sha in self.commits if sha.startswith(ref.lower())]
            if len(matches) == 1:
                return self.commits[matches[0]]
        msg = f"Revision not found: {ref}"
        raise RevisionNotFoundError(msg, ref=ref)

    def get_commit(self, sha: str) -> Commit:
        try:
            return self.commits[sha]
        except KeyError as e:
            msg = f"Commit not found: {sha}"
            raise RevisionNotFoundError(msg, ref=sha) from e

    def head_tree(self, commit: Commit) -> Iterator[TreeFile]:
        tree = self._tree(commit)
        for path in sorted(tree):
            yield TreeFile(path=path, blob_id=tree[path])

    def blob_at(self, commit: Commit, path: str) -> str | None:
        return self._tree(commit).get(path)

    def is_binary(self, blob_id: str) -> bool:
        return is_binary(self._blob(blob_id))

    def read_lines(self, blob_id: str) -> list[str]:
        return decode_lines(self._blob(blob_id))

    # =========================================================================
    # DiffEngine
    # =========================================================================

    def diff(self, old: Commit | None, new: Commit) -> list[PathDiff]:
        """Compute per-path differences between two recorded snapshots.

        Renames and copies declared on ``new`` are reported as such; every
        other path present on only one side is an addition or a deletion.
        """
        old_tree = self._tree(old) if old is not None else {}
        new_tree = self._tree(new)
        renames = self.renames.get(new.sha, {})
        copies = self.copies.get(new.sha, {})
        rename_sources = set(renames.values())

        diffs: list[PathDiff] = []
        for path in sorted(set(old_tree) | set(new_tree)):
            if path in new_tree and path in renames:
                change = (ChangeType.RENAME, renames[path], path)
            elif path in new_tree and path in copies:
                change = (ChangeType.COPY, copies[path], path)
            elif path in new_tree and path in old_tree:
                if old_tree[path] == new_tree[path]:
                    continue
                change = (ChangeType.MODIFY, path, path)
            elif path in new_tree:
                change = (ChangeType.ADD, None, path)
            elif path in rename_sources:
                continue
            else:
                change = (ChangeType.DELETE, path, None)
            diffs.append(self._path_diff(*change, old_tree, new_tree))
        return diffs

    def _path_diff(  # noqa: PLR0913
        self,
        change_type: ChangeType,
        old_path: str | None,
        new_path: str | None,
        old_tree: Mapping[str, str],
        new_tree: Mapping[str, str],
    ) -> PathDiff:
        old_id = old_tree.get(old_path) if old_path is not None else None
        new_id = new_tree.get(new_path) if new_path is not None else None
        return build_path_diff(
            change_type,
            old_path=old_path,
            new_path=new_path,
            old_data=self._blob(old_id) if old_id is not None else None,
            new_data=self._blob(new_id) if new_id is not None else None,
            old_id=old_id,
            new_id=new_id,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _tree(self, commit: Commit) -> dict[str, str]:
        try:
            return self.trees[commit.sha]
        except KeyError as e:
            msg = f"Commit not found: {commit.sha}"
            raise RepositoryError(msg, commit_id=commit.sha) from e

    def _blob(self, blob_id: str) -> bytes:
        try:
            return self.blobs[blob_id]
        except KeyError as e:
            msg = f"Object not found: {blob_id}"
            raise RepositoryError(msg) from e
