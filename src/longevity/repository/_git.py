"""Git repository access backed by dulwich.

This module provides GitRepository, which satisfies both RepositoryProvider
and DiffEngine against an on-disk git repository.
"""

from __future__ import annotations

import re
import stat
from pathlib import Path
from typing import TYPE_CHECKING, Final, Self

from dulwich.diff_tree import RenameDetector, tree_changes
from dulwich.errors import NotGitRepository
from dulwich.object_store import tree_lookup_path
from dulwich.objects import S_ISGITLINK, Blob, Tag, Tree
from dulwich.objects import Commit as GitCommit
from dulwich.patch import is_binary
from dulwich.repo import Repo

from longevity.exceptions import (
    RepositoryError,
    RepositoryNotFoundError,
    RevisionNotFoundError,
)
from longevity.repository._edits import build_path_diff, decode_lines
from longevity.repository._models import ChangeType, Commit, PathDiff, TreeFile

if TYPE_CHECKING:
    from collections.abc import Iterator
    from types import TracebackType

    from dulwich.diff_tree import TreeChange
    from dulwich.objects import ShaFile

DEFAULT_RENAME_THRESHOLD: Final = 60

_MIN_SHA_ABBREV_LENGTH: Final = 4
_SHA_HEX_LENGTH: Final = 40
_HEX_PATTERN: Final = re.compile(r"[0-9a-fA-F]+")
_REF_PREFIXES: Final = ("", "refs/heads/", "refs/tags/", "refs/remotes/")


class GitRepository:
    """Read-only view of a git repository for provenance reconstruction.

    Implements RepositoryProvider and DiffEngine. Diffs are computed with
    dulwich's tree comparison and rename detection, and edit lists with
    SequenceMatcher over the blob lines.

    The class implements the context manager protocol. When used as a
    context manager, the underlying dulwich Repo is closed on exit.

    Attributes:
        root: The resolved path to the repository (the working tree, or the
            repository directory itself for bare repositories).
        rename_threshold: Similarity percentage above which a deleted and an
            added file are reported as a rename.
    """

    __slots__: Final = ("_repo", "_root", "rename_threshold")

    def __init__(
        self,
        path: Path | str | None = None,
        *,
        rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
    ) -> None:
        """Open the repository containing ``path``.

        Args:
            path: Directory inside the repository. Defaults to the current
                working directory.
            rename_threshold: Rename similarity threshold, 0-100.

        Raises:
            RepositoryNotFoundError: If no repository contains ``path``.
        """
        working_dir = Path(path) if path is not None else Path.cwd()
        try:
            self._repo: Repo = Repo.discover(str(working_dir))
        except NotGitRepository as e:
            msg = f"Not a git repository: {working_dir}"
            raise RepositoryNotFoundError(msg, path=working_dir) from e
        self._root: Path = Path(self._repo.path).resolve()
        self.rename_threshold: int = rename_threshold

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
        """Release the file handles held by dulwich."""
        self._repo.close()

    @property
    def root(self) -> Path:
        return self._root

    # =========================================================================
    # Commit Resolution
    # =========================================================================

    def resolve_commit(self, ref: str) -> Commit:
        """Resolve a branch, tag, HEAD or (abbreviated) commit id.

        Names are tried as given, then under refs/heads/, refs/tags/ and
        refs/remotes/. Annotated tags are peeled to the commit they point at.

        Args:
            ref: The reference to resolve.

        Returns:
            The commit the reference points at.

        Raises:
            RevisionNotFoundError: If the reference cannot be resolved.
        """
        for prefix in _REF_PREFIXES:
            try:
                sha = self._repo.refs[f"{prefix}{ref}".encode()]
            except (KeyError, ValueError):
                continue
            return self._peel(sha, ref)

        if _HEX_PATTERN.fullmatch(ref):
            return self._peel(self._resolve_abbreviated_sha(ref), ref)

        msg = f"Revision not found: {ref}"
        raise RevisionNotFoundError(msg, ref=ref, path=self._root)

    def get_commit(self, sha: str) -> Commit:
        """Load a commit by its full hex id.

        Raises:
            RevisionNotFoundError: If the id does not name a commit.
        """
        obj = self._get_object(sha)
        if not isinstance(obj, GitCommit):
            msg = f"Object is not a commit: {sha}"
            raise RevisionNotFoundError(msg, ref=sha, path=self._root)
        return _to_commit(obj)

    def _peel(self, sha: bytes, ref: str) -> Commit:
        obj = self._get_object(sha.decode("ascii"))
        while isinstance(obj, Tag):
            _, target = obj.object
            obj = self._get_object(target.decode("ascii"))
        if not isinstance(obj, GitCommit):
            msg = f"Revision does not point at a commit: {ref}"
            raise RevisionNotFoundError(msg, ref=ref, path=self._root)
        return _to_commit(obj)

    def _resolve_abbreviated_sha(self, sha: str) -> bytes:
        """Expand a hex commit id of at least four digits to the full id.

        Raises:
            RevisionNotFoundError: If the prefix is shorter than four digits,
                names no commit, or names more than one.
        """
        if len(sha) < _MIN_SHA_ABBREV_LENGTH:
            msg = f"Commit id {sha!r} needs at least {_MIN_SHA_ABBREV_LENGTH} digits"
            raise RevisionNotFoundError(msg, ref=sha, path=self._root)

        prefix = sha.lower()
        if len(prefix) == _SHA_HEX_LENGTH:
            return prefix.encode("ascii")

        candidates = [
            object_id
            for object_id in self._repo.object_store
            if object_id.decode("ascii").startswith(prefix)
            and self._is_commit(object_id)
        ]
        if len(candidates) == 1:
            return candidates[0]
        if candidates:
            msg = f"Commit id {sha!r} is ambiguous ({len(candidates)} matches)"
        else:
            msg = f"No commit matches {sha!r}"
        raise RevisionNotFoundError(msg, ref=sha, path=self._root)

    def _is_commit(self, object_id: bytes) -> bool:
        try:
            return isinstance(self._repo[object_id], GitCommit)
        except KeyError:
            return False

    # =========================================================================
    # Tree and Blob Access
    # =========================================================================

    def head_tree(self, commit: Commit) -> Iterator[TreeFile]:
        """Iterate over the files of a commit's tree in path order.

        Submodule (gitlink) entries are skipped; symlinks are reported as
        files holding their target.
        """
        tree_id = self._commit_tree(commit)
        files: list[TreeFile] = []
        stack: list[tuple[str, bytes]] = [("", tree_id)]
        while stack:
            prefix, current_tree_id = stack.pop()
            tree = self._get_object(current_tree_id.decode("ascii"), commit=commit)
            if not isinstance(tree, Tree):
                msg = f"Object is not a tree: {current_tree_id.decode('ascii')}"
                raise RepositoryError(msg, path=self._root, commit_id=commit.sha)
            for entry in tree.items():
                name = entry.path.decode("utf-8", errors="replace")
                path = f"{prefix}{name}"
                if stat.S_ISDIR(entry.mode):
                    stack.append((f"{path}/", entry.sha))
                elif not S_ISGITLINK(entry.mode):
                    files.append(TreeFile(path=path, blob_id=entry.sha.decode("ascii")))
        files.sort(key=lambda f: f.path)
        yield from files

    def blob_at(self, commit: Commit, path: str) -> str | None:
        """Return the blob id of a path in a commit, or None if absent."""
        tree_id = self._commit_tree(commit)
        try:
            mode, sha = tree_lookup_path(
                self._repo.__getitem__, tree_id, path.encode("utf-8")
            )
        except KeyError:
            return None
        if stat.S_ISDIR(mode) or S_ISGITLINK(mode):
            return None
        return sha.decode("ascii")

    def is_binary(self, blob_id: str) -> bool:
        return is_binary(self._blob_data(blob_id))

    def read_lines(self, blob_id: str) -> list[str]:
        return decode_lines(self._blob_data(blob_id))

    # =========================================================================
    # Diff Methods
    # =========================================================================

    def diff(self, old: Commit | None, new: Commit) -> list[PathDiff]:
        """Compute per-path differences from ``old`` to ``new``.

        Uses dulwich's tree comparison with rename detection. dulwich also
        pairs additions with modified files as copies; those are reported as
        plain additions, and COPY is kept only for copies of a path that no
        longer exists in ``new``. Submodule entries are ignored.

        Args:
            old: The parent commit, or None when ``new`` is a root commit.
            new: The commit being examined.

        Returns:
            One PathDiff per changed path.
        """
        old_tree = self._commit_tree(old) if old is not None else None
        new_tree = self._commit_tree(new)

        rename_detector = RenameDetector(
            self._repo.object_store,
            rename_threshold=self.rename_threshold,
        )
        try:
            changes = list(
                tree_changes(
                    self._repo.object_store,
                    old_tree,
                    new_tree,
                    rename_detector=rename_detector,
                )
            )
        except KeyError as e:
            msg = f"Failed to compare trees of commit {new.sha}: missing object {e}"
            raise RepositoryError(msg, path=self._root, commit_id=new.sha) from e

        diffs: list[PathDiff] = []
        for change in changes:
            path_diff = self._tree_change_to_diff(change, new, new_tree)
            if path_diff is not None:
                diffs.append(path_diff)
        return diffs

    def _tree_change_to_diff(
        self, change: TreeChange, commit: Commit, new_tree: bytes
    ) -> PathDiff | None:
        """Convert a dulwich TreeChange into a PathDiff.

        Args:
            change: TreeChange from tree_changes.
            commit: The commit being examined, for error context.
            new_tree: Tree id of ``commit``.

        Returns:
            PathDiff, or None when the change only concerns submodules.
        """
        try:
            change_type = ChangeType(change.type)
        except ValueError:
            return None

        old_path, old_id = _entry_fields(change.old)
        new_path, new_id = _entry_fields(change.new)

        if old_path is None and new_path is None:
            return None
        if old_path is None:
            change_type = ChangeType.ADD
        elif new_path is None:
            change_type = ChangeType.DELETE
        elif change_type is ChangeType.COPY and self._tree_has_path(
            new_tree, old_path
        ):
            change_type = ChangeType.ADD
            old_path = old_id = None

        old_data = self._blob_data(old_id, commit=commit) if old_id else None
        new_data = self._blob_data(new_id, commit=commit) if new_id else None

        return build_path_diff(
            change_type,
            old_path=old_path,
            new_path=new_path,
            old_data=old_data,
            new_data=new_data,
            old_id=old_id,
            new_id=new_id,
        )

    # =========================================================================
    # Object Access Helpers
    # =========================================================================

    def _tree_has_path(self, tree_id: bytes, path: str) -> bool:
        try:
            tree_lookup_path(self._repo.__getitem__, tree_id, path.encode("utf-8"))
        except KeyError:
            return False
        return True

    def _get_object(self, sha: str, *, commit: Commit | None = None) -> ShaFile:
        try:
            return self._repo[sha.encode("ascii")]
        except KeyError as e:
            msg = f"Object not found: {sha}"
            raise RepositoryError(
                msg,
                path=self._root,
                commit_id=commit.sha if commit is not None else sha,
            ) from e

    def _commit_tree(self, commit: Commit) -> bytes:
        obj = self._get_object(commit.sha, commit=commit)
        if not isinstance(obj, GitCommit):
            msg = f"Object is not a commit: {commit.sha}"
            raise RepositoryError(msg, path=self._root, commit_id=commit.sha)
        return obj.tree

    def _blob_data(self, blob_id: str, *, commit: Commit | None = None) -> bytes:
        obj = self._get_object(blob_id, commit=commit)
        if not isinstance(obj, Blob):
            msg = f"Object is not a blob: {blob_id}"
            raise RepositoryError(
                msg,
                path=self._root,
                commit_id=commit.sha if commit is not None else None,
            )
        return obj.data


def _entry_fields(entry: object) -> tuple[str | None, str | None]:
    """Extract the path and blob id from a TreeChange side.

    Depending on the dulwich version a missing side is either None or a
    TreeEntry whose fields are all None. Submodule entries count as
    missing.

    Returns:
        Tuple of (path, blob id), both None for a missing side.
    """
    if entry is None:
        return None, None
    path: bytes | None = getattr(entry, "path", None)
    mode: int | None = getattr(entry, "mode", None)
    sha: bytes | None = getattr(entry, "sha", None)
    if path is None or sha is None or (mode is not None and S_ISGITLINK(mode)):
        return None, None
    return path.decode("utf-8", errors="replace"), sha.decode("ascii")


def _parse_identity(identity: bytes) -> tuple[str, str]:
    """Parse a "Name <email>" identity line into name and email."""
    identity_str = identity.decode("utf-8", errors="replace")
    if "<" in identity_str and identity_str.endswith(">"):
        name_part = identity_str.rsplit("<", 1)[0].strip()
        email_part = identity_str.rsplit("<", 1)[1].rstrip(">")
        return name_part, email_part
    return identity_str, ""


def _to_commit(obj: GitCommit) -> Commit:
    author_name, author_email = _parse_identity(obj.author)
    return Commit(
        sha=obj.id.decode("ascii"),
        parents=tuple(p.decode("ascii") for p in obj.parents),
        author_name=author_name,
        author_email=author_email,
        commit_time=obj.commit_time,
        commit_timezone=obj.commit_timezone,
        message=obj.message.decode("utf-8", errors="replace"),
    )
