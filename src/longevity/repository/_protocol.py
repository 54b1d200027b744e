"""Repository protocols for type-safe dependency injection.

This module defines the runtime-checkable Protocols the provenance engine
depends on. GitRepository satisfies both against a real repository and
FakeRepository satisfies both in memory for tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from longevity.repository._models import Commit, PathDiff, TreeFile


@runtime_checkable
class RepositoryProvider(Protocol):
    """Protocol for read-only access to commits and blobs.

    Implementations are treated as side-effect-free: every method may be
    called repeatedly without invalidating earlier results.
    """

    def resolve_commit(self, ref: str) -> Commit:
        """Resolve a branch, tag, HEAD or (abbreviated) commit id.

        Args:
            ref: The reference to resolve.

        Returns:
            The commit the reference points at.

        Raises:
            RevisionNotFoundError: If the reference cannot be resolved.
        """
        ...

    def get_commit(self, sha: str) -> Commit:
        """Load a commit by its full hex id.

        Raises:
            RevisionNotFoundError: If no such commit exists.
        """
        ...

    def head_tree(self, commit: Commit) -> Iterator[TreeFile]:
        """Iterate over the files of a commit's tree in path order.

        Submodule entries are skipped.
        """
        ...

    def blob_at(self, commit: Commit, path: str) -> str | None:
        """Return the blob id of a path in a commit, or None if absent."""
        ...

    def is_binary(self, blob_id: str) -> bool:
        """Check whether a blob holds binary content."""
        ...

    def read_lines(self, blob_id: str) -> list[str]:
        """Read the text lines of a blob.

        Line terminators are stripped and a trailing newline does not
        produce an empty final line.
        """
        ...


@runtime_checkable
class DiffEngine(Protocol):
    """Protocol for computing per-path differences between two commits."""

    def diff(self, old: Commit | None, new: Commit) -> list[PathDiff]:
        """Compute the differences from ``old`` to ``new``.

        Args:
            old: The parent commit, or None when ``new`` is a root commit.
            new: The commit being examined.

        Returns:
            One PathDiff per changed path, renames already detected.
        """
        ...
