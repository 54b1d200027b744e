"""Repository access for provenance reconstruction.

This package provides read-only access to commit history behind two
runtime-checkable protocols, so the provenance engine never depends on a
concrete version-control library.

Classes:
    GitRepository: dulwich-backed provider and diff engine.
    FakeRepository: In-memory provider and diff engine for tests.
    RepositoryProvider: Protocol for commit, tree and blob access.
    DiffEngine: Protocol for per-path differences between commits.

Models:
    Commit: Metadata about a single commit.
    TreeFile: A file entry in a commit tree.
    ChangeType: Kind of change reported for a path.
    Edit: A contiguous differing region of two line sequences.
    PathDiff: Per-path difference between a commit and its parent.

Example:
    >>> from longevity.repository import GitRepository
    >>> with GitRepository(".") as repo:
    ...     head = repo.resolve_commit("HEAD")
    ...     diffs = repo.diff(None, head)
"""

from longevity.repository._edits import (
    build_path_diff,
    compute_edits,
    decode_lines,
    split_lines,
)
from longevity.repository._fake import FakeRepository
from longevity.repository._git import DEFAULT_RENAME_THRESHOLD, GitRepository
from longevity.repository._models import ChangeType, Commit, Edit, PathDiff, TreeFile
from longevity.repository._protocol import DiffEngine, RepositoryProvider

__all__ = [
    "DEFAULT_RENAME_THRESHOLD",
    "ChangeType",
    "Commit",
    "DiffEngine",
    "Edit",
    "FakeRepository",
    "GitRepository",
    "PathDiff",
    "RepositoryProvider",
    "TreeFile",
    "build_path_diff",
    "compute_edits",
    "decode_lines",
    "split_lines",
]
