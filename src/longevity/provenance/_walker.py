"""First-parent history walk."""

from __future__ import annotations

from typing import TYPE_CHECKING

from longevity.provenance._models import DiffStep
from longevity.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger

    from longevity.repository import Commit, DiffEngine, RepositoryProvider


class HistoryWalker:
    """Walk from a head commit toward a tail along first parents.

    Each step pairs a commit with its first parent and the diffs between
    them. Merge commits are followed through their first parent only.
    """

    __slots__ = ("_diff_engine", "_logger", "_provider")

    def __init__(
        self,
        provider: RepositoryProvider,
        diff_engine: DiffEngine,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._provider = provider
        self._diff_engine = diff_engine
        self._logger = logger if logger is not None else create_null_logger()

    def walk(self, head: Commit, tail: Commit | None = None) -> Iterator[DiffStep]:
        """Yield one DiffStep per commit from ``head`` back to the boundary.

        The walk stops when the next commit would be ``tail`` (the tail is
        never diffed against its own parent) or after the root commit has
        been diffed against the empty tree. A tail that is not a first-parent
        ancestor of ``head`` is never reached, and the walk ends at the root.

        Args:
            head: The commit to start from.
            tail: Optional commit to stop at, exclusive.

        Yields:
            DiffStep for each walked commit, newest first.
        """
        commit = head
        while tail is None or commit.sha != tail.sha:
            parent_sha = commit.first_parent
            parent = self._provider.get_commit(parent_sha) if parent_sha else None
            diffs = self._diff_engine.diff(parent, commit)
            self._logger.debug(
                "diff_step",
                commit=commit.sha,
                parent=parent.sha if parent is not None else None,
                paths=len(diffs),
            )
            yield DiffStep(commit=commit, parent=parent, diffs=tuple(diffs))
            if parent is None:
                return
            commit = parent
