"""Line provenance reconstruction.

This module orchestrates a reconstruction run: seed the line table from the
head tree, walk history backward, apply each step's diffs, and finish the
lines still open when the walk reaches its boundary.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from longevity.provenance._applier import DiffApplier
from longevity.provenance._models import LineLifetime, RevisionMarker
from longevity.provenance._table import LineTable
from longevity.provenance._walker import HistoryWalker
from longevity.repository import DEFAULT_RENAME_THRESHOLD, GitRepository
from longevity.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger

    from longevity.repository import Commit, DiffEngine, RepositoryProvider


class ProvenanceReconstructor:
    """Reconstruct line lifetimes from a repository's history.

    Example:
        >>> from longevity.repository import FakeRepository
        >>> repo = FakeRepository()
        >>> _ = repo.commit({"a.txt": "x\\n"})
        >>> reconstructor = ProvenanceReconstructor(repo, repo)
        >>> [r.birth.path for r in reconstructor.records()]
        ['a.txt']
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

    def records(
        self,
        head_ref: str = "HEAD",
        tail_ref: str | None = None,
        *,
        with_text: bool = False,
    ) -> Iterator[LineLifetime]:
        """Yield the lifetime of every line seen between head and tail.

        The sequence is lazy and single-pass: records are produced while the
        walk progresses, and memory is bounded by the number of lines tracked
        at the current point of the walk. Every line that existed at any
        walked commit is reported exactly once.

        Lines still open when the walk ends were never seen being inserted;
        their birth is set to the boundary, which is the tail commit when it
        was reached and the root commit otherwise.

        Args:
            head_ref: Reference of the newest commit to examine.
            tail_ref: Optional reference of the commit to stop at. Empty or
                None walks to the root.
            with_text: Attach each line's text to its record.

        Yields:
            LineLifetime records, interleaved with the walk.

        Raises:
            RevisionNotFoundError: If a reference cannot be resolved.
            RepositoryError: If the repository cannot be read.
        """
        head = self._provider.resolve_commit(head_ref)
        tail = self._provider.resolve_commit(tail_ref) if tail_ref else None
        self._logger.info(
            "reconstruction_started",
            head=head.sha,
            tail=tail.sha if tail is not None else None,
        )

        table = LineTable()
        self._seed(table, head)
        self._logger.info("table_seeded", paths=len(table), lines=table.line_count())

        applier = DiffApplier(
            table,
            provider=self._provider if with_text else None,
            logger=self._logger,
        )
        walker = HistoryWalker(self._provider, self._diff_engine, logger=self._logger)

        boundary = head
        steps = 0
        emitted = 0
        for step in walker.walk(head, tail):
            steps += 1
            boundary = step.parent if step.parent is not None else step.commit
            for record in applier.apply(step):
                emitted += 1
                yield record

        if tail is not None and boundary.sha != tail.sha:
            self._logger.info("tail_not_reached", tail=tail.sha, root=boundary.sha)
        self._logger.info(
            "walk_boundary_reached",
            boundary=boundary.sha,
            steps=steps,
            open_lines=table.line_count(),
        )

        for path, markers in table.drain():
            texts = self._boundary_lines(boundary, path) if with_text else None
            for index, death in enumerate(markers):
                text = None
                if texts is not None and index < len(texts):
                    text = texts[index]
                emitted += 1
                yield LineLifetime(
                    birth=RevisionMarker(commit=boundary, path=path, index=index),
                    death=death,
                    text=text,
                )

        self._logger.info("reconstruction_completed", records=emitted, steps=steps)

    def _seed(self, table: LineTable, head: Commit) -> None:
        """Track every text file of the head tree, one marker per line."""
        for entry in self._provider.head_tree(head):
            if self._provider.is_binary(entry.blob_id):
                self._logger.debug("binary_file_skipped", path=entry.path)
                continue
            line_count = len(self._provider.read_lines(entry.blob_id))
            table.seed(entry.path, line_count, head)

    def _boundary_lines(self, boundary: Commit, path: str) -> list[str]:
        blob_id = self._provider.blob_at(boundary, path)
        if blob_id is None or self._provider.is_binary(blob_id):
            return []
        return self._provider.read_lines(blob_id)


def reconstruct(  # noqa: PLR0913
    repo_path: Path | str | None = None,
    head_ref: str = "HEAD",
    tail_ref: str | None = None,
    *,
    rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
    with_text: bool = False,
    logger: FilteringBoundLogger | None = None,
) -> Iterator[LineLifetime]:
    """Reconstruct line lifetimes of the git repository at ``repo_path``.

    The repository is opened when iteration starts and closed when the
    sequence is exhausted, when the consumer closes the generator early, or
    when an error propagates out of the walk.

    Args:
        repo_path: Directory inside the repository. Defaults to the current
            working directory.
        head_ref: Reference of the newest commit to examine.
        tail_ref: Optional reference of the commit to stop at.
        rename_threshold: Rename similarity threshold, 0-100.
        with_text: Attach each line's text to its record.
        logger: Logger for progress events.

    Yields:
        LineLifetime records.

    Raises:
        RepositoryNotFoundError: If no repository contains ``repo_path``.
        RevisionNotFoundError: If a reference cannot be resolved.

    Example:
        >>> for record in reconstruct(".", tail_ref="v1.0"):  # doctest: +SKIP
        ...     print(record.birth.commit.short_sha, record.age_seconds)
    """
    with GitRepository(repo_path, rename_threshold=rename_threshold) as repository:
        reconstructor = ProvenanceReconstructor(repository, repository, logger=logger)
        yield from reconstructor.records(head_ref, tail_ref, with_text=with_text)


def collect_lines(  # noqa: PLR0913
    repo_path: Path | str | None = None,
    head_ref: str = "HEAD",
    tail_ref: str | None = None,
    *,
    rename_threshold: int = DEFAULT_RENAME_THRESHOLD,
    with_text: bool = False,
    logger: FilteringBoundLogger | None = None,
) -> list[LineLifetime]:
    """Return every line lifetime, alive and deleted, between head and tail."""
    return list(
        reconstruct(
            repo_path,
            head_ref,
            tail_ref,
            rename_threshold=rename_threshold,
            with_text=with_text,
            logger=logger,
        )
    )
