"""Application of one commit's diffs to the line table.

Walking backward from commit C to its parent P, every line C inserted is
finished: it was born at C and its death marker is whatever the table held
for that position. Every line C deleted is still alive in P, so it gets a
placeholder marker at C and stays open until an older insertion finishes it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from longevity.provenance._models import LineLifetime, RevisionMarker
from longevity.repository import ChangeType
from longevity.utils import create_null_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from structlog.typing import FilteringBoundLogger

    from longevity.provenance._models import DiffStep
    from longevity.provenance._table import LineTable
    from longevity.repository import Commit, PathDiff, RepositoryProvider


class DiffApplier:
    """Apply diff steps to a line table, yielding finished line lifetimes.

    Within one step the paths are processed in three phases. Additions,
    modifications and renames have their edits applied first, under the
    name each path has in the commit. Renamed sequences are then moved
    back to their previous names, all removed before any is stored so that
    swaps stay consistent. Deleted files are handled last: each is reborn
    empty under its old name and filled with placeholders for its lines.

    Binary diffs and copies are skipped.
    """

    __slots__ = ("_logger", "_provider", "_table")

    def __init__(
        self,
        table: LineTable,
        *,
        provider: RepositoryProvider | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the applier.

        Args:
            table: The line table to mutate.
            provider: When given, inserted lines carry their text read from
                the commit's blob.
            logger: Logger for diagnostic events.
        """
        self._table = table
        self._provider = provider
        self._logger = logger if logger is not None else create_null_logger()

    def apply(self, step: DiffStep) -> Iterator[LineLifetime]:
        """Apply one step's diffs to the table.

        Args:
            step: The commit, its parent and their per-path diffs.

        Yields:
            A LineLifetime for every line the commit inserted.

        Raises:
            LineTableError: If a diff references a path or range the table
                does not track.
        """
        commit = step.commit
        renames: list[PathDiff] = []
        deletions: list[PathDiff] = []

        for diff in step.diffs:
            if diff.binary or diff.change_type is ChangeType.COPY:
                self._logger.debug(
                    "path_diff_skipped",
                    path=diff.path,
                    change_type=diff.change_type.value,
                    binary=diff.binary,
                    commit=commit.sha,
                )
                continue
            if diff.change_type is ChangeType.DELETE:
                deletions.append(diff)
                continue

            path = diff.new_path or ""
            yield from self._apply_insertions(commit, diff, path)
            self._apply_deletions(commit, diff, path)
            if diff.change_type is ChangeType.RENAME:
                renames.append(diff)

        self._move_renamed(renames)

        for diff in deletions:
            old_path = diff.old_path or ""
            if old_path in self._table and self._table.get(old_path):
                self._logger.warning(
                    "deleted_path_replaced",
                    path=old_path,
                    discarded=len(self._table.get(old_path)),
                    commit=commit.sha,
                )
            self._table.set(old_path, [])
            self._apply_deletions(commit, diff, old_path)

    def _apply_insertions(
        self, commit: Commit, diff: PathDiff, path: str
    ) -> Iterator[LineLifetime]:
        """Finish every line inserted by ``diff``, highest range first."""
        inserted = [edit for edit in diff.edits if edit.new_length > 0]
        if not inserted:
            return

        texts: list[str] | None = None
        if self._provider is not None and diff.new_id is not None:
            texts = self._provider.read_lines(diff.new_id)

        for edit in reversed(inserted):
            deaths = self._table.take(path, edit.new_start, edit.new_end)
            for index, death in enumerate(deaths, start=edit.new_start):
                text = None
                if texts is not None and index < len(texts):
                    text = texts[index]
                record = LineLifetime(
                    birth=RevisionMarker(commit=commit, path=path, index=index),
                    death=death,
                    text=text,
                )
                self._logger.debug(
                    "line_collected",
                    path=path,
                    index=index,
                    age_seconds=record.age_seconds,
                )
                yield record

    def _apply_deletions(self, commit: Commit, diff: PathDiff, path: str) -> None:
        """Open a placeholder for every line removed by ``diff``, lowest range first.

        Placeholders are named after the parent-side path and positions, and
        are stored under ``path``.
        """
        old_path = diff.old_path or path
        for edit in diff.edits:
            if edit.old_length == 0:
                continue
            self._table.insert(
                path,
                edit.old_start,
                (
                    RevisionMarker(
                        commit=commit, path=old_path, index=index, removed=True
                    )
                    for index in range(edit.old_start, edit.old_end)
                ),
            )

    def _move_renamed(self, renames: list[PathDiff]) -> None:
        moved = [
            (diff.old_path or "", self._table.remove(diff.new_path or ""))
            for diff in renames
        ]
        for old_path, markers in moved:
            if old_path in self._table and self._table.get(old_path):
                self._logger.warning(
                    "rename_target_replaced",
                    path=old_path,
                    discarded=len(self._table.get(old_path)),
                )
            self._table.set(old_path, markers)
