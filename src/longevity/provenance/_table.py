"""Per-file line table.

The table maps each tracked path to the revision markers of its lines, in
line order. For every tracked path the sequence length equals the file's
line count as of the commit currently being examined.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from longevity.exceptions import LineTableError
from longevity.provenance._models import RevisionMarker

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from longevity.repository import Commit


class LineTable:
    """Mutable mapping from file path to the markers of its lines.

    A table is owned by a single reconstruction run and is never shared.
    Referencing a path the table does not track raises LineTableError.
    """

    __slots__ = ("_files",)

    def __init__(self) -> None:
        self._files: dict[str, list[RevisionMarker]] = {}

    def __contains__(self, path: object) -> bool:
        return path in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __repr__(self) -> str:
        return f"LineTable(paths={len(self._files)}, lines={self.line_count()})"

    def seed(self, path: str, line_count: int, commit: Commit) -> None:
        """Track ``path`` with one marker per line pointing at ``commit``.

        Replaces any sequence previously stored under ``path``.
        """
        self._files[path] = [
            RevisionMarker(commit=commit, path=path, index=index)
            for index in range(line_count)
        ]

    def get(self, path: str) -> list[RevisionMarker]:
        """Return the live marker sequence stored under ``path``.

        Raises:
            LineTableError: If ``path`` is not tracked.
        """
        try:
            return self._files[path]
        except KeyError:
            msg = f"Path is not tracked: {path}"
            raise LineTableError(msg, file_path=path) from None

    def set(self, path: str, markers: Iterable[RevisionMarker]) -> None:
        self._files[path] = list(markers)

    def remove(self, path: str) -> list[RevisionMarker]:
        """Stop tracking ``path`` and return its markers.

        Raises:
            LineTableError: If ``path`` is not tracked.
        """
        markers = self.get(path)
        del self._files[path]
        return markers

    def rename(self, old_path: str, new_path: str) -> None:
        """Move the sequence stored under ``new_path`` to ``old_path``.

        The walk runs backward, so a rename from ``old_path`` to
        ``new_path`` moves the lines back to the name they had before it.

        Raises:
            LineTableError: If ``new_path`` is not tracked.
        """
        self._files[old_path] = self.remove(new_path)

    def take(self, path: str, start: int, end: int) -> list[RevisionMarker]:
        """Remove and return the markers in ``[start, end)``.

        Raises:
            LineTableError: If ``path`` is not tracked or the range does not
                fit inside its sequence.
        """
        markers = self.get(path)
        if not 0 <= start <= end <= len(markers):
            msg = (
                f"Range [{start}, {end}) out of bounds for {path} "
                f"({len(markers)} lines)"
            )
            raise LineTableError(msg, file_path=path)
        taken = markers[start:end]
        del markers[start:end]
        return taken

    def insert(self, path: str, start: int, markers: Iterable[RevisionMarker]) -> None:
        """Splice ``markers`` into the sequence of ``path`` at ``start``.

        Raises:
            LineTableError: If ``path`` is not tracked or ``start`` is past
                the end of its sequence.
        """
        current = self.get(path)
        if not 0 <= start <= len(current):
            msg = f"Position {start} out of bounds for {path} ({len(current)} lines)"
            raise LineTableError(msg, file_path=path)
        current[start:start] = markers

    def paths(self) -> list[str]:
        return sorted(self._files)

    def line_count(self) -> int:
        """Return the total number of markers across all paths."""
        return sum(len(markers) for markers in self._files.values())

    def drain(self) -> Iterator[tuple[str, list[RevisionMarker]]]:
        """Yield every path with its markers, in path order, emptying the table."""
        for path in sorted(self._files):
            yield path, self._files.pop(path)
