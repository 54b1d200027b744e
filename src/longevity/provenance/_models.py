"""Provenance models.

This module defines the markers tracked by the line table and the line
lifetime records the reconstruction produces.
"""

from dataclasses import dataclass
from typing import Final

from longevity.repository._models import Commit, PathDiff

_DATE_FORMAT: Final = "%Y-%m-%d %H:%M %Z"


@dataclass(frozen=True, slots=True)
class RevisionMarker:
    """Position of a line as of a specific commit.

    Attributes:
        commit: The commit the position refers to.
        path: File path as of that commit.
        index: Zero-based line index within the file as of that commit.
        removed: True when the commit removed the line. The path and index
            then refer to the parent side of that commit.
    """

    commit: Commit
    path: str
    index: int
    removed: bool = False

    def describe(self) -> str:
        date = self.commit.timestamp.strftime(_DATE_FORMAT)
        return f"{self.commit.sha} '{self.commit.subject}' {date}"


@dataclass(frozen=True, slots=True)
class LineLifetime:
    """The span between a line's introduction and its removal.

    A line still present at the head revision has the head commit as its
    death marker.

    Attributes:
        birth: Where and when the line was introduced.
        death: The commit that removed the line, or the head commit for a
            line that is still present.
        text: The line's text, when it was requested.
    """

    birth: RevisionMarker
    death: RevisionMarker
    text: str | None = None

    @property
    def age_seconds(self) -> int:
        """Return the death commit time minus the birth commit time.

        Commit timestamps are not guaranteed to increase along history, so
        the result is negative when a line dies at an earlier time than it
        was born.
        """
        return self.death.commit.commit_time - self.birth.commit.commit_time

    def describe(self) -> str:
        """Render a two-line human readable account of the lifetime.

        Example:
            >>> print(record.describe())  # doctest: +SKIP
            Line 'x = 1' - 'a.py:0' added in 3f2c... 'Initial' 2024-01-01 10:00 UTC
              last known as 'b.py:4' in 9ab0... 'Refactor' 2024-03-02 09:15 UTC
        """
        verb = "removed from" if self.death.removed else "last known as"
        return (
            f"Line '{self.text or ''}' - '{self.birth.path}:{self.birth.index}' "
            f"added in {self.birth.describe()}\n"
            f"  {verb} '{self.death.path}:{self.death.index}' "
            f"in {self.death.describe()}"
        )


@dataclass(frozen=True, slots=True)
class DiffStep:
    """One step of the backward walk: a commit, its parent and their diffs.

    Attributes:
        commit: The commit being examined.
        parent: Its first parent, or None for a root commit.
        diffs: Per-path differences from ``parent`` to ``commit``.
    """

    commit: Commit
    parent: Commit | None
    diffs: tuple[PathDiff, ...] = ()
