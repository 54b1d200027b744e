"""Repository models.

This module defines the data structures exchanged between repository
providers, diff engines, and the provenance engine.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from typing import Final

_SHORT_SHA_LENGTH: Final = 7


@dataclass(frozen=True, slots=True)
class Commit:
    """Metadata about a single commit.

    Attributes:
        sha: Full 40-character commit SHA hex string.
        parents: SHA hex strings of parent commits, first parent first.
        author_name: Author name from commit.
        author_email: Author email from commit.
        commit_time: Committer timestamp in seconds since the epoch.
        commit_timezone: Committer timezone offset in seconds east of UTC.
        message: Complete commit message (subject + body).
    """

    sha: str
    parents: tuple[str, ...] = ()
    author_name: str = ""
    author_email: str = ""
    commit_time: int = 0
    commit_timezone: int = 0
    message: str = ""

    @property
    def timestamp(self) -> datetime:
        """Return the commit time as a timezone-aware datetime."""
        tz = timezone(timedelta(seconds=self.commit_timezone))
        return datetime.fromtimestamp(self.commit_time, tz=tz)

    @property
    def short_sha(self) -> str:
        return self.sha[:_SHORT_SHA_LENGTH]

    @property
    def subject(self) -> str:
        """Return the first line of the commit message."""
        return self.message.split("\n", 1)[0].strip()

    @property
    def first_parent(self) -> str | None:
        return self.parents[0] if self.parents else None


@dataclass(frozen=True, slots=True)
class TreeFile:
    """A file entry in a commit tree.

    Attributes:
        path: Path relative to the repository root, using forward slashes.
        blob_id: Hex id of the blob holding the file content.
    """

    path: str
    blob_id: str


class ChangeType(StrEnum):
    """Kind of change reported for a path between two commits."""

    ADD = "add"
    MODIFY = "modify"
    DELETE = "delete"
    RENAME = "rename"
    COPY = "copy"


@dataclass(frozen=True, slots=True)
class Edit:
    """A contiguous region where the old and new line sequences differ.

    Both ranges are half-open and either one may be empty: an empty old
    range is a pure insertion, an empty new range a pure deletion.

    Attributes:
        old_start: First changed line index on the old side.
        old_end: One past the last changed line index on the old side.
        new_start: First changed line index on the new side.
        new_end: One past the last changed line index on the new side.
    """

    old_start: int
    old_end: int
    new_start: int
    new_end: int

    @property
    def old_length(self) -> int:
        return self.old_end - self.old_start

    @property
    def new_length(self) -> int:
        return self.new_end - self.new_start

    @property
    def is_insertion(self) -> bool:
        return self.old_length == 0 and self.new_length > 0

    @property
    def is_deletion(self) -> bool:
        return self.new_length == 0 and self.old_length > 0


@dataclass(frozen=True, slots=True)
class PathDiff:
    """Per-path difference between a commit and its parent.

    Attributes:
        change_type: Kind of change.
        old_path: Path on the parent side, or None for additions.
        new_path: Path on the commit side, or None for deletions.
        edits: Edit regions in ascending order, old side against new side.
        old_id: Blob id on the parent side, or None for additions.
        new_id: Blob id on the commit side, or None for deletions.
        binary: True when neither side can be tracked line by line.
    """

    change_type: ChangeType
    old_path: str | None
    new_path: str | None
    edits: tuple[Edit, ...] = ()
    old_id: str | None = None
    new_id: str | None = None
    binary: bool = False

    @property
    def path(self) -> str:
        """Return the new path, or the old path for deletions."""
        return self.new_path or self.old_path or ""
