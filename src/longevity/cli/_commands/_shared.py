"""Exit codes, error reporting and record serialization shared by commands."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any, Never

import orjson
from rich.console import Console

from longevity.exceptions import (
    LineTableError,
    RepositoryError,
    RepositoryNotFoundError,
    RevisionNotFoundError,
)

if TYPE_CHECKING:
    from longevity.provenance import LineLifetime, RevisionMarker

FormattableData = dict[str, Any]


class ExitCode(IntEnum):
    """Process exit statuses returned by longevity commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    VALIDATION_ERROR = 2
    NOT_FOUND = 3
    IO_ERROR = 4
    INTERNAL_ERROR = 5


def format_json(data: FormattableData, *, indent: bool = True) -> str:
    """Serialize ``data`` with orjson, two-space indented unless ``indent`` is off."""
    return orjson.dumps(data, option=orjson.OPT_INDENT_2 if indent else None).decode()


def get_error_console() -> Console:
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode = ExitCode.INTERNAL_ERROR,
    *,
    console: Console | None = None,
) -> Never:
    """Print ``message`` as an error and leave with ``code``.

    Output goes to ``console`` when given, otherwise to a fresh stderr
    console.

    Raises:
        SystemExit: Always.
    """
    target = console or get_error_console()
    target.print(f"[red]Error:[/red] {message}", highlight=False)
    raise SystemExit(code)


def exit_for_repository_error(error: RepositoryError | LineTableError) -> Never:
    """Leave with the exit code that matches a reconstruction failure.

    An absent repository or unresolvable revision is NOT_FOUND, any other
    repository failure is IO_ERROR, and an inconsistent line table is an
    INTERNAL_ERROR.
    """
    match error:
        case RepositoryNotFoundError() | RevisionNotFoundError():
            exit_with_error(str(error), ExitCode.NOT_FOUND)
        case RepositoryError():
            exit_with_error(str(error), ExitCode.IO_ERROR)
        case _:
            exit_with_error(f"History could not be reconstructed: {error}")


def marker_to_dict(marker: RevisionMarker) -> FormattableData:
    commit = marker.commit
    return {
        "commit": commit.sha,
        "path": marker.path,
        "index": marker.index,
        "removed": marker.removed,
        "time": commit.timestamp.isoformat(),
        "author": commit.author_email,
        "subject": commit.subject,
    }


def lifetime_to_dict(record: LineLifetime) -> FormattableData:
    data: FormattableData = {
        "birth": marker_to_dict(record.birth),
        "death": marker_to_dict(record.death),
        "age_seconds": record.age_seconds,
    }
    if record.text is not None:
        data["text"] = record.text
    return data
