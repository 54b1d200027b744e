# ruff: noqa: A002, FBT002
"""The ``lines`` command: list reconstructed line lifetimes."""

from itertools import islice
from typing import Annotated

from cyclopts import Parameter
from rich.console import Console
from rich.table import Table

from longevity.exceptions import LineTableError, RepositoryError
from longevity.provenance import LineLifetime, ProvenanceReconstructor
from longevity.repository import GitRepository
from longevity.utils import create_null_logger

from ._context import CLIContext, OutputFormat
from ._shared import (
    ExitCode,
    exit_for_repository_error,
    exit_with_error,
    format_json,
    lifetime_to_dict,
)

_SECONDS_PER_DAY = 86_400
_TEXT_DISPLAY_LEN = 40


def _render_table(console: Console, records: list[LineLifetime], *, text: bool) -> None:
    if not records:
        console.print("[dim]No lines found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Born", style="cyan", no_wrap=True)
    table.add_column("Location")
    table.add_column("Last seen", style="cyan", no_wrap=True)
    table.add_column("Location")
    table.add_column("Age (days)", justify="right")
    table.add_column("Author")
    if text:
        table.add_column("Text", overflow="ellipsis")

    for record in records:
        row = [
            record.birth.commit.short_sha,
            f"{record.birth.path}:{record.birth.index}",
            record.death.commit.short_sha,
            f"{record.death.path}:{record.death.index}",
            str(record.age_seconds // _SECONDS_PER_DAY),
            record.birth.commit.author_email,
        ]
        if text:
            line = record.text or ""
            if len(line) > _TEXT_DISPLAY_LEN:
                line = line[: _TEXT_DISPLAY_LEN - 3] + "..."
            row.append(line)
        table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]{len(records)} line(s)[/dim]")


def lines(
    *,
    head: Annotated[
        str | None, Parameter(help="Revision to start from (default: config)")
    ] = None,
    tail: Annotated[
        str | None, Parameter(help="Revision to stop at (default: root commit)")
    ] = None,
    limit: Annotated[
        int | None, Parameter(help="Stop after this many lines")
    ] = None,
    text: Annotated[bool, Parameter(help="Include each line's text")] = False,
    format: Annotated[
        OutputFormat, Parameter(name=["--format", "-f"], help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """List the lifetime of every line between two revisions."""
    ctx = CLIContext.get_current()
    settings = ctx.config.longevity
    logger = (ctx.logger or create_null_logger()).bind(command="lines")
    head_ref = head or settings.head
    tail_ref = tail if tail is not None else settings.tail

    if limit is not None and limit < 0:
        exit_with_error("--limit must not be negative", ExitCode.VALIDATION_ERROR)

    try:
        with GitRepository(
            ctx.repo_root, rename_threshold=settings.rename_threshold
        ) as repo:
            reconstructor = ProvenanceReconstructor(repo, repo, logger=logger)
            records = list(
                islice(
                    reconstructor.records(head_ref, tail_ref or None, with_text=text),
                    limit,
                )
            )
    except (RepositoryError, LineTableError) as e:
        logger.error("reconstruction_failed", error=str(e))
        exit_for_repository_error(e)

    if format == OutputFormat.JSON:
        print(format_json({"lines": [lifetime_to_dict(r) for r in records]}))  # noqa: T201
        return

    _render_table(Console(), records, text=text)
