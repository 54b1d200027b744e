# ruff: noqa: A002
"""The ``summary`` command: average line age for a repository and its authors."""

from typing import Annotated

from cyclopts import Parameter
from rich.console import Console
from rich.table import Table

from longevity.aggregate import LongevitySummary, TrackedIdentities, summarize
from longevity.exceptions import LineTableError, RepositoryError
from longevity.provenance import ProvenanceReconstructor
from longevity.repository import GitRepository
from longevity.utils import create_null_logger, get_author_email

from ._context import CLIContext, OutputFormat
from ._shared import (
    ExitCode,
    FormattableData,
    exit_for_repository_error,
    exit_with_error,
    format_json,
)


def _resolve_identities(
    ctx: CLIContext, authors: list[str] | None
) -> TrackedIdentities:
    """Pick the tracked authors: flags, then config, then the local git user."""
    if authors:
        return TrackedIdentities.of(*authors)
    if ctx.config.longevity.authors:
        return TrackedIdentities.of(*ctx.config.longevity.authors)
    email = get_author_email(ctx.repo_root)
    return TrackedIdentities.of(email) if email else TrackedIdentities()


def _summary_to_dict(summary: LongevitySummary) -> FormattableData:
    return {
        "repository": {
            "average_age_seconds": summary.repository_average_age_seconds,
            "average_age_days": summary.repository_average_age_days,
            "lines": summary.repository_line_count,
        },
        "authors": [
            {
                "email": email,
                "average_age_seconds": average,
                "average_age_days": summary.author_average_age_days(email),
                "lines": summary.per_author_line_count.get(email, 0),
            }
            for email, average in summary.per_author_average_age_seconds.items()
        ],
        "facts": [
            {"key": fact.key.value, "value": fact.value, "author": fact.author}
            for fact in summary.to_facts()
        ],
    }


def _render_table(console: Console, summary: LongevitySummary) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Scope", style="cyan")
    table.add_column("Lines", justify="right")
    table.add_column("Average age (days)", justify="right")

    table.add_row(
        "repository",
        str(summary.repository_line_count),
        str(summary.repository_average_age_days),
    )
    for email in summary.per_author_average_age_seconds:
        table.add_row(
            email,
            str(summary.per_author_line_count.get(email, 0)),
            str(summary.author_average_age_days(email)),
        )

    console.print(table)


def summary(
    *,
    head: Annotated[
        str | None, Parameter(help="Revision to start from (default: config)")
    ] = None,
    tail: Annotated[
        str | None, Parameter(help="Revision to stop at (default: root commit)")
    ] = None,
    author: Annotated[
        list[str] | None,
        Parameter(name="--author", help="Author email to report separately"),
    ] = None,
    limit: Annotated[
        int | None, Parameter(help="Only average the first N lines")
    ] = None,
    format: Annotated[
        OutputFormat, Parameter(name=["--format", "-f"], help="Output format")
    ] = OutputFormat.TABLE,
) -> None:
    """Report the average age of lines, overall and per author."""
    ctx = CLIContext.get_current()
    settings = ctx.config.longevity
    logger = (ctx.logger or create_null_logger()).bind(command="summary")
    head_ref = head or settings.head
    tail_ref = tail if tail is not None else settings.tail

    if limit is not None and limit < 0:
        exit_with_error("--limit must not be negative", ExitCode.VALIDATION_ERROR)

    tracked = _resolve_identities(ctx, author)
    try:
        with GitRepository(
            ctx.repo_root, rename_threshold=settings.rename_threshold
        ) as repo:
            reconstructor = ProvenanceReconstructor(repo, repo, logger=logger)
            result = summarize(
                reconstructor.records(head_ref, tail_ref or None),
                tracked,
                limit=limit,
            )
    except (RepositoryError, LineTableError) as e:
        logger.error("reconstruction_failed", error=str(e))
        exit_for_repository_error(e)

    if format == OutputFormat.JSON:
        print(format_json(_summary_to_dict(result)))  # noqa: T201
        return

    _render_table(Console(), result)
