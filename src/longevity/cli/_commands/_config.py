# ruff: noqa: A002, FBT002
"""The ``config`` command: show the effective configuration."""

from typing import Annotated

from cyclopts import Parameter

from ._context import CLIContext, OutputFormat
from ._shared import ExitCode, exit_with_error, format_json


def config(
    *,
    format: Annotated[
        OutputFormat, Parameter(name=["--format", "-f"], help="Output format")
    ] = OutputFormat.TOML,
    defaults: Annotated[
        bool, Parameter(help="Include values that match the built-in defaults")
    ] = True,
) -> None:
    """Show the effective configuration."""
    ctx = CLIContext.get_current()
    if ctx.config_error:
        exit_with_error(ctx.config_error, ExitCode.LOAD_ERROR)

    if format == OutputFormat.JSON:
        print(format_json(ctx.config.to_dict(include_defaults=defaults)))  # noqa: T201
    elif format == OutputFormat.TOML:
        print(ctx.config.to_toml(include_defaults=defaults), end="")  # noqa: T201
    else:
        exit_with_error(
            f"Unsupported format for config: {format.value}",
            ExitCode.VALIDATION_ERROR,
        )
