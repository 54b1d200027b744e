"""Longevity CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._config import config
from ._context import CLIContext, OutputFormat
from ._lines import lines
from ._shared import ExitCode, exit_with_error, format_json, get_error_console
from ._summary import summary

if TYPE_CHECKING:
    from cyclopts import App

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
    "exit_with_error",
    "format_json",
    "get_error_console",
    "register_commands",
]


def register_commands(app: App) -> None:
    app.command(lines, name="lines")
    app.command(summary, name="summary")
    app.command(config, name="config")
