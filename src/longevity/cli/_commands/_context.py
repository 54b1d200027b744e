"""Per-invocation state shared by CLI commands.

The meta command resolves global options once, stores a CLIContext in a
context variable, and clears it when the command returns.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from longevity.config import Config

if TYPE_CHECKING:
    from pathlib import Path

    from structlog.typing import FilteringBoundLogger


class OutputFormat(StrEnum):
    TABLE = "table"
    JSON = "json"
    TOML = "toml"


_active: contextvars.ContextVar[CLIContext | None] = contextvars.ContextVar(
    "longevity_cli_context", default=None
)


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global options and resolved settings for the running command.

    Attributes:
        config: Settings resolved for this invocation.
        repo_root: Directory passed with ``--repo``; None means the working
            directory.
        verbose: Whether ``--verbose`` was given.
        config_error: Why settings fell back to defaults, if they did.
        logger: Logger configured from the ``[logging]`` settings.
    """

    config: Config = field(repr=False)
    repo_root: Path | None = None
    verbose: bool = False
    config_error: str | None = None
    logger: FilteringBoundLogger | None = field(default=None, repr=False)

    @classmethod
    def get_current(cls) -> CLIContext:
        """Return the active context, or one built from default settings."""
        active = _active.get()
        return active if active is not None else cls(config=Config())

    @classmethod
    def set_current(cls, ctx: CLIContext) -> None:
        _active.set(ctx)

    @classmethod
    def reset(cls) -> None:
        _active.set(None)
