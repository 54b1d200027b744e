"""structlog loggers for longevity.

Loggers are built standalone and passed to the components that need them;
nothing here touches structlog's global configuration. Library classes fall
back to ``create_null_logger`` when they are not given one.
"""

import logging
import sys
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormatType = Literal["json", "text"]

DEBUG_ENV_VAR = "LONGEVITY_DEBUG"


def _level_number(name: str) -> int:
    """Map ``debug``/``info``/``warning``/``error`` to its numeric level.

    Unrecognised names fall back to INFO.
    """
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _open_sink(log_file: str) -> TextIO:
    if not log_file:
        return sys.stderr
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path.open("a")


def _renderers(log_format: LogFormatType) -> "list[Processor]":  # noqa: UP037
    if log_format == "json":
        return [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    return [structlog.dev.ConsoleRenderer(colors=False)]


def create_logger(
    log_file: str = "",
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Build a logger that writes to ``log_file``, or to stderr when empty.

    Every event gets its level and an ISO timestamp. ``json`` renders one
    object per line; ``text`` uses structlog's plain console layout.

    Args:
        log_file: File to append to. Parent directories are created.
        level: Minimum level name to emit.
        log_format: ``json`` or ``text``.
    """
    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        *_renderers(log_format),
    ]
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLogger(_open_sink(log_file)),
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(_level_number(level)),
            context_class=dict,
        ),
    )


def create_cli_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    log_file: str = "",
    command: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Build the logger used by CLI commands.

    Setting ``LONGEVITY_DEBUG`` to any non-empty value forces debug level.
    When ``command`` is given it is bound to every event.
    """
    if getenv(DEBUG_ENV_VAR):
        level = "debug"
    logger = create_logger(log_file, level=level, log_format=log_format)
    return logger.bind(command=command) if command else logger


def create_null_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Build a logger that drops every event."""
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )
