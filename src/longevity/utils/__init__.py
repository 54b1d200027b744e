"""Shared utilities for longevity."""

from ._author import get_author_email
from ._logging import (
    LogFormatType,
    create_cli_logger,
    create_logger,
    create_null_logger,
)

__all__ = [
    "LogFormatType",
    "create_cli_logger",
    "create_logger",
    "create_null_logger",
    "get_author_email",
]
