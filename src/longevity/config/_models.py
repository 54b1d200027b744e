"""Typed sections of a longevity settings document."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from pathlib import Path


class LogLevel(StrEnum):
    """Minimum severity written to the log, most verbose first."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    JSON = "json"
    TEXT = "text"


class ConfigSourceName(StrEnum):
    """Configuration layers, listed from strongest to weakest."""

    CLI = "cli"
    ENV = "env"
    WORKTREE = "worktree"
    LOCAL = "local"
    PROJECT = "project"
    USER = "user"
    DEFAULT = "default"


@dataclass(frozen=True, slots=True)
class ConfigSource:
    """One configuration layer and what it contributed.

    Attributes:
        name: Which layer this is.
        path: File backing the layer; None for cli, env and default.
        exists: Whether the file is present, or whether inline values were given.
        values: Settings read from the layer. Empty until ``Config.load`` reads
            file and environment layers.
    """

    name: ConfigSourceName
    path: Path | None
    exists: bool
    values: dict[str, Any]


class LoggingConfig(BaseModel):
    """The ``[logging]`` table.

    Attributes:
        level: Minimum severity to emit.
        format: ``text`` for the console renderer, ``json`` for one object
            per line.
        file: Append log lines to this file instead of stderr when set.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    level: LogLevel = LogLevel.WARNING
    format: LogFormat = LogFormat.TEXT
    file: str = ""


class LongevityConfig(BaseModel):
    """The ``[longevity]`` table: defaults for a reconstruction run.

    Attributes:
        head: Revision the walk starts from.
        tail: Revision the walk stops at. Empty walks to the root commit.
        authors: Author emails whose average line age is reported separately.
        rename_threshold: Similarity percentage above which a deleted and an
            added file are treated as a rename.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(
        frozen=True, extra="ignore", coerce_numbers_to_str=True
    )

    head: str = Field(default="HEAD", min_length=1)
    tail: str = ""
    authors: tuple[str, ...] = ()
    rename_threshold: int = Field(default=60, ge=0, le=100)
