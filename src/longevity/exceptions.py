"""Longevity exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path


class LongevityError(Exception):
    """Base exception for longevity errors."""


# =============================================================================
# Repository Exceptions
# =============================================================================


class RepositoryError(LongevityError):
    """Raised when the repository or one of its objects cannot be read.

    Attributes:
        path: Path of the repository, if known.
        commit_id: Hex id of the commit being read, if known.
        file_path: Path of the file inside the tree, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        commit_id: str | None = None,
        file_path: str | None = None,
    ) -> None:
        """Initialize with error message and repository context."""
        super().__init__(message)
        self.path: Path | None = path
        self.commit_id: str | None = commit_id
        self.file_path: str | None = file_path


class RepositoryNotFoundError(RepositoryError):
    """No git repository exists at the given path."""


class RevisionNotFoundError(RepositoryError, KeyError):
    """Raised when a revision reference cannot be resolved to a commit.

    Attributes:
        ref: The reference that failed to resolve.
    """

    def __init__(self, message: str, *, ref: str, path: Path | None = None) -> None:
        """Initialize with error message and the unresolved reference.

        Args:
            message: Human-readable error message.
            ref: Branch, tag or commit id that could not be resolved.
            path: Path of the repository, if known.
        """
        super().__init__(message, path=path)
        self.ref: str = ref

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Provenance Exceptions
# =============================================================================


class LineTableError(LongevityError, KeyError):
    """Raised when the line table is asked about a path it does not track.

    Attributes:
        file_path: The path that is not tracked.
    """

    def __init__(self, message: str, *, file_path: str) -> None:
        """Initialize with error message and the missing path."""
        super().__init__(message)
        self.file_path: str = file_path

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(LongevityError):
    """A settings layer could not be used."""


class ConfigLoadError(ConfigError):
    """A settings file exists but is not valid TOML.

    Attributes:
        path: The offending file.
        line: 1-based line of the parse failure, when reported.
        column: 1-based column of the parse failure, when reported.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


class ConfigValidationError(ConfigError):
    """A setting has a value its schema rejects.

    Attributes:
        key: Dotted location of the setting.
        value: The rejected value.
        expected: What an acceptable value looks like.
        source: The layer or file the value came from, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str,
        value: Any,  # pyright: ignore[reportExplicitAny]
        expected: str,
        source: str | None = None,
    ) -> None:
        super().__init__(message)
        self.key: str = key
        self.value: Any = value  # pyright: ignore[reportExplicitAny]
        self.expected: str = expected
        self.source: str | None = source
