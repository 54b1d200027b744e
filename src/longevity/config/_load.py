"""Configuration loading for CLI entry points, tolerant of bad files."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, NoReturn

from longevity.config._config import Config
from longevity.exceptions import ConfigError

if TYPE_CHECKING:
    from pathlib import Path

STRICT_ENV_VAR = "LONGEVITY_STRICT_CONFIG"


def _abort(message: str) -> NoReturn:
    print(f"Error: {message}", file=sys.stderr)  # noqa: T201
    sys.exit(1)


def _recover(message: str, *, strict: bool) -> tuple[Config, str]:
    if strict:
        _abort(message)
    print(f"Warning: Failed to load config: {message}", file=sys.stderr)  # noqa: T201
    return Config(), message


def safe_load_config(
    *,
    config_path: Path | None = None,
    project_root: Path | None = None,
    cli_overrides: dict[str, object] | None = None,
) -> tuple[Config, str | None]:
    """Load settings for a command without letting a broken file stop it.

    An explicit ``config_path`` is read on its own and must exist. Otherwise
    every layer is loaded through ``Config.load``. If loading fails the
    defaults are returned together with the error text, unless
    ``LONGEVITY_STRICT_CONFIG=1`` is set, in which case the process exits
    with status 1.

    Args:
        config_path: File named by ``--config``.
        project_root: Repository named by ``--repo``.
        cli_overrides: Settings taken from command-line options.

    Returns:
        The config and None on success, or the default config and the error
        message after a tolerated failure.
    """
    strict = os.environ.get(STRICT_ENV_VAR, "0") == "1"
    if config_path is not None and not config_path.exists():
        _abort(f"Config file not found: {config_path}")

    try:
        if config_path is not None:
            return Config.from_file(config_path), None
        loaded = Config.load(
            project_root=project_root,
            include_env=True,
            include_cli=cli_overrides is not None,
            cli_overrides=cli_overrides,
        )
    except ConfigError as exc:
        return _recover(str(exc), strict=strict)
    except OSError as exc:
        return _recover(f"Failed to read config: {exc}", strict=strict)
    return loaded, None
