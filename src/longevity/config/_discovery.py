"""Locating configuration layers on disk.

Project files live in the working tree root, the per-worktree file lives in
the git control directory, and the user file lives wherever platformdirs
puts per-user configuration.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import platformdirs
from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from longevity.config._defaults import DEFAULT_CONFIG
from longevity.config._models import ConfigSource, ConfigSourceName

PROJECT_CONFIG_NAME = ".longevity.toml"
LOCAL_CONFIG_NAME = ".longevity.local.toml"
WORKTREE_CONFIG_NAME = "longevity.toml"

APP_NAME = "longevity"


def _discover(start: Path | None) -> Repo | None:
    try:
        return Repo.discover(str((start or Path.cwd()).resolve()))
    except NotGitRepository:
        return None


def find_project_root(start: Path | None = None) -> Path | None:
    """Return the root of the repository enclosing ``start`` (default: cwd).

    For a bare repository this is the repository directory itself. Returns
    None when no enclosing repository exists.
    """
    repo = _discover(start)
    if repo is None:
        return None
    with repo:
        return Path(repo.path).resolve()


def get_git_dir(path: Path | None = None) -> Path | None:
    """Return the git control directory for ``path`` (default: cwd).

    Linked worktrees get their own ``.git/worktrees/<name>`` directory rather
    than the shared one. Returns None outside a repository.
    """
    repo = _discover(path)
    if repo is None:
        return None
    with repo:
        return Path(repo.controldir())


def get_user_config_path() -> Path:
    """Return where the per-user ``config.toml`` belongs on this platform.

    The file is not required to exist.
    """
    return platformdirs.user_config_path(APP_NAME) / "config.toml"


def _is_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def _file_layer(name: ConfigSourceName, path: Path) -> ConfigSource:
    return ConfigSource(name=name, path=path, exists=_is_file(path), values={})


def _inline_layer(name: ConfigSourceName, values: dict[str, Any]) -> ConfigSource:
    return ConfigSource(name=name, path=None, exists=bool(values), values=values)


def discover_sources(
    project_root: Path | None = None,
    *,
    include_env: bool = True,
    include_cli: bool = False,
    cli_overrides: dict[str, Any] | None = None,
) -> list[ConfigSource]:
    """List every configuration layer, strongest first.

    File layers are listed whether or not the file exists, with ``exists``
    telling which. Repository layers are left out when ``project_root`` is
    not given and the working directory is outside a repository. Values for
    file and environment layers are read later by ``Config.load``.

    Args:
        project_root: Repository root; detected from the working directory
            when None.
        include_env: Whether to list the ``LONGEVITY_*`` environment layer.
        include_cli: Whether to list ``cli_overrides`` as the top layer.
        cli_overrides: Settings taken from command-line options.
    """
    layers: list[ConfigSource] = []
    if include_cli:
        layers.append(_inline_layer(ConfigSourceName.CLI, cli_overrides or {}))
    if include_env:
        layers.append(
            ConfigSource(name=ConfigSourceName.ENV, path=None, exists=True, values={})
        )

    root = project_root or find_project_root()
    if root is not None:
        control_dir = get_git_dir(root)
        if control_dir is not None:
            layers.append(
                _file_layer(
                    ConfigSourceName.WORKTREE, control_dir / WORKTREE_CONFIG_NAME
                )
            )
        layers.append(_file_layer(ConfigSourceName.LOCAL, root / LOCAL_CONFIG_NAME))
        layers.append(_file_layer(ConfigSourceName.PROJECT, root / PROJECT_CONFIG_NAME))

    layers.append(_file_layer(ConfigSourceName.USER, get_user_config_path()))
    layers.append(_inline_layer(ConfigSourceName.DEFAULT, DEFAULT_CONFIG))
    return layers
