"""Local author resolution utilities."""

from __future__ import annotations

import os
import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


def get_author_email(repo_root: Path | None = None) -> str | None:
    """Resolve the local author's email from the environment or git config.

    Resolution order:
    1. LONGEVITY_AUTHOR_EMAIL environment variable
    2. Git config ``user.email`` as seen from ``repo_root``

    Args:
        repo_root: Directory to read git config from. Defaults to the
            current working directory.

    Returns:
        The email, or None if neither source provides one.
    """
    return os.environ.get("LONGEVITY_AUTHOR_EMAIL") or _git_config(
        "user.email", cwd=repo_root
    )


def _git_config(key: str, *, cwd: Path | None = None) -> str | None:
    """Read a value from git config.

    Args:
        key: Git config key (e.g., "user.email").
        cwd: Directory to run git in.

    Returns:
        The config value, or None if not set or git is unavailable.
    """
    # Validate key to prevent injection
    if not key.replace(".", "").replace("_", "").isalnum():
        return None

    try:
        result = subprocess.run(  # noqa: S603
            ["git", "config", "--get", key],  # noqa: S607
            capture_output=True,
            text=True,
            check=True,
            cwd=str(cwd) if cwd is not None else None,
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
    return result.stdout.strip() or None
