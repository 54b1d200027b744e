"""Layered settings for longevity.

Settings come from built-in defaults, a per-user file, files in the
repository, ``LONGEVITY_*`` variables and command-line options, strongest
last:

    >>> from longevity.config import Config
    >>> config = Config.from_dict({"longevity": {"rename_threshold": 80}})
    >>> config.longevity.rename_threshold
    80
"""

from longevity.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigValidationError,
)

from ._config import Config
from ._defaults import DEFAULT_CONFIG
from ._discovery import (
    LOCAL_CONFIG_NAME,
    PROJECT_CONFIG_NAME,
    WORKTREE_CONFIG_NAME,
    discover_sources,
    find_project_root,
    get_git_dir,
    get_user_config_path,
)
from ._load import safe_load_config
from ._loader import (
    deep_merge,
    parse_env_value,
    parse_env_vars,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    ConfigSource,
    ConfigSourceName,
    LogFormat,
    LoggingConfig,
    LogLevel,
    LongevityConfig,
)
from ._validation import (
    ValidationIssue,
    raise_if_validation_errors,
    validate_config,
    validate_source,
)

__all__ = [
    "DEFAULT_CONFIG",
    "LOCAL_CONFIG_NAME",
    "PROJECT_CONFIG_NAME",
    "WORKTREE_CONFIG_NAME",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "ConfigSource",
    "ConfigSourceName",
    "ConfigValidationError",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "LongevityConfig",
    "ValidationIssue",
    "deep_merge",
    "discover_sources",
    "find_project_root",
    "get_git_dir",
    "get_user_config_path",
    "parse_env_value",
    "parse_env_vars",
    "raise_if_validation_errors",
    "read_toml_file",
    "safe_load_config",
    "set_nested_key",
    "validate_config",
    "validate_source",
]
