"""The resolved settings object handed to commands.

A Config is built once per invocation from the layered sources found by
discovery and is read-only afterwards. Callers reach settings either through
the typed sections (``config.longevity``, ``config.logging``) or by dotted key.
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, ClassVar, Self, TypeVar, overload

import tomli_w
from pydantic import BaseModel, ConfigDict, PrivateAttr

from longevity.config._defaults import DEFAULT_CONFIG
from longevity.config._discovery import discover_sources
from longevity.config._loader import (
    copy_value,
    deep_merge,
    parse_env_vars,
    read_toml_file,
)
from longevity.config._models import (
    ConfigSource,
    ConfigSourceName,
    LoggingConfig,
    LongevityConfig,
)
from longevity.config._validation import raise_if_validation_errors, validate_config

if TYPE_CHECKING:
    from pathlib import Path

T = TypeVar("T")

_INLINE_SOURCES = frozenset({ConfigSourceName.DEFAULT, ConfigSourceName.CLI})

# Revisions such as an all-digit abbreviated sha must not become ints.
_TEXT_SETTINGS = frozenset(
    f"{section}.{name}"
    for section, model in (("longevity", LongevityConfig), ("logging", LoggingConfig))
    for name, field in model.model_fields.items()
    if field.annotation is str
)


class Config(BaseModel):
    """Read-only view over merged longevity settings.

    Build instances through ``from_dict``, ``from_file`` or ``load``; the
    keyword-only constructor expects data that has already been merged and
    checked.

    Example:
        >>> config = Config.from_dict({"longevity": {"tail": "v1.0"}})
        >>> config.longevity.tail
        'v1.0'
        >>> config.get("longevity.head")
        'HEAD'
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    _data: dict[str, Any] = PrivateAttr(default_factory=dict)
    _sources: tuple[ConfigSource, ...] = PrivateAttr(default=())
    _logging: LoggingConfig = PrivateAttr(default_factory=LoggingConfig)
    _longevity: LongevityConfig = PrivateAttr(default_factory=LongevityConfig)

    def __init__(
        self,
        *,
        _data: dict[str, Any] | None = None,
        _sources: tuple[ConfigSource, ...] = (),
    ) -> None:
        super().__init__()
        data = _data if _data is not None else copy_value(DEFAULT_CONFIG)
        self._data = data
        self._sources = _sources
        self._logging = LoggingConfig.model_validate(data.get("logging", {}))
        self._longevity = LongevityConfig.model_validate(data.get("longevity", {}))

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, validate: bool = True) -> Self:
        """Build a config from ``data`` layered over the built-in defaults.

        Raises:
            ConfigValidationError: If ``validate`` is set and a value is invalid.
        """
        merged = deep_merge(DEFAULT_CONFIG, data)
        if validate:
            raise_if_validation_errors(validate_config(merged))
        return cls(_data=merged)

    @classmethod
    def from_file(cls, path: Path, *, validate: bool = True) -> Self:
        """Build a config from a single TOML file layered over the defaults.

        No other source is consulted. The file is recorded as the project
        source.

        Raises:
            FileNotFoundError: If ``path`` is missing.
            ConfigLoadError: If ``path`` is not valid TOML.
            ConfigValidationError: If ``validate`` is set and a value is invalid.
        """
        values = read_toml_file(path)
        merged = deep_merge(DEFAULT_CONFIG, values)
        if validate:
            raise_if_validation_errors(validate_config(merged), source=str(path))
        origin = ConfigSource(
            name=ConfigSourceName.PROJECT, path=path, exists=True, values=values
        )
        return cls(_data=merged, _sources=(origin,))

    @classmethod
    def load(
        cls,
        *,
        project_root: Path | None = None,
        include_env: bool = True,
        include_cli: bool = False,
        cli_overrides: dict[str, Any] | None = None,
    ) -> Self:
        """Resolve every layer and merge them into one config.

        Layers are applied weakest first: built-in defaults, the user file,
        ``.longevity.toml``, ``.longevity.local.toml``, the per-worktree
        ``longevity.toml``, ``LONGEVITY_*`` variables, then command-line
        overrides.

        Args:
            project_root: Repository root to search for project files. When
                None the current working directory is searched upward.
            include_env: Whether ``LONGEVITY_*`` variables form a layer.
            include_cli: Whether ``cli_overrides`` form a layer.
            cli_overrides: Nested overrides taken from command-line options.

        Raises:
            ConfigLoadError: If a discovered file is not valid TOML.
            ConfigValidationError: If the merged result is invalid.
        """
        discovered = discover_sources(
            project_root=project_root,
            include_env=include_env,
            include_cli=include_cli,
            cli_overrides=cli_overrides,
        )

        merged: dict[str, Any] = {}
        resolved: list[ConfigSource] = []
        # discover_sources lists the strongest layer first
        for source in reversed(discovered):
            values = _source_values(source)
            resolved.append(replace(source, values=values))
            if values:
                merged = deep_merge(merged, values)

        raise_if_validation_errors(validate_config(merged))
        resolved.reverse()
        return cls(_data=merged, _sources=tuple(resolved))

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    @property
    def sources(self) -> list[ConfigSource]:
        """Layers consulted by ``load``, strongest first."""
        return list(self._sources)

    @property
    def logging(self) -> LoggingConfig:
        return self._logging

    @property
    def longevity(self) -> LongevityConfig:
        return self._longevity

    @overload
    def get(self, key: str) -> Any: ...

    @overload
    def get(self, key: str, default: T) -> T: ...

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``key`` written as dotted segments, e.g. ``longevity.tail``.

        Returns ``default`` as soon as a segment is missing or the value at
        that point is not a table.
        """
        node: Any = self._data
        for segment in key.split("."):
            if not isinstance(node, dict) or segment not in node:
                return default
            node = node[segment]
        return node

    def to_dict(self, *, include_defaults: bool = True) -> dict[str, Any]:
        """Return a deep copy of the settings.

        With ``include_defaults=False`` only keys whose values differ from the
        built-in defaults are kept; tables left empty are dropped.
        """
        if not include_defaults:
            return _prune_defaults(self._data, DEFAULT_CONFIG)
        return copy_value(self._data)

    def to_toml(self, *, include_defaults: bool = True) -> str:
        return tomli_w.dumps(self.to_dict(include_defaults=include_defaults))


def _source_values(source: ConfigSource) -> dict[str, Any]:
    if source.name in _INLINE_SOURCES:
        return source.values
    if source.name is ConfigSourceName.ENV:
        return parse_env_vars(text_keys=_TEXT_SETTINGS)
    if source.path is not None and source.exists:
        return read_toml_file(source.path)
    return {}


def _prune_defaults(data: dict[str, Any], baseline: dict[str, Any]) -> dict[str, Any]:
    kept: dict[str, Any] = {}
    for key, value in data.items():
        if key not in baseline:
            kept[key] = copy_value(value)
            continue
        reference = baseline[key]
        if isinstance(value, dict) and isinstance(reference, dict):
            nested = _prune_defaults(value, reference)
            if nested:
                kept[key] = nested
        elif value != reference:
            kept[key] = copy_value(value)
    return kept
