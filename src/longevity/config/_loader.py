"""Reading, layering and environment parsing for configuration data."""

from __future__ import annotations

import copy
import os
import tomllib
from typing import TYPE_CHECKING, Any

import orjson

from longevity.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from collections.abc import Collection
    from pathlib import Path

ENV_PREFIX = "LONGEVITY_"
ENV_SEPARATOR = "__"

_BOOLEANS = {"true": True, "false": False}
_JSON_BRACKETS = (("[", "]"), ("{", "}"))


def read_toml_file(path: Path) -> dict[str, Any]:
    """Parse the TOML document at ``path``.

    Raises:
        FileNotFoundError: If ``path`` is missing.
        ConfigLoadError: If the document is not valid TOML. The parser's line
            and column are attached when the interpreter reports them.
    """
    with path.open("rb") as stream:
        try:
            return tomllib.load(stream)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigLoadError(
                f"Cannot parse {path}: {exc}",
                path=path,
                line=getattr(exc, "lineno", None),
                column=getattr(exc, "colno", None),
            ) from exc


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Layer ``override`` on top of ``base`` and return a fresh dictionary.

    Tables present on both sides merge key by key. Any other value in
    ``override``, arrays included, replaces what ``base`` held. Neither
    argument is mutated.
    """
    merged = copy_value(base)
    for key, incoming in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = deep_merge(current, incoming)
        else:
            merged[key] = copy_value(incoming)
    return merged


def copy_value(value: Any) -> Any:
    """Return a deep copy of ``value``."""
    return copy.deepcopy(value)


def parse_env_vars(
    prefix: str = ENV_PREFIX, *, text_keys: Collection[str] = ()
) -> dict[str, Any]:
    """Collect ``LONGEVITY_SECTION__KEY`` variables into nested settings.

    The part after the prefix is lower-cased and split on ``__``, so
    ``LONGEVITY_LOGGING__LEVEL=debug`` becomes ``{"logging": {"level":
    "debug"}}``. Names without a separator, such as ``LONGEVITY_DEBUG`` or
    ``LONGEVITY_STRICT_CONFIG``, are process flags and are skipped.

    Args:
        prefix: Variable name prefix.
        text_keys: Dotted keys whose values are kept as the raw string
            instead of going through ``parse_env_value``.
    """
    settings: dict[str, Any] = {}
    for name, raw in os.environ.items():
        if not name.startswith(prefix):
            continue
        suffix = name.removeprefix(prefix)
        if ENV_SEPARATOR not in suffix:
            continue
        dotted = ".".join(suffix.lower().split(ENV_SEPARATOR))
        value = raw if dotted in text_keys else parse_env_value(raw)
        set_nested_key(settings, dotted, value)
    return settings


def parse_env_value(value: str) -> Any:
    """Coerce an environment string into a config value.

    ``true``/``false`` in any case become booleans, integer literals become
    ints, and bracketed text that decodes as JSON becomes a list or table.
    Everything else is returned unchanged.

    Examples:
        >>> parse_env_value("TRUE")
        True
        >>> parse_env_value("75")
        75
        >>> parse_env_value('["a@example.com"]')
        ['a@example.com']
    """
    if value.lower() in _BOOLEANS:
        return _BOOLEANS[value.lower()]
    try:
        return int(value)
    except ValueError:
        pass
    if any(value.startswith(o) and value.endswith(c) for o, c in _JSON_BRACKETS):
        try:
            return orjson.loads(value)
        except orjson.JSONDecodeError:
            return value
    return value


def set_nested_key(d: dict[str, Any], key_path: str, value: Any) -> None:
    """Store ``value`` in ``d`` under a dotted path, creating tables on the way.

    A scalar sitting where a table is needed is replaced.

    Example:
        >>> d = {}
        >>> set_nested_key(d, "longevity.tail", "v1.0")
        >>> d
        {'longevity': {'tail': 'v1.0'}}
    """
    *parents, leaf = key_path.split(".")
    node = d
    for name in parents:
        child = node.get(name)
        if not isinstance(child, dict):
            child = node[name] = {}
        node = child
    node[leaf] = value
