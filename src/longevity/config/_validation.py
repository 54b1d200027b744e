"""Schema checks for merged settings and for individual sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from longevity.config._models import LoggingConfig, LongevityConfig
from longevity.exceptions import ConfigValidationError

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from longevity.config._models import ConfigSource


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """One problem found in configuration data.

    Attributes:
        key: Dotted location of the offending value, e.g. ``longevity.head``.
        message: What is wrong, as reported by the schema.
        expected: A short description of an acceptable value, when the
            schema provides one.
        actual: The rejected value.
        source: Name of the layer the value came from, or None for merged data.
        severity: ``"error"`` issues abort loading; ``"warning"`` issues do not.
    """

    key: str
    message: str
    expected: str | None
    actual: Any
    source: str | None
    severity: Literal["error", "warning"]


class ConfigSchema(BaseModel):
    """Top-level layout of a settings document. Unknown tables are ignored."""

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")

    logging: LoggingConfig = LoggingConfig()
    longevity: LongevityConfig = LongevityConfig()


def _describe_expected(context: dict[str, Any] | None) -> str | None:
    if not context:
        return None
    if "expected" in context:
        return str(context["expected"])
    lower, upper = context.get("ge"), context.get("le")
    if lower is not None and upper is not None:
        return f"between {lower} and {upper}"
    if lower is not None:
        return f">= {lower}"
    if upper is not None:
        return f"<= {upper}"
    return None


def _issues_from(exc: ValidationError, source: str | None) -> list[ValidationIssue]:
    return [_to_issue(detail, source) for detail in exc.errors()]


def _to_issue(detail: ErrorDetails, source: str | None) -> ValidationIssue:
    return ValidationIssue(
        key=".".join(map(str, detail.get("loc", ()))),
        message=str(detail.get("msg", "invalid value")),
        expected=_describe_expected(detail.get("ctx")),
        actual=detail.get("input"),
        source=source,
        severity="error",
    )


def _check(values: dict[str, Any], source: str | None) -> list[ValidationIssue]:
    try:
        ConfigSchema.model_validate(values)
    except ValidationError as exc:
        return _issues_from(exc, source)
    return []


def validate_config(config: dict[str, Any]) -> list[ValidationIssue]:
    """Check merged settings against the schema; an empty list means valid."""
    return _check(config, None)


def validate_source(source: ConfigSource) -> list[ValidationIssue]:
    """Check the values of one layer, tagging issues with the layer's name.

    Absent or empty layers yield no issues.
    """
    if source.exists and source.values:
        return _check(source.values, source.name.value)
    return []


def raise_if_validation_errors(
    issues: list[ValidationIssue],
    source: str | None = None,
) -> None:
    """Turn the first error-level issue into a ConfigValidationError.

    Args:
        issues: Issues returned by ``validate_config`` or ``validate_source``.
        source: Label to put on the exception instead of the issue's own
            source, e.g. the path of an explicitly requested file.

    Raises:
        ConfigValidationError: If at least one issue has error severity.
    """
    first = next((issue for issue in issues if issue.severity == "error"), None)
    if first is None:
        return
    raise ConfigValidationError(
        f"Invalid configuration value for '{first.key}': {first.message}",
        key=first.key,
        value=first.actual,
        expected=first.expected or first.message,
        source=source or first.source,
    )
