"""
repo-catalog — configuration schema and validation.

File: src/repo_catalog/config/schema.py

Purpose
- Define authoritative configuration defaults and strict validation rules.

What should be included in this file
- Schema versioning and migration guidance.
- Validation rules for required fields, types, enums, and numeric constraints.
- Deterministic deep-merge helpers.

Functional requirements
- Validate config payloads and return structured errors (field path + message).
- Accept ``strftime(<pattern>)`` as a last-access format alongside the named styles.

Non-functional requirements
- Keep rules deterministic and easy to audit.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict

from repo_catalog.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_DATABASE_FILE,
    DEFAULT_LAST_ACCESS_RELOAD_SECONDS,
)
from repo_catalog.utils.text import LAST_ACCESS_FORMATS

ConfigSchemaVersion: Final[int] = CONFIG_SCHEMA_VERSION

TABLE_STYLE_NAMES: Final[tuple[str, ...]] = (
    "blank",
    "empty",
    "ascii",
    "psql",
    "markdown",
    "csv",
    "rounded",
)

_ALIAS_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_-]*$")
_STRFTIME_PATTERN = re.compile(r"^strftime\(.+\)$", re.IGNORECASE)

# Config paths that should be normalized relative to config file location.
PATH_FIELDS: Final[tuple[tuple[str, ...], ...]] = (("paths", "database"),)


class MetaConfig(TypedDict):
    schema_version: int


class PathsConfig(TypedDict):
    database: str


class CatalogConfig(TypedDict):
    auto_create_group: bool
    last_access_reload_duration_secs: int
    last_access_format: str
    print_list_style: str


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["json", "text"]


class CatalogToolConfig(TypedDict):
    meta: MetaConfig
    paths: PathsConfig
    catalog: CatalogConfig
    observability: ObservabilityConfig
    aliases: dict[str, list[str]]


DEFAULT_CONFIG: Final[CatalogToolConfig] = {
    "meta": {"schema_version": ConfigSchemaVersion},
    "paths": {"database": DEFAULT_DATABASE_FILE},
    "catalog": {
        "auto_create_group": False,
        "last_access_reload_duration_secs": DEFAULT_LAST_ACCESS_RELOAD_SECONDS,
        "last_access_format": "humanize",
        "print_list_style": "blank",
    },
    "observability": {"log_level": "WARNING", "log_format": "text"},
    "aliases": {},
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


@dataclass(frozen=True, slots=True)
class ConfigValidationResult:
    """Validation result with normalized config when no issues were found."""

    config: dict[str, Any] | None
    issues: tuple[ConfigValidationIssue, ...]

    @property
    def is_valid(self) -> bool:
        return self.config is not None and not self.issues


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered}")


class _IssueCollector:
    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self._items.append(ConfigValidationIssue(path=path, message=message))

    def items(self) -> tuple[ConfigValidationIssue, ...]:
        return tuple(self._items)

    @property
    def has_issues(self) -> bool:
        return bool(self._items)


def default_config() -> CatalogToolConfig:
    """Return a deep copy of the built-in defaults."""

    return copy.deepcopy(DEFAULT_CONFIG)


def migration_guidance(found_version: int) -> str:
    if found_version < ConfigSchemaVersion:
        return (
            f"schema version {found_version} is older than supported {ConfigSchemaVersion}; "
            "upgrade config.toml to the current schema"
        )
    if found_version > ConfigSchemaVersion:
        return (
            f"schema version {found_version} is newer than supported {ConfigSchemaVersion}; "
            "upgrade repo-catalog"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, object], overlay: Mapping[str, object]) -> dict[str, Any]:
    """Deterministically deep-merge ``overlay`` onto ``base``."""

    merged = _deep_copy_mapping(base)
    _merge_into(merged, overlay)
    return merged


def validate_config(config: Mapping[str, object] | object) -> ConfigValidationResult:
    """Validate config and return structured issues with deterministic paths."""

    issues = _IssueCollector()
    root = _as_object(config, "<root>", issues)
    if root is None:
        return ConfigValidationResult(config=None, issues=issues.items())

    normalized = _validate_root(root, issues)
    if issues.has_issues:
        return ConfigValidationResult(config=None, issues=issues.items())
    return ConfigValidationResult(config=normalized, issues=())


def assert_valid_config(config: Mapping[str, object] | object) -> dict[str, Any]:
    """Validate config and raise ``ConfigValidationError`` on failure."""

    result = validate_config(config)
    if result.config is None:
        raise ConfigValidationError(result.issues)
    return result.config


def _validate_root(payload: Mapping[str, object], issues: _IssueCollector) -> dict[str, Any]:
    allowed = {"meta", "paths", "catalog", "observability", "aliases"}
    _reject_unknown_keys(payload, allowed, "", issues)
    _require_keys(payload, allowed - {"aliases"}, "", issues)

    out: dict[str, Any] = {}
    _section(payload, key="meta", issues=issues, validator=_validate_meta, out=out)
    _section(payload, key="paths", issues=issues, validator=_validate_paths, out=out)
    _section(payload, key="catalog", issues=issues, validator=_validate_catalog, out=out)
    _section(
        payload, key="observability", issues=issues, validator=_validate_observability, out=out
    )
    _section(payload, key="aliases", issues=issues, validator=_validate_aliases, out=out)
    out.setdefault("aliases", {})
    return out


def _section(
    payload: Mapping[str, object],
    *,
    key: str,
    issues: _IssueCollector,
    validator: Callable[[dict[str, object], str, _IssueCollector], dict[str, Any]],
    out: dict[str, Any],
) -> None:
    raw = payload.get(key)
    if raw is None:
        return
    section_obj = _as_object(raw, key, issues)
    if section_obj is None:
        return
    out[key] = validator(section_obj, key, issues)


def _validate_meta(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    _reject_unknown_keys(payload, {"schema_version"}, path, issues)
    _require_keys(payload, {"schema_version"}, path, issues)

    out: dict[str, Any] = {}
    if "schema_version" in payload:
        parsed = _as_int(
            payload["schema_version"], _join(path, "schema_version"), issues, minimum=1
        )
        if parsed is not None:
            out["schema_version"] = parsed
            if parsed != ConfigSchemaVersion:
                issues.add(_join(path, "schema_version"), migration_guidance(parsed))
    return out


def _validate_paths(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"database"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}
    if "database" in payload:
        parsed = _as_path_text(payload["database"], _join(path, "database"), issues)
        if parsed is not None:
            out["database"] = parsed
    return out


def _validate_catalog(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {
        "auto_create_group",
        "last_access_reload_duration_secs",
        "last_access_format",
        "print_list_style",
    }
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}

    if "auto_create_group" in payload:
        parsed_auto = _as_bool(
            payload["auto_create_group"], _join(path, "auto_create_group"), issues
        )
        if parsed_auto is not None:
            out["auto_create_group"] = parsed_auto

    if "last_access_reload_duration_secs" in payload:
        parsed_reload = _as_int(
            payload["last_access_reload_duration_secs"],
            _join(path, "last_access_reload_duration_secs"),
            issues,
            minimum=0,
        )
        if parsed_reload is not None:
            out["last_access_reload_duration_secs"] = parsed_reload

    if "last_access_format" in payload:
        parsed_format = _as_last_access_format(
            payload["last_access_format"], _join(path, "last_access_format"), issues
        )
        if parsed_format is not None:
            out["last_access_format"] = parsed_format

    if "print_list_style" in payload:
        parsed_style = _as_enum(
            payload["print_list_style"],
            _join(path, "print_list_style"),
            issues,
            allowed_values=TABLE_STYLE_NAMES,
        )
        if parsed_style is not None:
            out["print_list_style"] = parsed_style

    return out


def _validate_observability(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    allowed = {"log_level", "log_format"}
    _reject_unknown_keys(payload, allowed, path, issues)
    _require_keys(payload, allowed, path, issues)

    out: dict[str, Any] = {}

    if "log_level" in payload:
        parsed_log_level = _as_enum(
            payload["log_level"],
            _join(path, "log_level"),
            issues,
            allowed_values=("DEBUG", "INFO", "WARNING", "ERROR"),
        )
        if parsed_log_level is not None:
            out["log_level"] = parsed_log_level

    if "log_format" in payload:
        parsed_log_format = _as_enum(
            payload["log_format"],
            _join(path, "log_format"),
            issues,
            allowed_values=("json", "text"),
        )
        if parsed_log_format is not None:
            out["log_format"] = parsed_log_format

    return out


def _validate_aliases(
    payload: Mapping[str, object], path: str, issues: _IssueCollector
) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name in sorted(payload):
        alias_path = _join(path, name)
        if not _ALIAS_NAME_PATTERN.fullmatch(name):
            issues.add(alias_path, "alias names must start with a letter")
            continue
        value = payload[name]
        if isinstance(value, str):
            value = value.split()
        if not isinstance(value, list) or not value:
            issues.add(alias_path, "expected a non-empty array of command arguments")
            continue
        arguments: list[str] = []
        for index, item in enumerate(value):
            parsed = _as_str(item, f"{alias_path}[{index}]", issues)
            if parsed is not None:
                arguments.append(parsed)
        if len(arguments) == len(value):
            out[name] = arguments
    return out


def _as_object(value: object, path: str, issues: _IssueCollector) -> dict[str, object] | None:
    if not isinstance(value, Mapping):
        issues.add(path, f"expected object, got {type(value).__name__}")
        return None
    out: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            issues.add(path, f"object key must be string, got {type(key).__name__}")
            continue
        out[key] = item
    return out


def _as_str(value: object, path: str, issues: _IssueCollector) -> str | None:
    if not isinstance(value, str):
        issues.add(path, f"expected string, got {type(value).__name__}")
        return None
    parsed = value.strip()
    if not parsed:
        issues.add(path, "must not be empty")
        return None
    return parsed


def _as_path_text(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if "\x00" in parsed:
        issues.add(path, "must not contain NUL bytes")
        return None
    return parsed


def _as_last_access_format(value: object, path: str, issues: _IssueCollector) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed.lower() in LAST_ACCESS_FORMATS or _STRFTIME_PATTERN.fullmatch(parsed):
        return parsed
    expected = ", ".join((*LAST_ACCESS_FORMATS, "strftime(<pattern>)"))
    issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
    return None


def _as_bool(value: object, path: str, issues: _IssueCollector) -> bool | None:
    if isinstance(value, bool):
        return value
    issues.add(path, f"expected boolean, got {type(value).__name__}")
    return None


def _as_int(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    minimum: int | None = None,
) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        issues.add(path, f"expected integer, got {type(value).__name__}")
        return None
    if minimum is not None and value < minimum:
        issues.add(path, f"must be >= {minimum}")
        return None
    return value


def _as_enum(
    value: object,
    path: str,
    issues: _IssueCollector,
    *,
    allowed_values: tuple[str, ...],
) -> str | None:
    parsed = _as_str(value, path, issues)
    if parsed is None:
        return None
    if parsed not in allowed_values:
        expected = ", ".join(sorted(allowed_values))
        issues.add(path, f"invalid value {parsed!r}; expected one of: {expected}")
        return None
    return parsed


def _reject_unknown_keys(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(payload):
        if key not in allowed:
            issues.add(_join(path, key), "unknown field")


def _require_keys(
    payload: Mapping[str, object],
    required: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(required):
        if key not in payload:
            issues.add(_join(path, key), "missing required field")


def _join(path: str, key: str) -> str:
    if not path:
        return key
    return f"{path}.{key}"


def _merge_into(target: dict[str, Any], overlay: Mapping[str, object]) -> None:
    for key in sorted(overlay):
        value = overlay[key]
        if isinstance(value, Mapping):
            existing = target.get(key)
            if isinstance(existing, dict):
                _merge_into(existing, value)
            else:
                nested: dict[str, Any] = {}
                _merge_into(nested, value)
                target[key] = nested
        else:
            target[key] = _deep_copy_value(value)


def _deep_copy_mapping(value: Mapping[str, object]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key in sorted(value):
        out[key] = _deep_copy_value(value[key])
    return out


def _deep_copy_value(value: object) -> Any:
    if isinstance(value, Mapping):
        return {key: _deep_copy_value(item) for key, item in value.items() if isinstance(key, str)}
    if isinstance(value, list):
        return [_deep_copy_value(item) for item in value]
    return copy.deepcopy(value)


__all__ = [
    "CatalogToolConfig",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "PATH_FIELDS",
    "TABLE_STYLE_NAMES",
    "assert_valid_config",
    "default_config",
    "merge_config",
    "migration_guidance",
    "validate_config",
]
