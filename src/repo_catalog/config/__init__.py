"""
repo-catalog config package public API.

File: src/repo_catalog/config/__init__.py

Purpose
- Export config loading/validation entrypoints and public error types.

Functional requirements
- Support loading from ``config.toml`` + ``RRH_`` env overrides.
- Fail fast with clear structured validation/load errors.
"""

from repo_catalog.config.editor import (
    ConfigEditError,
    format_setting,
    get_value,
    put_alias,
    read_document,
    remove_alias,
    set_value,
    setting_keys,
    unset_value,
    write_document,
)
from repo_catalog.config.loader import (
    ENV_PREFIX,
    ConfigLoadError,
    dump_effective_config,
    load_config,
    normalize_paths,
    resolve_config_path,
)
from repo_catalog.config.schema import (
    DEFAULT_CONFIG,
    PATH_FIELDS,
    TABLE_STYLE_NAMES,
    CatalogToolConfig,
    ConfigSchemaVersion,
    ConfigValidationError,
    ConfigValidationIssue,
    ConfigValidationResult,
    assert_valid_config,
    default_config,
    merge_config,
    migration_guidance,
    validate_config,
)

__all__ = [
    "CatalogToolConfig",
    "ConfigEditError",
    "ConfigLoadError",
    "ConfigSchemaVersion",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "ConfigValidationResult",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "PATH_FIELDS",
    "TABLE_STYLE_NAMES",
    "assert_valid_config",
    "default_config",
    "dump_effective_config",
    "format_setting",
    "get_value",
    "load_config",
    "merge_config",
    "migration_guidance",
    "normalize_paths",
    "put_alias",
    "read_document",
    "remove_alias",
    "resolve_config_path",
    "set_value",
    "setting_keys",
    "unset_value",
    "validate_config",
    "write_document",
]
