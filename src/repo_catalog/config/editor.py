"""
repo-catalog — config file editing.

File: src/repo_catalog/config/editor.py

Purpose
- Set and unset settings and manage command aliases in ``config.toml``.

Functional requirements
- Edits operate on the file's own document; env and CLI overrides never leak into it.
- Every edited document is validated against the schema before the file is
  atomically replaced.
- Values are coerced to the type of the built-in default for their key.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

import tomli_w

from repo_catalog.config.loader import ConfigLoadError, coerce_value, read_toml_file, value_kind
from repo_catalog.config.schema import assert_valid_config, default_config, merge_config
from repo_catalog.utils.fs import atomic_write

logger = logging.getLogger(__name__)

ALIASES_SECTION: Final[str] = "aliases"
_SETTING_SECTIONS: Final[tuple[str, ...]] = ("catalog", "observability", "paths")


class ConfigEditError(ConfigLoadError):
    """Raised when an edit names an unknown key, an unset value, or a missing alias."""


def _defaults() -> Mapping[str, Any]:
    return default_config()


def setting_keys() -> tuple[str, ...]:
    """Return every dotted key ``config`` can read, set and unset."""

    defaults = _defaults()
    return tuple(
        f"{section}.{name}" for section in _SETTING_SECTIONS for name in sorted(defaults[section])
    )


def _split_key(key: str) -> tuple[str, str]:
    section, _, name = key.strip().partition(".")
    if section not in _SETTING_SECTIONS or name not in _defaults()[section]:
        raise ConfigEditError(
            f"{key}: unknown config key; expected one of: {', '.join(setting_keys())}"
        )
    return section, name


def read_document(path: Path) -> dict[str, Any]:
    """Return the raw TOML document at ``path``; a missing file is an empty document."""

    return read_toml_file(path, required=False)


def write_document(path: Path, document: Mapping[str, Any], *, dry_run: bool = False) -> None:
    """Validate ``document`` on top of the defaults, then atomically replace ``path``."""

    assert_valid_config(merge_config(default_config(), document))
    if dry_run:
        logger.info("dry run: %s left unchanged", path)
        return
    try:
        atomic_write(path, tomli_w.dumps(dict(document)))
    except OSError as exc:
        raise ConfigLoadError(f"unable to write config file {path}: {exc}") from exc
    logger.info("stored config %s", path)


def get_value(config: Mapping[str, Any], key: str) -> object:
    section, name = _split_key(key)
    return config[section][name]


def format_setting(key: str, value: object) -> str:
    if isinstance(value, bool):
        rendered = "true" if value else "false"
    elif isinstance(value, str):
        rendered = f'"{value}"'
    else:
        rendered = str(value)
    return f"{key} = {rendered}"


def set_value(document: Mapping[str, Any], key: str, raw: str) -> dict[str, Any]:
    section, name = _split_key(key)
    kind = value_kind(_defaults()[section][name]) or "str"
    value = coerce_value(raw, kind, key, (section, name))
    logger.debug("setting %s = %r", key, value)
    return merge_config(document, {section: {name: value}})


def unset_value(document: Mapping[str, Any], key: str) -> dict[str, Any]:
    section, name = _split_key(key)
    updated = merge_config({}, document)
    table = updated.get(section)
    if not isinstance(table, dict) or name not in table:
        raise ConfigEditError(f"{key}: not set in the config file")
    del table[name]
    if not table:
        del updated[section]
    return updated


def aliases_of(document: Mapping[str, Any]) -> dict[str, Any]:
    raw = document.get(ALIASES_SECTION)
    return dict(raw) if isinstance(raw, Mapping) else {}


def put_alias(
    document: Mapping[str, Any],
    name: str,
    arguments: Sequence[str],
    *,
    update: bool = False,
) -> dict[str, Any]:
    """Register ``name`` (or replace it when ``update``) as an alias for ``arguments``."""

    if not arguments:
        raise ConfigEditError(f"{name}: no commands provided")
    aliases = aliases_of(document)
    if update and name not in aliases:
        raise ConfigEditError(f"{name}: alias not found")
    if not update and name in aliases:
        raise ConfigEditError(f"{name}: alias already exists")

    aliases[name] = list(arguments)
    updated = merge_config({}, document)
    updated[ALIASES_SECTION] = aliases
    return updated


def remove_alias(document: Mapping[str, Any], name: str) -> dict[str, Any]:
    aliases = aliases_of(document)
    if name not in aliases:
        raise ConfigEditError(f"{name}: alias not found")
    del aliases[name]

    updated = merge_config({}, document)
    if aliases:
        updated[ALIASES_SECTION] = aliases
    else:
        updated.pop(ALIASES_SECTION, None)
    return updated


__all__ = [
    "ALIASES_SECTION",
    "ConfigEditError",
    "aliases_of",
    "format_setting",
    "get_value",
    "put_alias",
    "read_document",
    "remove_alias",
    "set_value",
    "setting_keys",
    "unset_value",
    "write_document",
]
