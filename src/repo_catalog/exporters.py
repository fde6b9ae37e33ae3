"""
repo-catalog — catalog export

File: src/repo_catalog/exporters.py

Purpose
- Render the catalog as a JSON or YAML document for backup and sharing.

Functional requirements
- Document keys: ``repositories``, ``groups``, ``relations``.
- Paths under the home directory are written with a ``${HOME}`` prefix unless disabled.
- Destination ``-`` means stdout; an existing file is only replaced with ``overwrite``.
- Format is explicit or inferred from the destination suffix.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from enum import StrEnum
from pathlib import Path
from typing import Any, Final, TextIO

import yaml

from repo_catalog.constants import HOME_PLACEHOLDER
from repo_catalog.persistence.contracts import CatalogReader
from repo_catalog.utils.fs import atomic_write, is_within

logger = logging.getLogger(__name__)

STDOUT_DESTINATION: Final[str] = "-"


class ExportFormat(StrEnum):
    JSON = "json"
    YAML = "yaml"


_SUFFIX_FORMATS: Final[Mapping[str, ExportFormat]] = {
    ".json": ExportFormat.JSON,
    ".yaml": ExportFormat.YAML,
    ".yml": ExportFormat.YAML,
}


class ExportError(ValueError):
    """Raised for an unusable export format or destination."""


def resolve_format(explicit: str | None, destination: str) -> ExportFormat:
    """Explicit format wins; otherwise infer from the suffix; stdout defaults to JSON."""

    if explicit is not None:
        try:
            return ExportFormat(explicit.strip().lower())
        except ValueError as exc:
            raise ExportError(f"{explicit}: unknown export format") from exc
    if destination == STDOUT_DESTINATION:
        return ExportFormat.JSON
    inferred = _SUFFIX_FORMATS.get(Path(destination).suffix.lower())
    if inferred is None:
        raise ExportError(f"{destination}: cannot infer export format from file name")
    return inferred


def replace_home(path: str | Path, home: str | Path) -> str:
    """Rewrite a path under ``home`` to start with ``${HOME}``."""

    text = str(path)
    home_path = Path(home)
    if not str(home_path).strip() or not is_within(text, home_path):
        return text
    relative = Path(text).relative_to(home_path)
    if relative == Path("."):
        return HOME_PLACEHOLDER
    return f"{HOME_PLACEHOLDER}/{relative.as_posix()}"


def build_document(
    store: CatalogReader,
    *,
    replace_home_dir: bool = True,
    home: str | Path | None = None,
) -> dict[str, Any]:
    home_dir = home if home is not None else os.environ.get("HOME", "")
    repositories = []
    for repository in store.repositories():
        entry = repository.to_dict()
        if replace_home_dir and home_dir:
            entry["path"] = replace_home(repository.path, home_dir)
        repositories.append(entry)
    return {
        "repositories": repositories,
        "groups": [group.to_dict() for group in store.groups()],
        "relations": [relation.to_dict() for relation in store.relations()],
    }


def render_document(document: Mapping[str, Any], fmt: ExportFormat, *, indent: bool = False) -> str:
    if fmt is ExportFormat.YAML:
        return yaml.safe_dump(dict(document), sort_keys=False, allow_unicode=True)
    if indent:
        return json.dumps(document, ensure_ascii=False, indent=2) + "\n"
    return json.dumps(document, ensure_ascii=False, separators=(",", ":")) + "\n"


def export_catalog(
    store: CatalogReader,
    destination: str = STDOUT_DESTINATION,
    *,
    fmt: str | None = None,
    overwrite: bool = False,
    replace_home_dir: bool = True,
    indent: bool = False,
    stdout: TextIO | None = None,
    home: str | Path | None = None,
) -> ExportFormat:
    """Write the catalog to ``destination`` and return the format used."""

    resolved = resolve_format(fmt, destination)
    if destination != STDOUT_DESTINATION and Path(destination).exists() and not overwrite:
        raise ExportError(f"{destination}: file exists")

    document = build_document(store, replace_home_dir=replace_home_dir, home=home)
    text = render_document(document, resolved, indent=indent)

    if destination == STDOUT_DESTINATION:
        if stdout is None:
            raise ExportError("no output stream available for '-'")
        stdout.write(text)
    else:
        atomic_write(destination, text)
        logger.info("exported catalog to %s (%s)", destination, resolved.value)
    return resolved


__all__ = [
    "ExportError",
    "ExportFormat",
    "STDOUT_DESTINATION",
    "build_document",
    "export_catalog",
    "render_document",
    "replace_home",
    "resolve_format",
]
