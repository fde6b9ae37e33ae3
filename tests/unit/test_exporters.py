"""
repo-catalog — unit tests for catalog export

File: tests/unit/test_exporters.py

Purpose
- Validate format resolution, home-directory rewriting and the file/stdout sinks.
"""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
import yaml

from repo_catalog.domain.models import Group, Relation, Repository
from repo_catalog.exporters import (
    ExportError,
    ExportFormat,
    build_document,
    export_catalog,
    replace_home,
    resolve_format,
)
from repo_catalog.persistence import SnapshotStore


def _store() -> SnapshotStore:
    return SnapshotStore(
        repositories=[
            Repository(id="alpha", path=Path("/home/dev/src/alpha"), description="first"),
            Repository(id="beta", path=Path("/opt/beta")),
        ],
        groups=[Group(name="work", note="day job", abbrev=True)],
        relations=[Relation(id="alpha", group="work")],
    )


@pytest.mark.parametrize(
    ("explicit", "destination", "expected"),
    [
        (None, "-", ExportFormat.JSON),
        (None, "out.json", ExportFormat.JSON),
        (None, "out.YML", ExportFormat.YAML),
        (None, "out.yaml", ExportFormat.YAML),
        ("yaml", "out.json", ExportFormat.YAML),
        ("JSON", "-", ExportFormat.JSON),
    ],
)
def test_resolve_format(explicit: str | None, destination: str, expected: ExportFormat) -> None:
    assert resolve_format(explicit, destination) is expected


def test_resolve_format_rejects_unknown_inputs() -> None:
    with pytest.raises(ExportError, match="cannot infer"):
        resolve_format(None, "catalog.txt")
    with pytest.raises(ExportError, match="unknown export format"):
        resolve_format("pkl", "-")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/home/dev/src/alpha", "${HOME}/src/alpha"),
        ("/home/dev", "${HOME}"),
        ("/home/developer/x", "/home/developer/x"),
        ("/opt/beta", "/opt/beta"),
    ],
)
def test_replace_home(path: str, expected: str) -> None:
    assert replace_home(path, "/home/dev") == expected


def test_build_document_shape() -> None:
    document = build_document(_store(), home="/home/dev")

    assert list(document) == ["repositories", "groups", "relations"]
    assert document["repositories"][0] == {
        "id": "alpha",
        "path": "${HOME}/src/alpha",
        "description": "first",
        "last_access": None,
    }
    assert document["repositories"][1]["path"] == "/opt/beta"
    assert document["groups"] == [{"name": "work", "note": "day job", "abbrev": True}]
    assert document["relations"] == [{"id": "alpha", "group": "work"}]


def test_build_document_can_keep_home_paths() -> None:
    document = build_document(_store(), replace_home_dir=False, home="/home/dev")

    assert document["repositories"][0]["path"] == "/home/dev/src/alpha"


def test_export_to_stdout_writes_compact_or_indented_json() -> None:
    compact = io.StringIO()
    indented = io.StringIO()

    export_catalog(_store(), stdout=compact, home="/home/dev")
    export_catalog(_store(), indent=True, stdout=indented, home="/home/dev")

    assert compact.getvalue().count("\n") == 1
    assert indented.getvalue().startswith('{\n  "repositories"')
    assert json.loads(compact.getvalue()) == json.loads(indented.getvalue())


def test_export_to_yaml_file(tmp_path: Path) -> None:
    target = tmp_path / "catalog.yaml"

    used = export_catalog(_store(), str(target), home="/home/dev")

    assert used is ExportFormat.YAML
    loaded = yaml.safe_load(target.read_text(encoding="utf-8"))
    assert loaded["repositories"][0]["path"] == "${HOME}/src/alpha"
    assert loaded["groups"][0]["abbrev"] is True


def test_export_refuses_to_overwrite_without_flag(tmp_path: Path) -> None:
    target = tmp_path / "catalog.json"
    target.write_text("keep", encoding="utf-8")

    with pytest.raises(ExportError, match="file exists"):
        export_catalog(_store(), str(target))
    assert target.read_text(encoding="utf-8") == "keep"

    export_catalog(_store(), str(target), overwrite=True)
    assert json.loads(target.read_text(encoding="utf-8"))["relations"]
