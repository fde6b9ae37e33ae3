"""
repo-catalog — unit tests for config loader

File: tests/unit/config/test_loader.py

Purpose
- Validate deterministic config loading from defaults, TOML, env overrides, and CLI overrides.

What this test file should cover
- Precedence: CLI > env > file > defaults.
- Env var path mapping and type coercion.
- Config directory resolution through ``RRH_CONFIG_DIR``.
- Database path normalization relative to the config file.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from repo_catalog.config.loader import (
    ConfigLoadError,
    dump_effective_config,
    load_config,
    resolve_config_path,
)
from repo_catalog.config.schema import ConfigValidationError


def _write_config(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_default_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(environ={"RRH_CONFIG_DIR": str(tmp_path)})

    assert config["catalog"]["auto_create_group"] is False
    assert config["catalog"]["print_list_style"] == "blank"
    assert config["aliases"] == {}
    assert config["paths"]["database"] == (tmp_path / "database.json").resolve().as_posix()


def test_missing_explicit_file_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigLoadError, match="config file not found"):
        load_config(tmp_path / "nope.toml", environ={})


def test_loader_precedence_file_env_cli(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "config.toml",
        """
[catalog]
auto_create_group = true
print_list_style = "psql"
last_access_reload_duration_secs = 60
""".strip(),
    )
    environ = {
        "RRH_CATALOG_PRINT_LIST_STYLE": "markdown",
        "RRH_CATALOG_LAST_ACCESS_RELOAD_DURATION_SECS": "120",
    }

    config = load_config(
        config_path,
        environ=environ,
        cli_overrides={"catalog.last_access_reload_duration_secs": 5},
    )

    assert config["catalog"]["auto_create_group"] is True
    assert config["catalog"]["print_list_style"] == "markdown"
    assert config["catalog"]["last_access_reload_duration_secs"] == 5


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("yes", True), ("On", True), ("0", False), ("false", False)],
)
def test_env_boolean_coercion(tmp_path: Path, raw: str, expected: bool) -> None:
    config = load_config(
        environ={"RRH_CONFIG_DIR": str(tmp_path), "RRH_CATALOG_AUTO_CREATE_GROUP": raw}
    )

    assert config["catalog"]["auto_create_group"] is expected


def test_env_coercion_failures_name_the_variable(tmp_path: Path) -> None:
    base = {"RRH_CONFIG_DIR": str(tmp_path)}

    with pytest.raises(ConfigLoadError, match="RRH_CATALOG_AUTO_CREATE_GROUP"):
        load_config(environ={**base, "RRH_CATALOG_AUTO_CREATE_GROUP": "maybe"})
    with pytest.raises(ConfigLoadError, match="must be an integer"):
        load_config(environ={**base, "RRH_CATALOG_LAST_ACCESS_RELOAD_DURATION_SECS": "soon"})


def test_env_cannot_bind_alias_entries(tmp_path: Path) -> None:
    _write_config(tmp_path / "config.toml", '[aliases]\nls = ["list", "--entry", "id"]\n')

    config = load_config(environ={"RRH_CONFIG_DIR": str(tmp_path), "RRH_ALIASES_LS": "rm"})

    assert config["aliases"] == {"ls": ["list", "--entry", "id"]}


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path / "config.toml", "[catalog\n")

    with pytest.raises(ConfigLoadError, match="invalid TOML"):
        load_config(config_path, environ={})


def test_invalid_values_fail_validation(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "config.toml", '[catalog]\nprint_list_style = "fancy"\n'
    )

    with pytest.raises(ConfigValidationError, match="catalog.print_list_style"):
        load_config(config_path, environ={})


def test_database_path_is_relative_to_config_file(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path / "conf" / "config.toml", '[paths]\ndatabase = "data/db.json"\n'
    )

    config = load_config(config_path, environ={})

    expected = (tmp_path / "conf" / "data" / "db.json").resolve().as_posix()
    assert config["paths"]["database"] == expected


def test_database_path_expands_environment_variables(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RRH_TEST_DATA", str(tmp_path / "data"))
    config_path = _write_config(
        tmp_path / "config.toml", '[paths]\ndatabase = "${RRH_TEST_DATA}/db.json"\n'
    )

    config = load_config(config_path, environ={})

    assert config["paths"]["database"] == (tmp_path / "data" / "db.json").as_posix()


def test_resolve_config_path_precedence(tmp_path: Path) -> None:
    explicit = tmp_path / "explicit.toml"

    assert resolve_config_path(explicit, environ={}) == explicit.resolve()
    assert (
        resolve_config_path(environ={"RRH_CONFIG_DIR": str(tmp_path)})
        == (tmp_path / "config.toml").resolve()
    )
    assert resolve_config_path(environ={}).name == "config.toml"


def test_dump_effective_config_is_deterministic(tmp_path: Path) -> None:
    environ = {"RRH_CONFIG_DIR": str(tmp_path)}
    first = dump_effective_config(load_config(environ=environ))
    second = dump_effective_config(load_config(environ=environ))

    assert first == second
    assert json.loads(first)["catalog"]["last_access_format"] == "humanize"
    assert first.splitlines()[1].startswith("  ")
