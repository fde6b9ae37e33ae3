"""Running commands inside repositories and locating ``rrh-`` subcommands."""

from __future__ import annotations

import os
import stat
from collections.abc import Sequence
from pathlib import Path

import pytest

from repo_catalog.domain.errors import CatalogErrors, ExternalCommandError
from repo_catalog.domain.models import Repository
from repo_catalog.external import (
    CommandExecutionResult,
    exec_header,
    find_external_command,
    run_external_command,
    run_in_repositories,
)


class FakeRunner:
    def __init__(self, returncodes: dict[Path | None, int] | None = None) -> None:
        self.returncodes = returncodes or {}
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []

    def run(self, command: Sequence[str], *, cwd: Path | None) -> CommandExecutionResult:
        self.calls.append((tuple(command), cwd))
        returncode = self.returncodes.get(cwd, 0)
        return CommandExecutionResult(
            command=tuple(command),
            cwd=cwd,
            returncode=returncode,
            stdout=f"out {cwd}\n",
            stderr="warn\n" if returncode else "",
        )


class BrokenRunner:
    def run(self, command: Sequence[str], *, cwd: Path | None) -> CommandExecutionResult:
        raise FileNotFoundError(command[0])


def _repos() -> list[Repository]:
    return [
        Repository(id="alpha", path=Path("/work/alpha")),
        Repository(id="beta", path=Path("/work/beta")),
    ]


def test_exec_header() -> None:
    assert exec_header(_repos()[0]) == "========== alpha (/work/alpha) =========="


def test_runs_in_every_repository_with_headers() -> None:
    runner = FakeRunner()
    lines: list[str] = []

    results = run_in_repositories(["git", "status"], _repos(), runner=runner, emit=lines.append)

    assert [call[1] for call in runner.calls] == [Path("/work/alpha"), Path("/work/beta")]
    assert [result.returncode for result in results] == [0, 0]
    assert lines == [
        "========== alpha (/work/alpha) ==========",
        "out /work/alpha",
        "========== beta (/work/beta) ==========",
        "out /work/beta",
    ]


def test_without_targets_runs_once_in_current_directory() -> None:
    runner = FakeRunner()
    lines: list[str] = []

    run_in_repositories(["pwd"], [], runner=runner, emit=lines.append, header=True)

    assert runner.calls == [(("pwd",), None)]
    assert lines == ["out None"]


def test_failures_are_collected_after_running_everywhere() -> None:
    runner = FakeRunner({Path("/work/alpha"): 2, Path("/work/beta"): 1})
    lines: list[str] = []

    with pytest.raises(CatalogErrors) as caught:
        run_in_repositories(["make"], _repos(), runner=runner, emit=lines.append, header=False)

    errors = caught.value.errors
    assert all(isinstance(error, ExternalCommandError) for error in errors)
    assert [error.returncode for error in errors] == [2, 1]  # type: ignore[attr-defined]
    assert lines == ["out /work/alpha", "warn", "out /work/beta", "warn"]


def test_spawn_failure_becomes_external_command_error() -> None:
    with pytest.raises(ExternalCommandError) as caught:
        run_in_repositories(["nope"], _repos()[:1], runner=BrokenRunner(), emit=lambda _: None)

    assert caught.value.returncode == -1
    assert isinstance(caught.value.__cause__, FileNotFoundError)


def test_empty_command_is_rejected() -> None:
    with pytest.raises(ValueError, match="no command"):
        run_in_repositories([], _repos(), runner=FakeRunner(), emit=lambda _: None)


def _install(directory: Path, name: str) -> Path:
    script = directory / name
    script.write_text("#!/bin/sh\necho \"$@\"\n", encoding="utf-8")
    script.chmod(script.stat().st_mode | stat.S_IXUSR)
    return script


def test_find_external_command_prefers_rrh2_prefix(tmp_path: Path) -> None:
    _install(tmp_path, "rrh-hello")
    environ = {"PATH": str(tmp_path)}

    assert find_external_command("hello", environ) == tmp_path / "rrh-hello"

    preferred = _install(tmp_path, "rrh2-hello")
    assert find_external_command("hello", environ) == preferred
    assert find_external_command("missing", environ) is None


def test_run_external_command_forwards_arguments() -> None:
    runner = FakeRunner()
    lines: list[str] = []

    run_external_command(Path("/bin/rrh-hello"), ["a", "b"], runner=runner, emit=lines.append)

    assert runner.calls == [(("/bin/rrh-hello", "a", "b"), None)]
    assert lines == ["out None"]


def test_run_external_command_raises_on_failure() -> None:
    runner = FakeRunner({None: 3})

    with pytest.raises(ExternalCommandError, match="exit status 3"):
        run_external_command(Path("/bin/rrh-x"), [], runner=runner, emit=lambda _: None)


@pytest.mark.skipif(os.name == "nt", reason="shell script")
def test_external_script_runs_for_real(tmp_path: Path) -> None:
    script = _install(tmp_path, "rrh-echo")
    lines: list[str] = []

    run_external_command(script, ["hi", "there"], emit=lines.append)

    assert lines == ["hi there"]
