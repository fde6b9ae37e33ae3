"""
repo-catalog — external command execution

File: src/repo_catalog/external.py

Purpose
- Run a command inside each selected repository (``exec``) and dispatch
  unknown sub-commands to ``rrh-<name>`` executables on ``PATH``.

Functional requirements
- Commands run to completion without a timeout; output is relayed after exit.
- Non-zero exit statuses and launch failures are collected per repository.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Protocol

from repo_catalog.domain.errors import CatalogError, ExternalCommandError, raise_collected
from repo_catalog.domain.models import Repository

logger = logging.getLogger(__name__)

EXTERNAL_COMMAND_PREFIXES: Final[tuple[str, ...]] = ("rrh2-", "rrh-")


@dataclass(frozen=True, slots=True)
class CommandExecutionResult:
    """Normalized subprocess execution result."""

    command: tuple[str, ...]
    cwd: Path | None
    returncode: int
    stdout: str
    stderr: str


class CommandRunner(Protocol):
    """Injectable command runner used for offline testing."""

    def run(self, command: Sequence[str], *, cwd: Path | None) -> CommandExecutionResult: ...


class SubprocessCommandRunner:
    """Default command runner backed by ``subprocess.run``."""

    def run(self, command: Sequence[str], *, cwd: Path | None) -> CommandExecutionResult:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
        )
        return CommandExecutionResult(
            command=tuple(command),
            cwd=cwd,
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )


def exec_header(repository: Repository) -> str:
    return f"========== {repository.id} ({repository.path}) =========="


def run_in_repositories(
    command: Sequence[str],
    repositories: Sequence[Repository],
    *,
    runner: CommandRunner | None = None,
    emit: Callable[[str], None],
    header: bool = True,
) -> list[CommandExecutionResult]:
    """
    Run ``command`` in every repository, emitting headers and captured output.

    With no repositories the command runs once in the current directory.
    """

    if not command:
        raise ValueError("no command given")
    active = runner or SubprocessCommandRunner()
    results: list[CommandExecutionResult] = []
    errors: list[CatalogError] = []

    if not repositories:
        result = _run_one(active, command, None, errors)
        if result is not None:
            _emit_output(result, emit)
            results.append(result)
        raise_collected(errors)
        return results

    for repository in repositories:
        if header:
            emit(exec_header(repository))
        result = _run_one(active, command, repository.path, errors)
        if result is None:
            continue
        _emit_output(result, emit)
        results.append(result)

    raise_collected(errors)
    return results


def _run_one(
    runner: CommandRunner,
    command: Sequence[str],
    cwd: Path | None,
    errors: list[CatalogError],
) -> CommandExecutionResult | None:
    logger.debug("running %s in %s", " ".join(command), cwd or ".")
    try:
        result = runner.run(command, cwd=cwd)
    except OSError as exc:
        error = ExternalCommandError(command, -1)
        error.__cause__ = exc
        errors.append(error)
        return None
    if result.returncode != 0:
        errors.append(ExternalCommandError(command, result.returncode))
    return result


def _emit_output(result: CommandExecutionResult, emit: Callable[[str], None]) -> None:
    for text in (result.stdout, result.stderr):
        if text:
            emit(text.rstrip("\n"))


def find_external_command(name: str, environ: Mapping[str, str] | None = None) -> Path | None:
    """Locate ``rrh2-<name>`` or ``rrh-<name>`` on ``PATH``."""

    env_map = os.environ if environ is None else environ
    search_path = env_map.get("PATH", "")
    for prefix in EXTERNAL_COMMAND_PREFIXES:
        found = shutil.which(f"{prefix}{name}", path=search_path)
        if found is not None:
            return Path(found)
    return None


def run_external_command(
    executable: Path,
    arguments: Sequence[str],
    *,
    runner: CommandRunner | None = None,
    emit: Callable[[str], None],
) -> CommandExecutionResult:
    active = runner or SubprocessCommandRunner()
    command = (str(executable), *arguments)
    try:
        result = active.run(command, cwd=None)
    except OSError as exc:
        raise ExternalCommandError(command, -1) from exc
    _emit_output(result, emit)
    if result.returncode != 0:
        raise ExternalCommandError(command, result.returncode)
    return result


__all__ = [
    "CommandExecutionResult",
    "CommandRunner",
    "SubprocessCommandRunner",
    "exec_header",
    "find_external_command",
    "run_external_command",
    "run_in_repositories",
]
