"""Typed catalog errors and the aggregate error used by multi-target operations."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path


class CatalogError(Exception):
    """Base class for every error raised by the catalog core."""


class RepositoryNotFound(CatalogError):
    def __init__(self, repository_id: str) -> None:
        self.repository_id = repository_id
        super().__init__(f"{repository_id}: repository not found")


class GroupNotFound(CatalogError):
    def __init__(self, group_name: str) -> None:
        self.group_name = group_name
        super().__init__(f"{group_name}: group not found")


class RelationNotFound(CatalogError):
    def __init__(self, repository_id: str, group_name: str) -> None:
        self.repository_id = repository_id
        self.group_name = group_name
        super().__init__(f"{repository_id}: relation not found for group {group_name}")


class RepositoryExists(CatalogError):
    def __init__(self, repository_id: str) -> None:
        self.repository_id = repository_id
        super().__init__(f"{repository_id}: repository already exists")


class GroupExists(CatalogError):
    def __init__(self, group_name: str) -> None:
        self.group_name = group_name
        super().__init__(f"{group_name}: group already exists")


class GroupNotEmpty(CatalogError):
    def __init__(self, group_name: str) -> None:
        self.group_name = group_name
        super().__init__(f"{group_name}: does not remove group since not empty")


class RepositoryAndGroupExists(CatalogError):
    """Raised when a name resolves to both a repository and a group."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: repository and group both exist")


class RepositoryAndGroupNotFound(CatalogError):
    """Raised when a name resolves to neither a repository nor a group."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: no repository or group found")


class ToNameExist(CatalogError):
    """Raised when a rename target is already occupied."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"{name}: the to name is occupied")


class InvalidName(CatalogError):
    """Raised when a repository id or group name is blank."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{name!r}: invalid {kind} name")


class RepositoryPathNotFound(CatalogError):
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"{self.path}: repository path not found")


class ExternalCommandError(CatalogError):
    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        super().__init__(f"{' '.join(self.command)}: exit status {returncode}")


class PromptAborted(CatalogError):
    """Raised when the confirmation prompt cannot be read."""


class CatalogStorageError(CatalogError):
    """Wraps I/O and serialization failures of the snapshot file."""


class CatalogErrors(CatalogError):
    """Aggregate of per-item failures collected by a multi-target operation."""

    def __init__(self, errors: Iterable[CatalogError]) -> None:
        self.errors: tuple[CatalogError, ...] = tuple(_flatten(errors))
        if not self.errors:
            rendered = "unknown catalog failure"
        else:
            rendered = "\n".join(str(item) for item in self.errors)
        super().__init__(rendered)


def raise_collected(errors: Sequence[CatalogError]) -> None:
    """Raise ``errors`` as one failure: the error itself if single, else an aggregate."""

    if not errors:
        return
    flat = tuple(_flatten(errors))
    if len(flat) == 1:
        raise flat[0]
    raise CatalogErrors(flat)


def iter_errors(error: CatalogError) -> tuple[CatalogError, ...]:
    if isinstance(error, CatalogErrors):
        return error.errors
    return (error,)


def _flatten(errors: Iterable[CatalogError]) -> list[CatalogError]:
    flat: list[CatalogError] = []
    for item in errors:
        if isinstance(item, CatalogErrors):
            flat.extend(item.errors)
        else:
            flat.append(item)
    return flat


__all__ = [
    "CatalogError",
    "CatalogErrors",
    "CatalogStorageError",
    "ExternalCommandError",
    "GroupExists",
    "GroupNotEmpty",
    "GroupNotFound",
    "InvalidName",
    "PromptAborted",
    "RelationNotFound",
    "RepositoryAndGroupExists",
    "RepositoryAndGroupNotFound",
    "RepositoryExists",
    "RepositoryNotFound",
    "RepositoryPathNotFound",
    "ToNameExist",
    "iter_errors",
    "raise_collected",
]
