"""
repo-catalog — cascading removal and prune

File: src/repo_catalog/workflows/removal.py

Purpose
- Delete repositories and groups by name (relations cascade) and prune
  empty groups plus repositories whose directory disappeared.

Functional requirements
- Group removal without ``force`` refuses groups that still have members.
- Prune candidates are computed without mutating the store.
- A declined confirmation deletes nothing; an unreadable prompt aborts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from repo_catalog.domain.errors import (
    CatalogError,
    GroupNotEmpty,
    PromptAborted,
    raise_collected,
)
from repo_catalog.domain.models import Group, Repository
from repo_catalog.persistence.contracts import CatalogReader, CatalogStore
from repo_catalog.utils.fs import path_exists
from repo_catalog.utils.text import format_humanize
from repo_catalog.workflows.queries import resolve_name

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
PathCheck = Callable[[Path], bool]


def remove_repositories(store: CatalogStore, repository_ids: Sequence[str]) -> list[str]:
    """Delete each repository; returns the ids actually removed."""

    removed: list[str] = []
    errors: list[CatalogError] = []
    for repository_id in repository_ids:
        try:
            store.delete_repository(repository_id)
        except CatalogError as exc:
            errors.append(exc)
            continue
        removed.append(repository_id)
    raise_collected(errors)
    return removed


def remove_groups(
    store: CatalogStore, names: Sequence[str], *, force: bool = False
) -> list[str]:
    """Delete each group; non-empty groups need ``force``."""

    removed: list[str] = []
    errors: list[CatalogError] = []
    for name in names:
        try:
            _remove_group(store, name, force=force)
        except CatalogError as exc:
            errors.append(exc)
            continue
        removed.append(name)
    raise_collected(errors)
    return removed


def _remove_group(store: CatalogStore, name: str, *, force: bool) -> None:
    if not force and store.find_relations_with_group(name):
        raise GroupNotEmpty(name)
    store.delete_group(name)


def remove_targets(
    store: CatalogStore, names: Sequence[str], *, force: bool = False
) -> list[str]:
    """Delete repositories or groups named in the shared namespace."""

    removed: list[str] = []
    errors: list[CatalogError] = []
    for name in names:
        try:
            target = resolve_name(store, name)
            if isinstance(target, Repository):
                store.delete_repository(name)
            else:
                _remove_group(store, name, force=force)
        except CatalogError as exc:
            errors.append(exc)
            continue
        removed.append(name)
    raise_collected(errors)
    return removed


@dataclass(frozen=True, slots=True)
class PruneCandidates:
    groups: tuple[Group, ...] = ()
    repositories: tuple[Repository, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.groups and not self.repositories

    def prompt_message(self) -> str:
        return "found {}, and {}. Do you want to delete them?".format(
            format_humanize(len(self.groups), "empty group", "empty groups"),
            format_humanize(
                len(self.repositories),
                "non-exists path repository",
                "non-exists path repositories",
            ),
        )


@dataclass(frozen=True, slots=True)
class PruneResult:
    candidates: PruneCandidates
    deleted: bool


def find_empty_groups(store: CatalogReader) -> list[Group]:
    return [group for group in store.groups() if not store.find_relations_with_group(group.name)]


def find_missing_path_repositories(
    store: CatalogReader, *, exists: PathCheck = path_exists
) -> list[Repository]:
    return [repository for repository in store.repositories() if not exists(repository.path)]


def find_orphan_repositories(store: CatalogReader) -> list[Repository]:
    """Repositories that belong to no group."""

    related = {relation.id for relation in store.relations()}
    return [repository for repository in store.repositories() if repository.id not in related]


def find_prune_candidates(
    store: CatalogReader, *, exists: PathCheck = path_exists
) -> PruneCandidates:
    return PruneCandidates(
        groups=tuple(find_empty_groups(store)),
        repositories=tuple(find_missing_path_repositories(store, exists=exists)),
    )


def prune(
    store: CatalogStore,
    *,
    confirm: Confirm | None = None,
    dry_run: bool = False,
    exists: PathCheck = path_exists,
) -> PruneResult:
    """
    Delete empty groups and repositories whose path no longer exists.

    ``confirm`` receives the summary prompt; ``False`` turns the call into a
    no-op. ``dry_run`` reports the candidates without deleting anything.
    """

    candidates = find_prune_candidates(store, exists=exists)
    if dry_run or candidates.is_empty:
        return PruneResult(candidates=candidates, deleted=False)

    if confirm is not None:
        try:
            accepted = confirm(candidates.prompt_message())
        except (EOFError, OSError) as exc:
            raise PromptAborted(f"unable to read confirmation: {exc}") from exc
        if not accepted:
            logger.info("prune declined")
            return PruneResult(candidates=candidates, deleted=False)

    errors: list[CatalogError] = []
    for group in candidates.groups:
        try:
            store.delete_group(group.name)
        except CatalogError as exc:
            errors.append(exc)
    for repository in candidates.repositories:
        try:
            store.delete_repository(repository.id)
        except CatalogError as exc:
            errors.append(exc)
    raise_collected(errors)
    logger.info(
        "pruned %d group(s) and %d repository(ies)",
        len(candidates.groups),
        len(candidates.repositories),
    )
    return PruneResult(candidates=candidates, deleted=True)


__all__ = [
    "PruneCandidates",
    "PruneResult",
    "find_empty_groups",
    "find_missing_path_repositories",
    "find_orphan_repositories",
    "find_prune_candidates",
    "prune",
    "remove_groups",
    "remove_repositories",
    "remove_targets",
]
