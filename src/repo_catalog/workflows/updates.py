"""
repo-catalog — rename-safe updates

File: src/repo_catalog/workflows/updates.py

Purpose
- Update repositories and groups (identity included) without leaving relations
  that point at a stale key, and rename entries in the shared namespace.

Functional requirements
- A non-empty replacement group list drops every existing membership first;
  otherwise memberships are the current ones plus the additive list.
- Unknown target groups are created only when ``auto_create_group`` is on.
- A rename onto a key already held by the same kind fails with ``ToNameExist``.
- Blank ids and group names fail with ``InvalidName`` before anything changes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace
from datetime import datetime
from enum import StrEnum
from pathlib import Path

from repo_catalog.domain.errors import (
    CatalogError,
    GroupNotFound,
    RepositoryAndGroupExists,
    RepositoryAndGroupNotFound,
    RepositoryNotFound,
    ToNameExist,
    raise_collected,
)
from repo_catalog.domain.models import Group, Repository, require_name
from repo_catalog.persistence.contracts import CatalogStore
from repo_catalog.utils.fs import last_access_time
from repo_catalog.workflows.access import AccessTimeReader, is_stale
from repo_catalog.workflows.policy import CatalogPolicy
from repo_catalog.workflows.queries import resolve_name

logger = logging.getLogger(__name__)


class NameKind(StrEnum):
    REPOSITORY = "repository"
    GROUP = "group"


@dataclass(frozen=True, slots=True)
class RepositoryUpdate:
    new_id: str | None = None
    path: Path | None = None
    description: str | None = None
    groups: tuple[str, ...] = ()
    new_groups: tuple[str, ...] = ()

    @property
    def replaces_groups(self) -> bool:
        return bool(self.new_groups)


@dataclass(frozen=True, slots=True)
class GroupUpdate:
    new_name: str | None = None
    note: str | None = None
    abbrev: bool | None = None


def _dedupe(names: Sequence[str]) -> list[str]:
    return list(dict.fromkeys(names))


def update_repository(
    store: CatalogStore,
    repository_id: str,
    update: RepositoryUpdate,
    *,
    policy: CatalogPolicy | None = None,
    now: datetime | None = None,
    read_access: AccessTimeReader = last_access_time,
) -> Repository:
    """Apply ``update`` to ``repository_id`` and re-relate it under its (possibly new) id."""

    if update.new_id is not None:
        require_name(update.new_id, "repository")
    for group_name in (*update.groups, *update.new_groups):
        require_name(group_name, "group")

    effective = policy or CatalogPolicy()
    current = store.find_repository_with_groups(repository_id)
    if current is None:
        raise RepositoryNotFound(repository_id)

    updated = current.repository
    changes: dict[str, object] = {}
    if update.new_id is not None:
        changes["id"] = update.new_id
    if update.path is not None:
        changes["path"] = update.path
    if update.description is not None:
        changes["description"] = update.description
    updated = replace(updated, **changes)
    if is_stale(updated, reload_seconds=effective.last_access_reload_seconds, now=now):
        observed = read_access(updated.path)
        if observed is not None:
            updated = replace(updated, last_access=observed)

    if updated.id != repository_id and store.find_repository(updated.id) is not None:
        raise ToNameExist(updated.id)

    if update.replaces_groups:
        targets = _dedupe(update.new_groups)
        for relation in store.find_relations_with_repository(repository_id):
            store.delete_relation(relation.id, relation.group)
    else:
        targets = _dedupe([*current.group_names, *update.groups])

    store.update_repository(repository_id, updated)

    errors: list[CatalogError] = []
    for group_name in targets:
        if store.has_relation(updated.id, group_name):
            continue
        if store.find_group(group_name) is None:
            if not effective.auto_create_group:
                errors.append(GroupNotFound(group_name))
                continue
            logger.info("auto-creating group %s", group_name)
            store.register_group(Group.named(group_name))
        store.relate(updated.id, group_name)

    raise_collected(errors)
    return updated


def update_group(store: CatalogStore, name: str, update: GroupUpdate) -> Group:
    """Apply ``update`` to group ``name``; memberships follow a rename."""

    if update.new_name is not None:
        require_name(update.new_name, "group")
    current = store.find_group(name)
    if current is None:
        raise GroupNotFound(name)

    changes: dict[str, object] = {}
    if update.new_name is not None:
        changes["name"] = update.new_name
    if update.note is not None:
        changes["note"] = update.note
    if update.abbrev is not None:
        changes["abbrev"] = update.abbrev
    updated = replace(current, **changes)

    if updated.name != name and store.find_group(updated.name) is not None:
        raise ToNameExist(updated.name)
    store.update_group(name, updated)
    return updated


def rename(
    store: CatalogStore,
    from_name: str,
    to_name: str,
    *,
    kind: NameKind | None = None,
    policy: CatalogPolicy | None = None,
) -> NameKind:
    """
    Rename a repository or group and return which kind was renamed.

    Without ``kind`` the source is resolved in the shared namespace; a
    destination held by the same kind, or by both kinds, is refused.
    """

    require_name(to_name, kind.value if kind is not None else "repository or group")
    if kind is NameKind.REPOSITORY:
        update_repository(store, from_name, RepositoryUpdate(new_id=to_name), policy=policy)
        return NameKind.REPOSITORY
    if kind is NameKind.GROUP:
        update_group(store, from_name, GroupUpdate(new_name=to_name))
        return NameKind.GROUP

    source = resolve_name(store, from_name)
    source_kind = NameKind.REPOSITORY if isinstance(source, Repository) else NameKind.GROUP
    try:
        destination = resolve_name(store, to_name)
    except RepositoryAndGroupNotFound:
        destination = None
    except RepositoryAndGroupExists as exc:
        raise ToNameExist(to_name) from exc

    if destination is not None:
        destination_kind = (
            NameKind.REPOSITORY if isinstance(destination, Repository) else NameKind.GROUP
        )
        if destination_kind is source_kind:
            raise ToNameExist(to_name)

    return rename(store, from_name, to_name, kind=source_kind, policy=policy)


__all__ = [
    "GroupUpdate",
    "NameKind",
    "RepositoryUpdate",
    "rename",
    "update_group",
    "update_repository",
]
