"""Shared builders for workflow tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Final

from repo_catalog.domain.models import Group, Relation, Repository
from repo_catalog.persistence import SnapshotStore
from repo_catalog.workflows import CatalogPolicy

NOW: Final[datetime] = datetime(2026, 3, 1, 9, 0, 0, tzinfo=UTC)
AUTO_CREATE: Final[CatalogPolicy] = CatalogPolicy(auto_create_group=True)


def ago(**kwargs: float) -> datetime:
    return NOW - timedelta(**kwargs)


def make_store(
    memberships: dict[str, list[str]] | None = None,
    *,
    groups: list[str] | None = None,
    root: Path | None = None,
    last_access: datetime | None = NOW,
) -> SnapshotStore:
    """Build a store from ``{repository_id: [group, ...]}``; paths live under ``root``."""

    memberships = memberships or {}
    base = root if root is not None else Path("/work")
    names_in_use = [name for names in memberships.values() for name in names]
    group_list = list(dict.fromkeys([*names_in_use, *(groups or [])]))
    return SnapshotStore(
        repositories=[
            Repository(id=repository_id, path=base / repository_id, last_access=last_access)
            for repository_id in memberships
        ],
        groups=[Group.named(name) for name in group_list],
        relations=[
            Relation(id=repository_id, group=name)
            for repository_id, names in memberships.items()
            for name in names
        ],
    )


def group_names(store: SnapshotStore) -> list[str]:
    return [group.name for group in store.groups()]


def repository_ids(store: SnapshotStore) -> list[str]:
    return [repository.id for repository in store.repositories()]


def memberships(store: SnapshotStore) -> set[tuple[str, str]]:
    return {(relation.id, relation.group) for relation in store.relations()}


__all__ = [
    "AUTO_CREATE",
    "NOW",
    "ago",
    "group_names",
    "make_store",
    "memberships",
    "repository_ids",
]
