"""Shared deterministic fixtures and builders for persistence tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Final

from repo_catalog.domain.models import Group, Relation, Repository
from repo_catalog.persistence import SnapshotStore

_BASE_TS: Final[datetime] = datetime(2026, 2, 1, 12, 0, 0, tzinfo=UTC)


def fixed_now(seed: int = 0) -> datetime:
    return _BASE_TS + timedelta(seconds=seed)


def make_repository(
    repository_id: str,
    *,
    path: str | Path | None = None,
    description: str | None = None,
    seed: int | None = 0,
) -> Repository:
    return Repository(
        id=repository_id,
        path=Path(path) if path is not None else Path("/work") / repository_id,
        description=description,
        last_access=None if seed is None else fixed_now(seed),
    )


def make_group(name: str, *, note: str = "", abbrev: bool = False) -> Group:
    return Group(name=name, note=note, abbrev=abbrev)


def make_store(
    memberships: dict[str, list[str]] | None = None,
    *,
    groups: list[str] | None = None,
) -> SnapshotStore:
    """Build a store from ``{repository_id: [group, ...]}`` plus optional extra groups."""

    memberships = memberships or {}
    group_names: list[str] = []
    for names in memberships.values():
        for name in names:
            if name not in group_names:
                group_names.append(name)
    for name in groups or []:
        if name not in group_names:
            group_names.append(name)

    return SnapshotStore(
        repositories=[
            make_repository(repository_id, seed=index)
            for index, repository_id in enumerate(memberships)
        ],
        groups=[make_group(name) for name in group_names],
        relations=[
            Relation(id=repository_id, group=name)
            for repository_id, names in memberships.items()
            for name in names
        ],
        last_modified=fixed_now(),
    )


__all__ = ["fixed_now", "make_group", "make_repository", "make_store"]
