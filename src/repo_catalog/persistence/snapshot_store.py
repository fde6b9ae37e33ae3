"""
repo-catalog — snapshot-file catalog store

File: src/repo_catalog/persistence/snapshot_store.py

Purpose
- In-memory implementation of the catalog query and mutation contracts, loaded
  from and stored to one JSON snapshot document.

Functional requirements
- Collections keep insertion order; entities are resolved by key.
- Construction rejects duplicate repository ids and group names; relations that
  name a missing repository or group are dropped with a warning.
- Registration is atomic: a failure restores the pre-call collections.
- Repository and group updates rewrite the relations that name the old key.
- Snapshot writes replace the file atomically.

Non-functional requirements
- Snapshot JSON is UTF-8 with the ``last-modified`` / ``repositories`` /
  ``groups`` / ``relations`` keys; legacy ``secs_since_epoch`` timestamps load.
"""

from __future__ import annotations

import io
import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Final

from repo_catalog.domain.errors import (
    CatalogStorageError,
    GroupExists,
    GroupNotFound,
    RelationNotFound,
    RepositoryExists,
    RepositoryNotFound,
)
from repo_catalog.domain.models import (
    Group,
    JSONValue,
    Relation,
    Repository,
    RepositoryWithGroups,
    as_datetime,
    datetime_to_iso8601z,
    utc_now,
)
from repo_catalog.utils.fs import atomic_write

logger = logging.getLogger(__name__)

_RelationPredicate = Callable[[Relation], bool]

LAST_MODIFIED_KEY: Final[str] = "last-modified"
_SNAPSHOT_KEYS: Final[frozenset[str]] = frozenset(
    {LAST_MODIFIED_KEY, "repositories", "groups", "relations"}
)


class SnapshotStore:
    """Catalog backed by three ordered in-memory collections."""

    def __init__(
        self,
        repositories: Iterable[Repository] = (),
        groups: Iterable[Group] = (),
        relations: Iterable[Relation] = (),
        *,
        last_modified: datetime | None = None,
    ) -> None:
        self._repositories: list[Repository] = []
        for repository in repositories:
            if self._repository_index(repository.id) is not None:
                raise ValueError(f"snapshot.repositories: duplicate id {repository.id!r}")
            self._repositories.append(repository)
        self._groups: list[Group] = []
        for group in groups:
            if self._group_index(group.name) is not None:
                raise ValueError(f"snapshot.groups: duplicate name {group.name!r}")
            self._groups.append(group)
        self._relations: list[Relation] = []
        for relation in relations:
            if relation in self._relations:
                continue
            missing_repository = self._repository_index(relation.id) is None
            if missing_repository or self._group_index(relation.group) is None:
                logger.warning(
                    "dropping relation %s -> %s: repository or group missing",
                    relation.id,
                    relation.group,
                )
                continue
            self._relations.append(relation)
        self.last_modified = last_modified or utc_now()
        self._refreshed = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_repository(self, repository_id: str) -> Repository | None:
        for repository in self._repositories:
            if repository.id == repository_id:
                return repository
        return None

    def find_repository_with_groups(self, repository_id: str) -> RepositoryWithGroups | None:
        repository = self.find_repository(repository_id)
        if repository is None:
            return None
        return RepositoryWithGroups(
            repository=repository, groups=tuple(self.find_groups_of(repository_id))
        )

    def find_group(self, name: str) -> Group | None:
        for group in self._groups:
            if group.name == name:
                return group
        return None

    def find_groups_of(self, repository_id: str) -> list[Group]:
        groups: list[Group] = []
        for relation in self.find_relations_with_repository(repository_id):
            group = self.find_group(relation.group)
            if group is not None:
                groups.append(group)
        return groups

    def find_repositories_of(self, group_name: str) -> list[Repository]:
        repositories: list[Repository] = []
        for relation in self.find_relations_with_group(group_name):
            repository = self.find_repository(relation.id)
            if repository is not None:
                repositories.append(repository)
        return repositories

    def has_relation(self, repository_id: str, group_name: str) -> bool:
        return self.find_relation(repository_id, group_name) is not None

    def find_relation(self, repository_id: str, group_name: str) -> Relation | None:
        for relation in self._relations:
            if relation.id == repository_id and relation.group == group_name:
                return relation
        return None

    def find_relations_with_repository(self, repository_id: str) -> list[Relation]:
        return [relation for relation in self._relations if relation.id == repository_id]

    def find_relations_with_group(self, group_name: str) -> list[Relation]:
        return [relation for relation in self._relations if relation.group == group_name]

    def groups(self) -> list[Group]:
        return list(self._groups)

    def repositories(self) -> list[Repository]:
        return list(self._repositories)

    def relations(self) -> list[Relation]:
        return list(self._relations)

    def group_repositories(self) -> dict[str, list[Repository]]:
        """Map every group name (empty groups included) to its member repositories."""

        return {group.name: self.find_repositories_of(group.name) for group in self._groups}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    @property
    def refreshed(self) -> bool:
        """Whether a last-access value was refreshed since load."""

        return self._refreshed

    def register(self, repository: Repository, group_names: Iterable[str] = ()) -> None:
        if self.find_repository(repository.id) is not None:
            raise RepositoryExists(repository.id)

        names = list(group_names)
        saved = (list(self._repositories), list(self._groups), list(self._relations))
        try:
            for name in names:
                if self.find_group(name) is None:
                    logger.info("auto-creating group %s", name)
                    self.register_group(Group.named(name))
            for name in names:
                self.relate(repository.id, name)
            self._repositories.append(repository)
        except Exception:
            self._repositories, self._groups, self._relations = saved
            raise
        logger.debug("registered repository %s (groups=%s)", repository.id, names)

    def register_group(self, group: Group) -> None:
        if self.find_group(group.name) is not None:
            raise GroupExists(group.name)
        self._groups.append(group)

    def relate(self, repository_id: str, group_name: str) -> Relation:
        existing = self.find_relation(repository_id, group_name)
        if existing is not None:
            return existing
        relation = Relation(id=repository_id, group=group_name)
        self._relations.append(relation)
        return relation

    def delete_relation(self, repository_id: str, group_name: str) -> None:
        relation = self.find_relation(repository_id, group_name)
        if relation is None:
            raise RelationNotFound(repository_id, group_name)
        self._relations.remove(relation)

    def delete_repository(self, repository_id: str) -> None:
        index = self._repository_index(repository_id)
        if index is None:
            raise RepositoryNotFound(repository_id)
        del self._repositories[index]
        removed = self._drop_relations(lambda relation: relation.id == repository_id)
        logger.debug("deleted repository %s and %d relation(s)", repository_id, removed)

    def delete_group(self, name: str) -> None:
        index = self._group_index(name)
        if index is None:
            raise GroupNotFound(name)
        del self._groups[index]
        removed = self._drop_relations(lambda relation: relation.group == name)
        logger.debug("deleted group %s and %d relation(s)", name, removed)

    def update_repository(self, old_id: str, repository: Repository) -> None:
        """Replace the repository stored as ``old_id`` and re-point its relations."""

        if self._repository_index(old_id) is None:
            raise RepositoryNotFound(old_id)
        if repository.id != old_id and self.find_repository(repository.id) is not None:
            raise RepositoryExists(repository.id)
        self._replace_repository(old_id, repository)
        if repository.id != old_id:
            self._relations = [
                replace(relation, id=repository.id) if relation.id == old_id else relation
                for relation in self._relations
            ]

    def update_group(self, old_name: str, group: Group) -> None:
        """Replace the group stored as ``old_name`` and re-point its relations."""

        index = self._group_index(old_name)
        if index is None:
            raise GroupNotFound(old_name)
        if group.name != old_name and self.find_group(group.name) is not None:
            raise GroupExists(group.name)
        self._groups[index] = group
        if group.name != old_name:
            self._relations = [
                replace(relation, group=group.name) if relation.group == old_name else relation
                for relation in self._relations
            ]

    def touch_last_access(self, repository_id: str, when: datetime) -> None:
        index = self._repository_index(repository_id)
        if index is None:
            raise RepositoryNotFound(repository_id)
        self._repositories[index] = replace(self._repositories[index], last_access=when)
        self._refreshed = True

    def store(self, sink: BinaryIO) -> None:
        """Serialize the snapshot to ``sink`` with a refreshed ``last-modified`` stamp."""

        self.last_modified = utc_now()
        try:
            payload = json.dumps(self.to_dict(), ensure_ascii=False, indent=2)
            sink.write(payload.encode("utf-8"))
        except (OSError, TypeError, ValueError) as exc:
            raise CatalogStorageError(f"unable to store catalog: {exc}") from exc

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, JSONValue]:
        return {
            LAST_MODIFIED_KEY: datetime_to_iso8601z(self.last_modified),
            "repositories": [repository.to_dict() for repository in self._repositories],
            "groups": [group.to_dict() for group in self._groups],
            "relations": [relation.to_dict() for relation in self._relations],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> SnapshotStore:
        if not isinstance(data, Mapping):
            raise ValueError(f"snapshot: expected object, got {type(data).__name__}")
        unknown = sorted(key for key in data if key not in _SNAPSHOT_KEYS)
        if unknown:
            raise ValueError(f"snapshot: unexpected fields: {unknown}")

        raw_modified = data.get(LAST_MODIFIED_KEY)
        return cls(
            repositories=[
                Repository.from_dict(item) for item in _as_list(data, "repositories")
            ],
            groups=[Group.from_dict(item) for item in _as_list(data, "groups")],
            relations=[Relation.from_dict(item) for item in _as_list(data, "relations")],
            last_modified=(
                None if raw_modified is None else as_datetime(raw_modified, LAST_MODIFIED_KEY)
            ),
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _replace_repository(self, old_id: str, repository: Repository) -> None:
        """Raw replacement; relations are left untouched."""

        index = self._repository_index(old_id)
        if index is None:
            raise RepositoryNotFound(old_id)
        self._repositories[index] = repository

    def _repository_index(self, repository_id: str) -> int | None:
        for index, repository in enumerate(self._repositories):
            if repository.id == repository_id:
                return index
        return None

    def _group_index(self, name: str) -> int | None:
        for index, group in enumerate(self._groups):
            if group.name == name:
                return index
        return None

    def _drop_relations(self, predicate: _RelationPredicate) -> int:
        kept = [relation for relation in self._relations if not predicate(relation)]
        removed = len(self._relations) - len(kept)
        self._relations = kept
        return removed


def _as_list(data: Mapping[str, object], key: str) -> list[Mapping[str, object]]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"snapshot.{key}: expected array, got {type(value).__name__}")
    return value


def load_snapshot(path: str | Path) -> SnapshotStore:
    """Load the catalog from ``path``; a missing file yields an empty catalog."""

    target = Path(path)
    if not target.exists():
        logger.info("catalog %s not found; starting empty", target)
        return SnapshotStore()
    try:
        with target.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        store = SnapshotStore.from_dict(payload)
    except OSError as exc:
        raise CatalogStorageError(f"unable to read catalog {target}: {exc}") from exc
    except ValueError as exc:
        raise CatalogStorageError(f"invalid catalog {target}: {exc}") from exc
    logger.info(
        "loaded catalog %s (%d repositories, %d groups)",
        target,
        len(store.repositories()),
        len(store.groups()),
    )
    return store


def save_snapshot(store: SnapshotStore, path: str | Path) -> None:
    """Serialize ``store`` and atomically replace ``path``."""

    target = Path(path)
    buffer = io.BytesIO()
    store.store(buffer)
    try:
        atomic_write(target, buffer.getvalue())
    except OSError as exc:
        raise CatalogStorageError(f"unable to write catalog {target}: {exc}") from exc
    logger.info("stored catalog %s", target)


__all__ = ["LAST_MODIFIED_KEY", "SnapshotStore", "load_snapshot", "save_snapshot"]
