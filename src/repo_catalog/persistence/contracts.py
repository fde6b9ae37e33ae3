"""
repo-catalog — catalog store contracts

File: src/repo_catalog/persistence/contracts.py

Purpose
- Define the read (query) and write (mutation) contracts every catalog backend honours.

Functional requirements
- Queries never mutate and return ``None`` or an empty collection for absent keys.
- Mutations keep repository ids unique, group names unique and relation pairs distinct.
- Deleting a repository or group cascades to the relations naming it.

Non-functional requirements
- Contracts are structural (``typing.Protocol``) so tests can supply fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from repo_catalog.domain.models import Group, Relation, Repository, RepositoryWithGroups


class CatalogReader(Protocol):
    """Non-mutating query surface used by every reporting feature."""

    def find_repository(self, repository_id: str) -> Repository | None: ...

    def find_repository_with_groups(self, repository_id: str) -> RepositoryWithGroups | None: ...

    def find_group(self, name: str) -> Group | None: ...

    def find_groups_of(self, repository_id: str) -> list[Group]: ...

    def find_repositories_of(self, group_name: str) -> list[Repository]: ...

    def has_relation(self, repository_id: str, group_name: str) -> bool: ...

    def find_relation(self, repository_id: str, group_name: str) -> Relation | None: ...

    def find_relations_with_repository(self, repository_id: str) -> list[Relation]: ...

    def find_relations_with_group(self, group_name: str) -> list[Relation]: ...

    def groups(self) -> list[Group]: ...

    def repositories(self) -> list[Repository]: ...

    def relations(self) -> list[Relation]: ...

    def group_repositories(self) -> dict[str, list[Repository]]: ...


class CatalogStore(CatalogReader, Protocol):
    """Mutation surface. Every operation preserves referential consistency."""

    @property
    def refreshed(self) -> bool: ...

    def register(self, repository: Repository, group_names: Iterable[str] = ()) -> None: ...

    def register_group(self, group: Group) -> None: ...

    def relate(self, repository_id: str, group_name: str) -> Relation: ...

    def delete_relation(self, repository_id: str, group_name: str) -> None: ...

    def delete_repository(self, repository_id: str) -> None: ...

    def delete_group(self, name: str) -> None: ...

    def update_repository(self, old_id: str, repository: Repository) -> None: ...

    def update_group(self, old_name: str, group: Group) -> None: ...

    def touch_last_access(self, repository_id: str, when: datetime) -> None: ...

    def store(self, sink: BinaryIO) -> None: ...


__all__ = ["CatalogReader", "CatalogStore"]
