"""Read-side helpers: flat-namespace lookup, keyword find, recent listing and exec targets."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from repo_catalog.constants import DEFAULT_RECENT_LIMIT
from repo_catalog.domain.errors import (
    CatalogError,
    GroupNotFound,
    RepositoryAndGroupExists,
    RepositoryAndGroupNotFound,
    RepositoryNotFound,
    raise_collected,
)
from repo_catalog.domain.models import Group, Repository, RepositoryWithGroups
from repo_catalog.persistence.contracts import CatalogReader


def resolve_name(store: CatalogReader, name: str) -> Repository | Group:
    """Resolve ``name`` in the shared repository/group namespace."""

    repository = store.find_repository(name)
    group = store.find_group(name)
    if repository is not None and group is not None:
        raise RepositoryAndGroupExists(name)
    if repository is not None:
        return repository
    if group is not None:
        return group
    raise RepositoryAndGroupNotFound(name)


def with_groups(
    store: CatalogReader, repositories: Iterable[Repository]
) -> list[RepositoryWithGroups]:
    return [
        RepositoryWithGroups(
            repository=repository, groups=tuple(store.find_groups_of(repository.id))
        )
        for repository in repositories
    ]


def _matches(repository: Repository, keyword: str) -> bool:
    return (
        keyword in repository.id
        or keyword in str(repository.path)
        or keyword in (repository.description or "")
    )


def find_repositories(
    store: CatalogReader,
    keywords: Sequence[str],
    *,
    match_all: bool = False,
) -> list[RepositoryWithGroups]:
    """Repositories whose id, path or description contain any (or every) keyword."""

    combine = all if match_all else any
    hits = [
        repository
        for repository in store.repositories()
        if combine(_matches(repository, keyword) for keyword in keywords)
    ]
    return with_groups(store, hits)


def recent_repositories(
    store: CatalogReader, limit: int = DEFAULT_RECENT_LIMIT
) -> list[RepositoryWithGroups]:
    """Most recently accessed first; repositories with no access time sort last."""

    def sort_key(repository: Repository) -> tuple[int, float]:
        if repository.last_access is None:
            return (1, 0.0)
        return (0, -repository.last_access.timestamp())

    ordered = sorted(store.repositories(), key=sort_key)
    return with_groups(store, ordered[: max(limit, 0)])


def resolve_targets(
    store: CatalogReader,
    groups: Sequence[str] = (),
    repository_ids: Sequence[str] = (),
) -> list[Repository]:
    """Members of ``groups`` followed by ``repository_ids``, each repository once."""

    errors: list[CatalogError] = []
    targets: list[Repository] = []
    seen: set[str] = set()

    def add(repository: Repository) -> None:
        if repository.id not in seen:
            seen.add(repository.id)
            targets.append(repository)

    for group_name in groups:
        if store.find_group(group_name) is None:
            errors.append(GroupNotFound(group_name))
            continue
        for repository in store.find_repositories_of(group_name):
            add(repository)
    for repository_id in repository_ids:
        repository = store.find_repository(repository_id)
        if repository is None:
            errors.append(RepositoryNotFound(repository_id))
            continue
        add(repository)

    raise_collected(errors)
    return targets


__all__ = [
    "find_repositories",
    "recent_repositories",
    "resolve_name",
    "resolve_targets",
    "with_groups",
]
