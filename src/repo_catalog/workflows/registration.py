"""Register working-copy directories as catalog repositories."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from repo_catalog.domain.errors import CatalogError, RepositoryPathNotFound, raise_collected
from repo_catalog.domain.models import Repository, require_name
from repo_catalog.persistence.contracts import CatalogStore
from repo_catalog.utils.fs import canonicalize, path_exists

logger = logging.getLogger(__name__)


def build_repository(
    path: str | Path,
    *,
    repository_id: str | None = None,
    description: str | None = None,
) -> Repository:
    """Build a repository for an existing directory; the id defaults to its last segment."""

    if not path_exists(path):
        raise RepositoryPathNotFound(path)
    try:
        resolved = canonicalize(path)
    except OSError as exc:
        raise RepositoryPathNotFound(path) from exc
    identifier = repository_id or resolved.name
    if not identifier:
        raise RepositoryPathNotFound(resolved)
    return Repository.at_path(identifier, resolved, description)


def register_paths(
    store: CatalogStore,
    paths: Sequence[str | Path],
    *,
    repository_id: str | None = None,
    description: str | None = None,
    groups: Sequence[str] = (),
) -> list[Repository]:
    """
    Register every path, relating each new repository to ``groups``.

    Per-path failures are collected and raised together once all paths were
    tried; repositories registered before a failure stay registered.
    """

    if repository_id is not None:
        require_name(repository_id, "repository")
    for group_name in groups:
        require_name(group_name, "group")

    registered: list[Repository] = []
    errors: list[CatalogError] = []
    for path in paths:
        try:
            repository = build_repository(
                path, repository_id=repository_id, description=description
            )
            store.register(repository, groups)
        except CatalogError as exc:
            errors.append(exc)
            continue
        logger.info("registered %s at %s", repository.id, repository.path)
        registered.append(repository)

    raise_collected(errors)
    return registered


__all__ = ["build_repository", "register_paths"]
