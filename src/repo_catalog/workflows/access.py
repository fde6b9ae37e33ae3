"""Lazy last-access refresh and rendering."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

from repo_catalog.domain.errors import RepositoryNotFound
from repo_catalog.domain.models import Repository, utc_now
from repo_catalog.persistence.contracts import CatalogStore
from repo_catalog.utils.fs import last_access_time
from repo_catalog.utils.text import format_timestamp
from repo_catalog.workflows.policy import CatalogPolicy

logger = logging.getLogger(__name__)

AccessTimeReader = Callable[[Path], datetime | None]


def is_stale(
    repository: Repository,
    *,
    reload_seconds: int,
    now: datetime | None = None,
) -> bool:
    """A missing last-access value is always stale."""

    if repository.last_access is None:
        return True
    reference = now if now is not None else utc_now()
    return reference - repository.last_access > timedelta(seconds=reload_seconds)


def refresh_last_access(
    store: CatalogStore,
    repository_id: str,
    *,
    policy: CatalogPolicy | None = None,
    now: datetime | None = None,
    read_access: AccessTimeReader = last_access_time,
) -> Repository:
    """Re-read the filesystem access time of a stale repository and record it in ``store``."""

    effective = policy or CatalogPolicy()
    repository = store.find_repository(repository_id)
    if repository is None:
        raise RepositoryNotFound(repository_id)
    if not is_stale(repository, reload_seconds=effective.last_access_reload_seconds, now=now):
        return repository

    observed = read_access(repository.path)
    if observed is not None and observed != repository.last_access:
        logger.debug("refreshing last access of %s", repository_id)
        store.touch_last_access(repository_id, observed)
        return store.find_repository(repository_id) or repository
    return repository


def format_last_access(
    repository: Repository,
    policy: CatalogPolicy | None = None,
    *,
    now: datetime | None = None,
) -> str:
    if repository.last_access is None:
        return ""
    style = (policy or CatalogPolicy()).last_access_format
    return format_timestamp(repository.last_access, style, now=now)


__all__ = ["format_last_access", "is_stale", "refresh_last_access"]
