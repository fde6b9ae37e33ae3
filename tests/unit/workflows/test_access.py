"""Lazy last-access refresh."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from repo_catalog.domain.errors import RepositoryNotFound
from repo_catalog.workflows import (
    CatalogPolicy,
    format_last_access,
    is_stale,
    refresh_last_access,
)

from . import NOW, ago, make_store


def test_is_stale_thresholds() -> None:
    store = make_store({"fresh": [], "old": []})
    fresh, old = store.repositories()
    old.last_access = ago(days=2)

    assert not is_stale(fresh, reload_seconds=86400, now=NOW)
    assert is_stale(old, reload_seconds=86400, now=NOW)

    fresh.last_access = None
    assert is_stale(fresh, reload_seconds=86400, now=NOW)


def test_refresh_touches_stale_repository_only() -> None:
    store = make_store({"alpha": []}, last_access=ago(days=2))
    seen: list[Path] = []

    def read_access(path: Path) -> datetime | None:
        seen.append(path)
        return NOW

    refresh_last_access(store, "alpha", now=NOW, read_access=read_access)
    refresh_last_access(store, "alpha", now=NOW, read_access=read_access)

    assert seen == [Path("/work/alpha")]
    assert store.refreshed
    repository = store.find_repository("alpha")
    assert repository is not None and repository.last_access == NOW


def test_refresh_ignores_unreadable_paths() -> None:
    store = make_store({"alpha": []}, last_access=None)

    refresh_last_access(store, "alpha", now=NOW, read_access=lambda path: None)

    assert not store.refreshed


def test_refresh_missing_repository() -> None:
    with pytest.raises(RepositoryNotFound):
        refresh_last_access(make_store(), "ghost", now=NOW)


def test_format_last_access_styles() -> None:
    store = make_store({"alpha": []}, last_access=ago(days=3))
    (repository,) = store.repositories()

    assert format_last_access(repository, now=NOW) == "3 days ago"
    iso = format_last_access(repository, CatalogPolicy(last_access_format="iso"), now=NOW)
    assert datetime.fromisoformat(iso) == ago(days=3)

    repository.last_access = None
    assert format_last_access(repository, now=NOW) == ""
