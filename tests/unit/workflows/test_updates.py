"""
repo-catalog — unit tests for rename-safe updates

File: tests/unit/workflows/test_updates.py

Purpose
- Repository and group updates keep relations pointing at live keys.
- Rename resolves the shared namespace and refuses occupied targets.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest

from repo_catalog.domain.errors import (
    GroupNotFound,
    InvalidName,
    RepositoryAndGroupExists,
    RepositoryAndGroupNotFound,
    RepositoryNotFound,
    ToNameExist,
)
from repo_catalog.domain.models import Group, Repository
from repo_catalog.workflows import (
    GroupUpdate,
    NameKind,
    RepositoryUpdate,
    rename,
    update_group,
    update_repository,
)

from . import AUTO_CREATE, NOW, ago, group_names, make_store, memberships, repository_ids


def _never_read(path: Path) -> datetime | None:
    raise AssertionError(f"unexpected access-time read of {path}")


def test_rename_with_additive_groups_keeps_memberships() -> None:
    store = make_store({"alpha": ["work"]}, groups=["oss"])

    updated = update_repository(
        store,
        "alpha",
        RepositoryUpdate(new_id="gamma", groups=("oss",)),
        now=NOW,
        read_access=_never_read,
    )

    assert updated.id == "gamma"
    assert repository_ids(store) == ["gamma"]
    assert memberships(store) == {("gamma", "work"), ("gamma", "oss")}


def test_rename_with_replacement_groups_keeps_only_new_list() -> None:
    store = make_store({"alpha": ["work", "oss"]}, groups=["tools"])

    update_repository(
        store,
        "alpha",
        RepositoryUpdate(new_id="gamma", new_groups=("tools",)),
        now=NOW,
        read_access=_never_read,
    )

    assert memberships(store) == {("gamma", "tools")}
    assert group_names(store) == ["work", "oss", "tools"]


def test_update_overlays_only_supplied_fields() -> None:
    store = make_store({"alpha": ["work"]})

    updated = update_repository(
        store,
        "alpha",
        RepositoryUpdate(description="notes"),
        now=NOW,
        read_access=_never_read,
    )

    assert updated == Repository(
        id="alpha", path=Path("/work/alpha"), description="notes", last_access=NOW
    )
    assert memberships(store) == {("alpha", "work")}


def test_unknown_group_without_auto_create_is_reported() -> None:
    store = make_store({"alpha": []})

    with pytest.raises(GroupNotFound):
        update_repository(
            store, "alpha", RepositoryUpdate(groups=("ghost",)), now=NOW, read_access=_never_read
        )

    assert group_names(store) == []


def test_unknown_group_with_auto_create_is_created() -> None:
    store = make_store({"alpha": []})

    update_repository(
        store,
        "alpha",
        RepositoryUpdate(groups=("fresh",)),
        policy=AUTO_CREATE,
        now=NOW,
        read_access=_never_read,
    )

    assert group_names(store) == ["fresh"]
    assert memberships(store) == {("alpha", "fresh")}


def test_rename_collision_leaves_relations_untouched() -> None:
    store = make_store({"alpha": ["work"], "beta": ["oss"]})

    with pytest.raises(ToNameExist):
        update_repository(
            store,
            "alpha",
            RepositoryUpdate(new_id="beta", new_groups=("oss",)),
            now=NOW,
            read_access=_never_read,
        )

    assert memberships(store) == {("alpha", "work"), ("beta", "oss")}


def test_missing_repository_is_reported() -> None:
    with pytest.raises(RepositoryNotFound):
        update_repository(make_store(), "ghost", RepositoryUpdate(description="x"))


def test_stale_last_access_is_refreshed_during_update() -> None:
    store = make_store({"alpha": []}, last_access=ago(days=3))

    updated = update_repository(
        store, "alpha", RepositoryUpdate(), now=NOW, read_access=lambda path: NOW
    )

    assert updated.last_access == NOW


def test_update_group_renames_and_repoints() -> None:
    store = make_store({"alpha": ["no-group"], "beta": ["no-group"]})

    updated = update_group(store, "no-group", GroupUpdate(new_name="current", abbrev=True))

    assert updated == Group(name="current", note="", abbrev=True)
    assert memberships(store) == {("alpha", "current"), ("beta", "current")}


def test_update_group_errors() -> None:
    store = make_store({"alpha": ["work", "oss"]})

    with pytest.raises(GroupNotFound):
        update_group(store, "ghost", GroupUpdate(note="x"))
    with pytest.raises(ToNameExist):
        update_group(store, "work", GroupUpdate(new_name="oss"))


def test_rename_resolves_repository_source() -> None:
    store = make_store({"alpha": ["work"]})

    kind = rename(store, "alpha", "gamma")

    assert kind is NameKind.REPOSITORY
    assert memberships(store) == {("gamma", "work")}


def test_rename_group_onto_repository_name_is_allowed() -> None:
    store = make_store({"alpha": ["work"]})

    kind = rename(store, "work", "alpha")

    assert kind is NameKind.GROUP
    assert memberships(store) == {("alpha", "alpha")}


def test_rename_onto_same_kind_is_refused() -> None:
    store = make_store({"alpha": ["work"], "beta": ["oss"]})

    with pytest.raises(ToNameExist):
        rename(store, "alpha", "beta")
    with pytest.raises(ToNameExist):
        rename(store, "work", "oss")


def test_rename_onto_ambiguous_name_is_refused() -> None:
    store = make_store({"alpha": ["work"], "both": ["both"]})

    with pytest.raises(ToNameExist, match="both"):
        rename(store, "alpha", "both")


def test_rename_source_errors() -> None:
    store = make_store({"both": ["both"]})

    with pytest.raises(RepositoryAndGroupNotFound):
        rename(store, "ghost", "other")
    with pytest.raises(RepositoryAndGroupExists):
        rename(store, "both", "other")


def test_rename_with_forced_kind() -> None:
    store = make_store({"both": ["both"]})

    assert rename(store, "both", "renamed", kind=NameKind.GROUP) is NameKind.GROUP
    assert memberships(store) == {("both", "renamed")}


@pytest.mark.parametrize("kind", [None, NameKind.REPOSITORY, NameKind.GROUP])
def test_rename_to_blank_name_is_a_catalog_error(kind: NameKind | None) -> None:
    store = make_store({"alpha": ["work"]})
    source = "work" if kind is NameKind.GROUP else "alpha"

    with pytest.raises(InvalidName, match="invalid"):
        rename(store, source, "  ", kind=kind)

    assert repository_ids(store) == ["alpha"]
    assert group_names(store) == ["work"]


def test_blank_names_in_updates_change_nothing() -> None:
    store = make_store({"alpha": ["work"]})

    with pytest.raises(InvalidName):
        update_repository(store, "alpha", RepositoryUpdate(groups=("",)), policy=AUTO_CREATE)
    with pytest.raises(InvalidName):
        update_repository(store, "alpha", RepositoryUpdate(new_id=""))
    with pytest.raises(InvalidName):
        update_group(store, "work", GroupUpdate(new_name=" "))

    assert memberships(store) == {("alpha", "work")}
