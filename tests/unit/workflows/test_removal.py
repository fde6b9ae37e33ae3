"""Cascading removal and prune."""

from __future__ import annotations

from pathlib import Path

import pytest

from repo_catalog.domain.errors import (
    GroupNotEmpty,
    PromptAborted,
    RepositoryAndGroupNotFound,
    RepositoryNotFound,
)
from repo_catalog.workflows import (
    find_orphan_repositories,
    find_prune_candidates,
    prune,
    remove_groups,
    remove_repositories,
    remove_targets,
)

from . import group_names, make_store, memberships, repository_ids


def _always_exists(path: Path) -> bool:
    return True


def test_remove_repositories_cascades_and_collects_missing() -> None:
    store = make_store({"alpha": ["work"], "beta": ["work"]})

    with pytest.raises(RepositoryNotFound):
        remove_repositories(store, ["alpha", "ghost"])

    assert repository_ids(store) == ["beta"]
    assert memberships(store) == {("beta", "work")}
    assert group_names(store) == ["work"]


def test_remove_groups_requires_force_when_not_empty() -> None:
    store = make_store({"alpha": ["work"]}, groups=["empty"])

    with pytest.raises(GroupNotEmpty):
        remove_groups(store, ["work", "empty"])
    assert group_names(store) == ["work"]

    assert remove_groups(store, ["work"], force=True) == ["work"]
    assert group_names(store) == []
    assert repository_ids(store) == ["alpha"]
    assert memberships(store) == set()


def test_remove_targets_resolves_shared_namespace() -> None:
    store = make_store({"alpha": ["work"], "beta": []}, groups=["empty"])

    with pytest.raises(RepositoryAndGroupNotFound):
        remove_targets(store, ["alpha", "empty", "work", "ghost"])

    assert repository_ids(store) == ["beta"]
    assert group_names(store) == []


def test_orphan_repositories() -> None:
    store = make_store({"alpha": ["work"], "beta": []})

    assert [repo.id for repo in find_orphan_repositories(store)] == ["beta"]


def test_prune_deletes_exactly_the_empty_groups() -> None:
    store = make_store({"alpha": ["work"]}, groups=["empty-a", "empty-b"])

    result = prune(store, exists=_always_exists)

    assert result.deleted
    assert [group.name for group in result.candidates.groups] == ["empty-a", "empty-b"]
    assert group_names(store) == ["work"]
    assert repository_ids(store) == ["alpha"]


def test_prune_removes_repositories_with_missing_paths(tmp_path: Path) -> None:
    (tmp_path / "alive").mkdir()
    store = make_store({"alive": ["work"], "gone": ["work"]}, root=tmp_path)

    result = prune(store)

    assert [repo.id for repo in result.candidates.repositories] == ["gone"]
    assert repository_ids(store) == ["alive"]
    assert memberships(store) == {("alive", "work")}


def test_prune_dry_run_reports_without_mutating() -> None:
    store = make_store({"alpha": ["work"]}, groups=["empty-a", "empty-b"])
    before = store.to_dict()

    result = prune(store, dry_run=True, exists=_always_exists)

    assert not result.deleted
    assert result.candidates == find_prune_candidates(store, exists=_always_exists)
    assert len(result.candidates.groups) == 2
    assert store.to_dict() == before


def test_prune_declined_confirmation_is_a_noop() -> None:
    store = make_store(groups=["empty"])
    prompts: list[str] = []

    def decline(message: str) -> bool:
        prompts.append(message)
        return False

    result = prune(store, confirm=decline, exists=_always_exists)

    assert not result.deleted
    assert group_names(store) == ["empty"]
    assert prompts == [
        "found 1 empty group, and 0 non-exists path repositories. Do you want to delete them?"
    ]


def test_prune_unreadable_prompt_aborts() -> None:
    store = make_store(groups=["empty"])

    def closed_stdin(message: str) -> bool:
        raise EOFError

    with pytest.raises(PromptAborted):
        prune(store, confirm=closed_stdin, exists=_always_exists)
    assert group_names(store) == ["empty"]


def test_prune_with_nothing_to_do_skips_prompt() -> None:
    store = make_store({"alpha": ["work"]})

    def unexpected(message: str) -> bool:
        raise AssertionError("prompted")

    assert not prune(store, confirm=unexpected, exists=_always_exists).deleted
