"""
repo-catalog — consistency workflows

File: src/repo_catalog/workflows/__init__.py

Purpose
- Multi-step catalog operations built on the store contracts: registration,
  rename-safe updates, cascading removal, prune, last-access refresh and
  reporting queries.
"""

from repo_catalog.workflows.access import format_last_access, is_stale, refresh_last_access
from repo_catalog.workflows.policy import CatalogPolicy
from repo_catalog.workflows.queries import (
    find_repositories,
    recent_repositories,
    resolve_name,
    resolve_targets,
    with_groups,
)
from repo_catalog.workflows.registration import build_repository, register_paths
from repo_catalog.workflows.removal import (
    PruneCandidates,
    PruneResult,
    find_empty_groups,
    find_missing_path_repositories,
    find_orphan_repositories,
    find_prune_candidates,
    prune,
    remove_groups,
    remove_repositories,
    remove_targets,
)
from repo_catalog.workflows.updates import (
    GroupUpdate,
    NameKind,
    RepositoryUpdate,
    rename,
    update_group,
    update_repository,
)

__all__ = [
    "CatalogPolicy",
    "GroupUpdate",
    "NameKind",
    "PruneCandidates",
    "PruneResult",
    "RepositoryUpdate",
    "build_repository",
    "find_empty_groups",
    "find_missing_path_repositories",
    "find_orphan_repositories",
    "find_prune_candidates",
    "find_repositories",
    "format_last_access",
    "is_stale",
    "prune",
    "recent_repositories",
    "refresh_last_access",
    "register_paths",
    "remove_groups",
    "remove_repositories",
    "remove_targets",
    "rename",
    "resolve_name",
    "resolve_targets",
    "update_group",
    "update_repository",
    "with_groups",
]
