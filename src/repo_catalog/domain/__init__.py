"""
repo-catalog — domain layer

File: src/repo_catalog/domain/__init__.py

Purpose
- Catalog entities (Repository, Group, Relation) and the typed error model.

Non-functional requirements
- Keep the domain layer free of catalog I/O; only the last-access check touches the filesystem.
"""

from repo_catalog.domain.errors import (
    CatalogError,
    CatalogErrors,
    CatalogStorageError,
    ExternalCommandError,
    GroupExists,
    GroupNotEmpty,
    GroupNotFound,
    InvalidName,
    PromptAborted,
    RelationNotFound,
    RepositoryAndGroupExists,
    RepositoryAndGroupNotFound,
    RepositoryExists,
    RepositoryNotFound,
    RepositoryPathNotFound,
    ToNameExist,
)
from repo_catalog.domain.models import Group, Relation, Repository, RepositoryWithGroups

__all__ = [
    "CatalogError",
    "CatalogErrors",
    "CatalogStorageError",
    "ExternalCommandError",
    "Group",
    "GroupExists",
    "GroupNotEmpty",
    "GroupNotFound",
    "InvalidName",
    "PromptAborted",
    "Relation",
    "RelationNotFound",
    "Repository",
    "RepositoryAndGroupExists",
    "RepositoryAndGroupNotFound",
    "RepositoryExists",
    "RepositoryNotFound",
    "RepositoryPathNotFound",
    "RepositoryWithGroups",
    "ToNameExist",
]
