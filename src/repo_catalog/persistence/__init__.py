"""
repo-catalog — persistence layer

File: src/repo_catalog/persistence/__init__.py

Purpose
- Catalog query/mutation contracts and the JSON snapshot backend.
"""

from repo_catalog.persistence.contracts import CatalogReader, CatalogStore
from repo_catalog.persistence.snapshot_store import (
    LAST_MODIFIED_KEY,
    SnapshotStore,
    load_snapshot,
    save_snapshot,
)

__all__ = [
    "CatalogReader",
    "CatalogStore",
    "LAST_MODIFIED_KEY",
    "SnapshotStore",
    "load_snapshot",
    "save_snapshot",
]
