"""Utility exports for filesystem helpers and text formatting."""

from repo_catalog.utils.fs import (
    atomic_write,
    canonicalize,
    is_within,
    last_access_time,
    path_exists,
)
from repo_catalog.utils.text import format_humanize

__all__ = [
    "atomic_write",
    "canonicalize",
    "format_humanize",
    "is_within",
    "last_access_time",
    "path_exists",
]
