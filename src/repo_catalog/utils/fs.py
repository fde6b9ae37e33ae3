"""
repo-catalog — filesystem utilities

File: src/repo_catalog/utils/fs.py

Purpose
- Provide atomic writes for the snapshot file and the filesystem checks the
  catalog needs (existence, canonical form, access time).

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Checks never raise for missing or unreadable paths; they report absence instead.

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = [
    "atomic_write",
    "canonicalize",
    "is_within",
    "last_access_time",
    "path_exists",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.

    Missing parent directories are created first.
    """

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        payload = data if isinstance(data, bytes) else data.encode(encoding)
        with os.fdopen(fd, "wb") as file_handle:
            file_handle.write(payload)
            file_handle.flush()
            os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def path_exists(path: PathLike) -> bool:
    try:
        return Path(path).exists()
    except OSError:
        return False


def canonicalize(path: PathLike) -> Path:
    """Return the absolute, symlink-free form of an existing ``path``."""

    return Path(path).expanduser().resolve(strict=True)


def last_access_time(path: PathLike) -> datetime | None:
    """Return the filesystem access time of ``path`` in UTC, or ``None`` if unreadable."""

    try:
        stat = Path(path).stat()
    except OSError:
        return None
    return datetime.fromtimestamp(stat.st_atime, tz=UTC)


def is_within(child: PathLike, parent: PathLike) -> bool:
    """Return ``True`` if ``child`` is ``parent`` or lies below it (lexically)."""

    return _is_relative_to(Path(child), Path(parent))


def _is_relative_to(child: Path, parent: Path) -> bool:
    try:
        child.relative_to(parent)
    except ValueError:
        return False
    return True


def _fsync_directory(path: Path) -> None:
    """
    Best-effort directory fsync for metadata durability after ``os.replace``.

    Some platforms/filesystems do not support fsync on directories.
    """

    if os.name == "nt":
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(path, flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        return
    finally:
        os.close(dir_fd)
