"""
repo-catalog — package root

File: src/repo_catalog/__init__.py

Purpose
- Package root for ``rrh``, a personal catalog of local source-code working
  copies organised into groups.

Functional requirements
- Must not have side effects at import time (no config loading, no logging init).
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
