"""Stable constants shared across the catalog layers."""

from __future__ import annotations

from typing import Final

# Schema versions for persisted contracts.
CONFIG_SCHEMA_VERSION: Final[int] = 1

# Default runtime locations.
CONFIG_DIR_ENV: Final[str] = "RRH_CONFIG_DIR"
DEFAULT_CONFIG_DIR: Final[str] = "~/.config/rrh"
DEFAULT_CONFIG_FILE: Final[str] = "config.toml"
DEFAULT_DATABASE_FILE: Final[str] = "database.json"

# Catalog policy defaults.
DEFAULT_LAST_ACCESS_RELOAD_SECONDS: Final[int] = 24 * 60 * 60
DEFAULT_RECENT_LIMIT: Final[int] = 5
HOME_PLACEHOLDER: Final[str] = "${HOME}"

__all__ = [
    "CONFIG_DIR_ENV",
    "CONFIG_SCHEMA_VERSION",
    "DEFAULT_CONFIG_DIR",
    "DEFAULT_CONFIG_FILE",
    "DEFAULT_DATABASE_FILE",
    "DEFAULT_LAST_ACCESS_RELOAD_SECONDS",
    "DEFAULT_RECENT_LIMIT",
    "HOME_PLACEHOLDER",
]
