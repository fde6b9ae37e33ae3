"""Observability exports: process logging configuration."""

from repo_catalog.observability.logging import (
    DEFAULT_LOGGER_NAME,
    setup_logging,
    shutdown_logging,
)

__all__ = ["DEFAULT_LOGGER_NAME", "setup_logging", "shutdown_logging"]
