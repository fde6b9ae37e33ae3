"""Module entrypoint for ``python -m repo_catalog``."""

from __future__ import annotations

from repo_catalog.main import cli_entrypoint

if __name__ == "__main__":
    raise SystemExit(cli_entrypoint())
