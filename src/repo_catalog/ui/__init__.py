"""UI package exports for the CLI router and plain-text rendering."""

from repo_catalog.ui.cli import CLIError, build_parser, main, run_cli
from repo_catalog.ui.render import CLIRenderer, TableStyle, create_renderer, render_table

__all__ = [
    "CLIError",
    "CLIRenderer",
    "TableStyle",
    "build_parser",
    "create_renderer",
    "main",
    "render_table",
    "run_cli",
]
