"""Output rendering for the repo-catalog CLI.

File: src/repo_catalog/ui/render.py

Purpose
- Provide a thin rendering layer for CLI output.
- Render tables in one of several layouts selected by ``TableStyle``.

What should be included in this file
- TableStyle enum with exactly one render function per layout.
- CLIRenderer class with methods for common output patterns.

Functional requirements
- Plain-text rendering only; output is deterministic for a given input.
- Unknown layout names fall back to ``blank``.
"""

from __future__ import annotations

import logging
import shutil
import sys
from collections.abc import Callable, Mapping, Sequence
from enum import StrEnum
from typing import Final

logger = logging.getLogger(__name__)


class TableStyle(StrEnum):
    BLANK = "blank"
    EMPTY = "empty"
    ASCII = "ascii"
    PSQL = "psql"
    MARKDOWN = "markdown"
    CSV = "csv"
    ROUNDED = "rounded"

    @classmethod
    def parse(cls, value: str | None) -> TableStyle:
        if value is None:
            return cls.BLANK
        try:
            return cls(value.strip().lower())
        except ValueError:
            logger.warning("unknown table style %r, using blank", value)
            return cls.BLANK


_Cells = Sequence[str]
_Header = _Cells | None
_Renderer = Callable[[_Header, Sequence[_Cells], Sequence[int]], list[str]]


def _widths(headers: _Header, rows: Sequence[_Cells]) -> list[int]:
    count = max([len(headers or ())] + [len(row) for row in rows])
    widths = [0] * count
    for cells in ([headers] if headers else []) + list(rows):
        for index, cell in enumerate(cells):
            widths[index] = max(widths[index], len(cell))
    return widths


def _cells(cells: _Cells, widths: Sequence[int]) -> list[str]:
    return [
        (cells[index] if index < len(cells) else "").ljust(width)
        for index, width in enumerate(widths)
    ]


def _all_rows(headers: _Header, rows: Sequence[_Cells]) -> list[_Cells]:
    return ([headers] if headers else []) + list(rows)


def _render_blank(headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]) -> list[str]:
    return ["  ".join(_cells(row, widths)).rstrip() for row in _all_rows(headers, rows)]


def _render_empty(headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]) -> list[str]:
    return [" ".join(_cells(row, widths)).rstrip() for row in _all_rows(headers, rows)]


def _render_csv(headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]) -> list[str]:
    del widths
    return [",".join(row) for row in _all_rows(headers, rows)]


def _render_psql(headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]) -> list[str]:
    lines: list[str] = []
    if headers:
        lines.append(" " + " | ".join(_cells(headers, widths)))
        lines.append("-" + "-+-".join("-" * width for width in widths) + "-")
    lines.extend(" " + " | ".join(_cells(row, widths)) for row in rows)
    return lines


def _render_markdown(
    headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]
) -> list[str]:
    lines: list[str] = []
    if headers:
        lines.append("| " + " | ".join(_cells(headers, widths)) + " |")
        lines.append("|" + "|".join("-" * (width + 2) for width in widths) + "|")
    lines.extend("| " + " | ".join(_cells(row, widths)) + " |" for row in rows)
    return lines


def _boxed(
    headers: _Header,
    rows: Sequence[_Cells],
    widths: Sequence[int],
    *,
    glyphs: Mapping[str, str],
) -> list[str]:
    def rule(left: str, middle: str, right: str) -> str:
        fill = glyphs["horizontal"]
        return left + middle.join(fill * (width + 2) for width in widths) + right

    def line(cells: _Cells) -> str:
        bar = glyphs["vertical"]
        return f"{bar} " + f" {bar} ".join(_cells(cells, widths)) + f" {bar}"

    lines = [rule(glyphs["top_left"], glyphs["top_mid"], glyphs["top_right"])]
    if headers:
        lines.append(line(headers))
        lines.append(rule(glyphs["mid_left"], glyphs["mid_mid"], glyphs["mid_right"]))
    lines.extend(line(row) for row in rows)
    lines.append(rule(glyphs["bottom_left"], glyphs["bottom_mid"], glyphs["bottom_right"]))
    return lines


_ASCII_GLYPHS: Final[Mapping[str, str]] = {
    "horizontal": "-",
    "vertical": "|",
    "top_left": "+",
    "top_mid": "+",
    "top_right": "+",
    "mid_left": "+",
    "mid_mid": "+",
    "mid_right": "+",
    "bottom_left": "+",
    "bottom_mid": "+",
    "bottom_right": "+",
}

_ROUNDED_GLYPHS: Final[Mapping[str, str]] = {
    "horizontal": "─",
    "vertical": "│",
    "top_left": "╭",
    "top_mid": "┬",
    "top_right": "╮",
    "mid_left": "├",
    "mid_mid": "┼",
    "mid_right": "┤",
    "bottom_left": "╰",
    "bottom_mid": "┴",
    "bottom_right": "╯",
}


def _render_ascii(headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]) -> list[str]:
    return _boxed(headers, rows, widths, glyphs=_ASCII_GLYPHS)


def _render_rounded(
    headers: _Header, rows: Sequence[_Cells], widths: Sequence[int]
) -> list[str]:
    return _boxed(headers, rows, widths, glyphs=_ROUNDED_GLYPHS)


_RENDERERS: Final[Mapping[TableStyle, _Renderer]] = {
    TableStyle.BLANK: _render_blank,
    TableStyle.EMPTY: _render_empty,
    TableStyle.ASCII: _render_ascii,
    TableStyle.PSQL: _render_psql,
    TableStyle.MARKDOWN: _render_markdown,
    TableStyle.CSV: _render_csv,
    TableStyle.ROUNDED: _render_rounded,
}


def render_table(
    headers: Sequence[str] | None,
    rows: Sequence[Sequence[str]],
    style: TableStyle = TableStyle.BLANK,
) -> str:
    """Render ``rows`` (and ``headers`` unless ``None``) as one string without trailing newline."""

    if not headers and not rows:
        return ""
    header_cells = list(headers) if headers else None
    row_cells = [list(row) for row in rows]
    widths = _widths(header_cells, row_cells)
    return "\n".join(_RENDERERS[style](header_cells, row_cells, widths))


def render_columns(items: Sequence[str], width: int) -> str:
    """Lay ``items`` out column-major to fit ``width`` characters, like ``ls``."""

    if not items:
        return ""
    cell = max(len(item) for item in items) + 2
    per_line = max(1, width // cell)
    line_count = -(-len(items) // per_line)
    lines: list[str] = []
    for row in range(line_count):
        parts = [items[index] for index in range(row, len(items), line_count)]
        lines.append("".join(part.ljust(cell) for part in parts).rstrip())
    return "\n".join(lines)


class CLIRenderer:
    """Thin CLI output renderer.

    Produces clean, deterministic plain-text output on stdout; errors go to stderr.
    """

    def __init__(self, *, style: TableStyle = TableStyle.BLANK, verbose: bool = False) -> None:
        self.style = style
        self.verbose = verbose

    def text(self, line: str) -> None:
        """Print a plain text line."""

        print(line)

    def kv(self, key: str, value: object) -> None:
        print(f"{key}: {value}")

    def blank(self) -> None:
        print()

    def error(self, message: str) -> None:
        """Print one ``error:`` line on stderr."""

        print(f"error: {message}", file=sys.stderr)

    def table(
        self,
        headers: Sequence[str] | None,
        rows: Sequence[Sequence[str]],
        *,
        style: TableStyle | None = None,
    ) -> None:
        rendered = render_table(headers, rows, style or self.style)
        if rendered:
            print(rendered)

    def items(self, entries: Sequence[str]) -> None:
        """Print entries in columns on a terminal, one per line otherwise."""

        if not entries:
            return
        if hasattr(sys.stdout, "isatty") and sys.stdout.isatty():
            print(render_columns(entries, shutil.get_terminal_size().columns))
            return
        for entry in entries:
            print(entry)


def create_renderer(*, style: str | None = None, verbose: bool = False) -> CLIRenderer:
    """Create a CLI renderer with the given settings."""

    return CLIRenderer(style=TableStyle.parse(style), verbose=verbose)


__all__ = ["CLIRenderer", "TableStyle", "create_renderer", "render_columns", "render_table"]
