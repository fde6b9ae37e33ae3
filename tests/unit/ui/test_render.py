"""
repo-catalog — unit tests for CLI rendering

File: tests/unit/ui/test_render.py

Purpose
- Validate each table layout, column layout and the renderer's output streams.
"""

from __future__ import annotations

import pytest

from repo_catalog.ui.render import (
    CLIRenderer,
    TableStyle,
    create_renderer,
    render_columns,
    render_table,
)

HEADERS = ["ID", "Path"]
ROWS = [["alpha", "/work/alpha"], ["b", "/w/b"]]


def test_blank_layout_pads_columns_with_two_spaces() -> None:
    assert render_table(HEADERS, ROWS).splitlines() == [
        "ID     Path",
        "alpha  /work/alpha",
        "b      /w/b",
    ]


def test_empty_layout_uses_single_space() -> None:
    assert render_table(HEADERS, ROWS, TableStyle.EMPTY).splitlines()[1] == "alpha /work/alpha"


def test_csv_layout_is_unpadded() -> None:
    assert render_table(HEADERS, ROWS, TableStyle.CSV) == "ID,Path\nalpha,/work/alpha\nb,/w/b"


def test_psql_layout() -> None:
    assert render_table(HEADERS, ROWS, TableStyle.PSQL).splitlines() == [
        " ID    | Path       ",
        "-------+-------------",
        " alpha | /work/alpha",
        " b     | /w/b       ",
    ]


def test_markdown_layout() -> None:
    assert render_table(HEADERS, ROWS, TableStyle.MARKDOWN).splitlines() == [
        "| ID    | Path        |",
        "|-------|-------------|",
        "| alpha | /work/alpha |",
        "| b     | /w/b        |",
    ]


def test_ascii_layout_is_boxed() -> None:
    assert render_table(HEADERS, [["a", "/x"]], TableStyle.ASCII).splitlines() == [
        "+----+------+",
        "| ID | Path |",
        "+----+------+",
        "| a  | /x   |",
        "+----+------+",
    ]


def test_rounded_layout_uses_box_drawing_glyphs() -> None:
    lines = render_table(None, [["a"]], TableStyle.ROUNDED).splitlines()

    assert lines == ["╭───╮", "│ a │", "╰───╯"]


def test_missing_headers_render_rows_only() -> None:
    assert render_table(None, ROWS) == "alpha  /work/alpha\nb      /w/b"
    assert render_table(None, []) == ""


def test_ragged_rows_are_padded() -> None:
    assert render_table(["A", "B"], [["x"]], TableStyle.CSV) == "A,B\nx"
    assert render_table(["A", "B"], [["x"]]).splitlines() == ["A  B", "x"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, TableStyle.BLANK),
        ("PSQL", TableStyle.PSQL),
        (" markdown ", TableStyle.MARKDOWN),
        ("sharp", TableStyle.BLANK),
    ],
)
def test_style_parsing_falls_back_to_blank(raw: str | None, expected: TableStyle) -> None:
    assert TableStyle.parse(raw) is expected


def test_render_columns_is_column_major() -> None:
    items = ["a", "b", "c", "d", "e"]

    assert render_columns(items, width=9) == "a  c  e\nb  d"
    assert render_columns(items, width=1).splitlines() == items
    assert render_columns([], width=80) == ""


def test_renderer_routes_errors_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    renderer = CLIRenderer()

    renderer.text("hello")
    renderer.kv("Name", "work")
    renderer.error("boom")

    captured = capsys.readouterr()
    assert captured.out == "hello\nName: work\n"
    assert captured.err == "error: boom\n"


def test_renderer_items_print_one_per_line_when_not_a_tty(
    capsys: pytest.CaptureFixture[str],
) -> None:
    create_renderer().items(["alpha", "beta"])

    assert capsys.readouterr().out == "alpha\nbeta\n"


def test_renderer_table_uses_override_style(capsys: pytest.CaptureFixture[str]) -> None:
    renderer = create_renderer(style="psql")

    renderer.table(["A"], [["x"]], style=TableStyle.CSV)
    renderer.table(None, [])

    assert capsys.readouterr().out == "A\nx\n"
