from __future__ import annotations

from textcompare.core.diff.formatters import (
    ANSI_RESET,
    InlineFormatter,
    SideBySideFormatter,
    format_stats,
)
from textcompare.core.diff.text_diff import compute_diff


def make_result():
    return compute_diff(["same", "foo bar", "gone"], ["same", "foo baz"])


def test_inline_listing():
    lines = list(InlineFormatter().render(make_result()))
    assert lines == [
        "  same",
        "! foo ba[-r-]",
        "! foo ba{+z+}",
        "- gone",
    ]


def test_inline_listing_shows_added_lines():
    lines = list(InlineFormatter().render(compute_diff(["a"], ["a", "b"])))
    assert lines == ["  a", "+ b"]


def test_side_by_side_separators():
    rows = list(SideBySideFormatter(width=60).format(make_result()))

    assert [sep for _, sep, _ in rows] == ["   ", " | ", " < "]
    assert rows[0] == ("   1: same", "   ", "   1: same")
    assert rows[2][2] == ""


def test_side_by_side_added_rows_leave_left_empty():
    rows = list(SideBySideFormatter(width=60).format(compute_diff(["a"], ["x", "a"])))
    assert rows[0] == ("", " > ", "   1: x")


def test_side_by_side_truncates_and_expands_tabs():
    formatter = SideBySideFormatter(width=20, tab_size=2)
    left, _, right = next(formatter.format(compute_diff(["abcdefgh"], ["\tx"])))

    assert left == "   1: a..."
    assert right == "   1:   x"


def test_render_pads_left_column():
    lines = list(SideBySideFormatter(width=40).render(compute_diff(["a"], ["a"])))
    assert lines == ["   1: a".ljust(18) + "   " + "   1: a"]


def test_color_wraps_changed_cells_only():
    rows = list(SideBySideFormatter(width=60, color=True).format(make_result()))
    assert ANSI_RESET not in rows[0][0]
    assert rows[1][0].endswith(ANSI_RESET)


def test_format_stats():
    assert format_stats(make_result()) == "added: 0  removed: 1  modified: 1"
