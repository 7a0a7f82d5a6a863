"""Tests for the identifier-aware diff renderer."""

from lif_patch.editing.diff_renderer import (
    HUNK_SEPARATOR,
    NO_CHANGES,
    colorize_diff,
    diff_stats,
    render_diff,
)
from lif_patch.editing.file_state import LineMap


def _lines(*contents):
    return [(f"lid-{i + 1}", c) for i, c in enumerate(contents)]


class TestRenderDiff:
    def test_identical_inputs(self):
        old = _lines("a", "b", "c")
        assert render_diff(old, list(old)) == NO_CHANGES
        assert render_diff([], []) == NO_CHANGES

    def test_whitespace_only_change_is_context(self):
        out = render_diff([("lid-1", "fn f  (x)")], [("lid-1", "fn f (x)")])
        assert out == "  lid-1: fn f (x)"
        assert not any(line.startswith(("- ", "+ ")) for line in out.split("\n"))

    def test_modification_removed_before_added(self):
        out = render_diff(_lines("a", "b", "c", "d"), _lines("a", "B", "C", "d"))
        assert out.split("\n") == [
            "  lid-1: a",
            "- lid-2: b",
            "- lid-3: c",
            "+ lid-2: B",
            "+ lid-3: C",
            "  lid-4: d",
        ]

    def test_added_and_removed_lines(self):
        old = [("lid-1", "a"), ("lid-3", "c")]
        new = [("lid-1", "a"), ("lid-2", "b")]
        assert render_diff(old, new).split("\n") == [
            "  lid-1: a",
            "- lid-3: c",
            "+ lid-2: b",
        ]

    def test_distant_changes_are_separated(self):
        old = _lines(*"abcdefghi")
        new = _lines("A", *"bcdefgh", "I")
        lines = render_diff(old, new).split("\n")
        assert lines.count(HUNK_SEPARATOR) == 1
        assert lines[0] == "- lid-1: a"
        assert lines[-1] == "+ lid-9: I"
        # Context stops two lines away from each change
        assert "  lid-4: d" not in lines
        assert "  lid-6: f" not in lines

    def test_touching_windows_merge(self):
        old = _lines(*"abcdefgh")
        new = _lines("A", *"bcde", "F", *"gh")
        lines = render_diff(old, new).split("\n")
        assert HUNK_SEPARATOR not in lines
        assert "  lid-3: c" in lines
        assert "  lid-4: d" in lines

    def test_context_width(self):
        old = _lines(*"abcde")
        new = _lines("a", "b", "C", "d", "e")
        assert render_diff(old, new, context=0).split("\n") == ["- lid-3: c", "+ lid-3: C"]

    def test_accepts_line_maps(self):
        old = LineMap.from_items(_lines("a"))
        new = LineMap.from_items(_lines("a", "b"))
        assert render_diff(old, new).split("\n") == ["  lid-1: a", "+ lid-2: b"]


class TestDiffStats:
    def test_counts(self):
        old = _lines("a", "b", "c")
        new = [("lid-1", "a"), ("lid-2", "B"), ("lid-4", "d"), ("lid-5", "e")]
        # lid-2 modified, lid-3 removed, lid-4 and lid-5 added
        assert diff_stats(old, new) == (3, 2)


class TestColorize:
    def test_colors(self):
        out = colorize_diff("  lid-1: a\n- lid-2: b\n+ lid-2: B\n...")
        lines = out.split("\n")
        assert lines[0] == "  lid-1: a"
        assert lines[1] == "\033[31m- lid-2: b\033[0m"
        assert lines[2] == "\033[32m+ lid-2: B\033[0m"
        assert lines[3] == "\033[2m...\033[0m"
