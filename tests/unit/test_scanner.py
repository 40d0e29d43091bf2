"""
Unit tests for the delimiter scanner.

Tests mathscan.contexts.scanning.scanner and the segment helpers.
"""

import pytest

from mathscan.contexts.scanning.delimiters import DelimiterKind
from mathscan.contexts.scanning.scanner import (
    find_matching_delimiter,
    find_math_segments,
    has_candidate_delimiter,
)
from mathscan.contexts.scanning.segments import (
    Math,
    PlainText,
    is_trivial,
    join_segments,
    math_segments,
)


class TestDollarDelimiters:
    """Tests for $...$ and $$...$$."""

    def test_inline_dollars(self):
        """Inline dollars produce an inline math segment followed by trailing text."""
        segments = find_math_segments("$x^2+y$ done")

        assert segments == [
            Math("$x^2+y$", False, DelimiterKind.INLINE_DOLLARS),
            PlainText(" done"),
        ]

    def test_display_dollars(self):
        """Double dollars produce a display segment."""
        segments = find_math_segments("Energy: $$E = mc^2$$.")

        assert segments == [
            PlainText("Energy: "),
            Math("$$E = mc^2$$", True, DelimiterKind.DISPLAY_DOLLARS),
            PlainText("."),
        ]
        assert segments[1].content == "E = mc^2"

    def test_display_takes_priority_over_inline(self):
        """$$ at a position is tried before $."""
        segments = find_math_segments("$$a$$ and $b$")

        assert [s.kind for s in math_segments(segments)] == [
            DelimiterKind.DISPLAY_DOLLARS,
            DelimiterKind.INLINE_DOLLARS,
        ]

    def test_unterminated_display_does_not_fall_back_at_same_position(self):
        """An unterminated $$ is plain; the next position may still open inline math."""
        segments = find_math_segments("$$a$ b")

        assert segments[0] == PlainText("$")
        assert segments[1] == Math("$a$", False, DelimiterKind.INLINE_DOLLARS)
        assert segments[2] == PlainText(" b")

    def test_escaped_dollar_is_plain(self):
        r"""\$ never opens math."""
        text = r"Cost is \$5"
        assert find_math_segments(text) == [PlainText(text)]

    def test_escaped_dollar_does_not_close(self):
        r"""An escaped \$ inside inline math is skipped when looking for the close."""
        segments = find_math_segments(r"$a \$ b$ end")

        assert segments[0] == Math(r"$a \$ b$", False, DelimiterKind.INLINE_DOLLARS)
        assert segments[1] == PlainText(" end")

    def test_even_backslash_run_does_not_escape(self):
        r"""A row break \\ right before $ leaves the $ unescaped."""
        segments = find_math_segments(r"a \\$x$")

        assert segments == [
            PlainText(r"a \\"),
            Math("$x$", False, DelimiterKind.INLINE_DOLLARS),
        ]

    def test_lone_dollar_is_plain(self):
        """A single dollar with no close stays plain text."""
        assert find_math_segments("costs 5$ total") == [PlainText("costs 5$ total")]


class TestBackslashDelimiters:
    r"""Tests for \[...\] and \(...\)."""

    def test_inline_parens(self):
        segments = find_math_segments(r"where \(a+b\) holds")

        assert segments == [
            PlainText("where "),
            Math(r"\(a+b\)", False, DelimiterKind.INLINE_PARENS),
            PlainText(" holds"),
        ]

    def test_display_brackets_with_nested_inline(self):
        r"""An inline expression inside display brackets does not close it."""
        segments = find_math_segments(r"\[ a \( b \) c \]")

        assert len(segments) == 1
        assert segments[0].display is True
        assert segments[0].kind == DelimiterKind.DISPLAY_BRACKETS
        assert segments[0].content == r"a \( b \) c"

    def test_same_family_nesting_uses_depth(self):
        r"""A nested \[ ... \] pair increases depth instead of closing early."""
        text = r"\[ a \[ b \] c \] tail"
        segments = find_math_segments(text)

        assert segments[0].raw == r"\[ a \[ b \] c \]"
        assert segments[1] == PlainText(" tail")

    def test_unterminated_is_plain(self):
        text = r"Use \( x"
        assert find_math_segments(text) == [PlainText(text)]

    def test_escaped_opening_is_plain(self):
        r"""\\( is a row break followed by a paren, not an inline opener."""
        segments = find_math_segments(r"a \\(b\) c", heuristic_brackets=False)

        assert math_segments(segments) == []

    def test_multiline_display(self):
        """Display content may span line breaks."""
        segments = find_math_segments("\\[\na = b \\\\\nc = d\n\\]")

        assert len(segments) == 1
        assert segments[0].display is True


class TestHeuristicBrackets:
    """Tests for bare [...] and (...)."""

    @pytest.mark.parametrize("text", ["See (3) for details", "As shown in [42]", "(1.5)"])
    def test_numeric_content_is_plain(self, text):
        """Citations and list markers stay plain text."""
        assert find_math_segments(text) == [PlainText(text)]

    def test_command_in_parens_is_math(self):
        segments = find_math_segments(r"angle (\alpha) here")

        assert segments[1] == Math(r"(\alpha)", False, DelimiterKind.HEURISTIC_PARENS)

    def test_brackets_are_display(self):
        segments = find_math_segments("[x_1 + x_2]")

        assert segments == [Math("[x_1 + x_2]", True, DelimiterKind.HEURISTIC_BRACKETS)]
        assert segments[0].kind.is_heuristic

    def test_prose_in_parens_is_plain(self):
        text = "f(x) is a function (see above)"
        assert find_math_segments(text) == [PlainText(text)]

    def test_balanced_nested_parens(self):
        """Inner parens are counted so the outer pair closes correctly."""
        segments = find_math_segments("where (a_{(1)}) holds")

        assert segments[1] == Math("(a_{(1)})", False, DelimiterKind.HEURISTIC_PARENS)

    def test_disabled(self):
        text = r"angle (\alpha) here"
        assert find_math_segments(text, heuristic_brackets=False) == [PlainText(text)]

    def test_custom_heuristic(self):
        """The heuristic predicate is injectable."""
        segments = find_math_segments("(3)", heuristic=lambda content: True)

        assert segments == [Math("(3)", False, DelimiterKind.HEURISTIC_PARENS)]

    def test_dollars_win_over_inner_parens(self):
        """The first delimiter character encountered wins."""
        segments = find_math_segments(r"$f(\alpha)$")

        assert segments == [Math(r"$f(\alpha)$", False, DelimiterKind.INLINE_DOLLARS)]


class TestCoverage:
    """Segments always reproduce the scanned text exactly."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "plain text only",
            "$x$",
            "a $x$ b $$y$$ c",
            r"mixed \(a\) and \[b\] and (\beta) and (7)",
            r"escaped \$ and $real$ and \\$also$",
            "unterminated $ and $$ and \\( and (",
            "line one\n$a\nb$\nline three",
        ],
    )
    def test_join_reproduces_input(self, text):
        assert join_segments(find_math_segments(text)) == text

    def test_no_empty_plain_segments(self):
        segments = find_math_segments("$a$$$b$$")

        assert all(segment.raw for segment in segments)


class TestSegmentHelpers:
    """Tests for is_trivial, math_segments and Math.content."""

    def test_is_trivial(self):
        assert is_trivial([], "")
        assert is_trivial([PlainText("abc")], "abc")
        assert not is_trivial(find_math_segments("$x$"), "$x$")

    def test_content_strips_delimiters_and_whitespace(self):
        assert Math("$ x $", False, DelimiterKind.INLINE_DOLLARS).content == "x"
        assert Math(r"\[ a \]", True, DelimiterKind.DISPLAY_BRACKETS).content == "a"
        assert Math("$$\n y \n$$", True, DelimiterKind.DISPLAY_DOLLARS).content == "y"


class TestFindMatchingDelimiter:
    """Tests for the per-position matcher."""

    def test_returns_span(self):
        match = find_matching_delimiter("ab $x$ cd", 3)

        assert (match.start, match.end) == (3, 6)
        assert match.delimiter.kind == DelimiterKind.INLINE_DOLLARS

    def test_no_match(self):
        assert find_matching_delimiter("a \\q b", 2) is None
        assert find_matching_delimiter("(see)", 0) is None


class TestHasCandidateDelimiter:
    """Tests for the cheap pre-check."""

    def test_candidates(self):
        assert has_candidate_delimiter("a $ b")
        assert has_candidate_delimiter(r"a \( b")
        assert has_candidate_delimiter("see (1)")

    def test_no_candidates(self):
        assert not has_candidate_delimiter("plain words")
        assert not has_candidate_delimiter("see (1)", heuristic_brackets=False)
