"""
Unit tests for the content normalizer.

Tests each rewrite on its own, then the combined normalize_latex() order.
"""

import pytest

from mathscan.contexts.rendering.normalizer import (
    PLACEHOLDER_CLOSE,
    PLACEHOLDER_OPEN,
    NormalizeOptions,
    normalize_latex,
    protect_decorations,
    restore_decorations,
    restore_row_breaks,
    rewrite_fractions,
    rewrite_paired_delimiters,
)
from mathscan.utils.config import NormalizerConfig


class TestRestoreRowBreaks:
    """Tests for turning an unpaired trailing backslash into \\\\."""

    def test_single_backslash_becomes_row_break(self):
        assert restore_row_breaks("a \\\nb") == "a \\\\\nb"

    def test_trailing_spaces_are_dropped(self):
        assert restore_row_breaks("a \\  \nb") == "a \\\\\nb"

    def test_existing_row_break_unchanged(self):
        assert restore_row_breaks("a \\\\\nb") == "a \\\\\nb"

    def test_odd_run_gets_one_more(self):
        assert restore_row_breaks("a \\\\\\\nb") == "a \\\\\\\\\nb"

    def test_no_newline_unchanged(self):
        assert restore_row_breaks(r"a \, b") == r"a \, b"


class TestDecorationProtection:
    """Tests for protect_decorations / restore_decorations."""

    def test_protect(self):
        text, saved = protect_decorations(r"\widetilde{(a)} + b")

        assert text == f"{PLACEHOLDER_OPEN}0{PLACEHOLDER_CLOSE} + b"
        assert saved == [r"\widetilde{(a)}"]

    def test_nested_braces_in_body(self):
        text, saved = protect_decorations(r"\hat{x_{i}} = \bar{y}")

        assert saved == [r"\hat{x_{i}}", r"\bar{y}"]
        assert restore_decorations(text, saved) == r"\hat{x_{i}} = \bar{y}"

    def test_longer_command_names_not_split(self):
        """\\hatch is not \\hat; \\widehat is matched whole."""
        text, saved = protect_decorations(r"\hatch{x} + \widehat{y}")

        assert saved == [r"\widehat{y}"]
        assert text.startswith(r"\hatch{x}")

    def test_unbalanced_body_left_alone(self):
        text, saved = protect_decorations(r"\tilde{x + y")

        assert text == r"\tilde{x + y"
        assert saved == []

    def test_no_commands(self):
        assert protect_decorations(r"\tilde{x}", commands=()) == (r"\tilde{x}", [])


class TestRewritePairedDelimiters:
    """Tests for the \\left / \\right modes."""

    def test_keep(self):
        latex = r"\left( x \right)"
        assert rewrite_paired_delimiters(latex, "keep") == latex

    def test_bare(self):
        assert rewrite_paired_delimiters(r"\left( x \right)", "bare") == "( x )"
        assert rewrite_paired_delimiters(r"\left[ x \right.", "bare") == "[ x "

    def test_pseudo(self):
        assert rewrite_paired_delimiters(r"\left(x\right)", "pseudo") == r"\lparen x\rparen "
        assert rewrite_paired_delimiters(r"\left\{x\right\}", "pseudo") == r"\lbrace x\rbrace "

    def test_pseudo_falls_back_to_bare(self):
        """Delimiters without a pseudo command are written bare."""
        assert rewrite_paired_delimiters(r"\left| x \right|", "pseudo") == "| x |"

    def test_auto_balanced_kept(self):
        latex = r"\left( \frac{a}{b} \right)"
        assert rewrite_paired_delimiters(latex, "auto") == latex

    def test_auto_unbalanced_bare(self):
        assert rewrite_paired_delimiters(r"\left( x", "auto") == "( x"

    def test_leftarrow_untouched(self):
        assert rewrite_paired_delimiters(r"\leftarrow \left( x", "auto") == r"\leftarrow ( x"

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown paired delimiter mode"):
            rewrite_paired_delimiters(r"\left( x \right)", "sideways")


class TestRewriteFractions:
    """Tests for parenthesized fraction arguments."""

    def test_simple(self):
        assert rewrite_fractions(r"\frac(a)(b)") == r"\frac{a}{b}"

    def test_variants_and_spacing(self):
        assert rewrite_fractions(r"\dfrac (a+b) (c)") == r"\dfrac{a+b}{c}"
        assert rewrite_fractions(r"\tfrac(1)(2)") == r"\tfrac{1}{2}"

    def test_nested_reaches_fixed_point(self):
        assert rewrite_fractions(r"\frac(\frac(a)(b))(c)") == r"\frac{\frac{a}{b}}{c}"

    def test_inner_parens_preserved(self):
        assert rewrite_fractions(r"\frac((a+b)^2)(2)") == r"\frac{(a+b)^2}{2}"

    def test_pass_limit(self):
        assert rewrite_fractions(r"\frac(\frac(a)(b))(c)", max_passes=1) == (
            r"\frac{\frac(a)(b)}{c}"
        )

    def test_braced_arguments_unchanged(self):
        assert rewrite_fractions(r"\frac{a}{b}") == r"\frac{a}{b}"
        assert rewrite_fractions(r"\frac(a){b}") == r"\frac(a){b}"


class TestNormalizeLatex:
    """Tests for the combined normalizer."""

    def test_collapses_whitespace(self):
        assert normalize_latex("a +\n  b") == "a + b"

    def test_display_restores_row_breaks(self):
        assert normalize_latex("a &= b \\\nc &= d", display=True) == r"a &= b \\ c &= d"

    def test_inline_leaves_backslash(self):
        assert normalize_latex("a &= b \\\nc", display=False) == r"a &= b \ c"

    def test_decorations_protected_from_fractions(self):
        assert normalize_latex(r"\frac(\hat{(x)})(2)") == r"\frac{\hat{(x)}}{2}"

    def test_decorations_protected_from_paired_rewrite(self):
        options = NormalizeOptions(paired_delimiters="bare")
        latex = r"\hat{\left( x \right)} + \left[ y"

        assert normalize_latex(latex, options=options) == r"\hat{\left( x \right)} + [ y"

    def test_keep_mode(self):
        options = NormalizeOptions(paired_delimiters="keep")
        assert normalize_latex(r"\left( x", options=options) == r"\left( x"

    def test_options_from_config(self):
        options = NormalizeOptions.from_config(NormalizerConfig(paired_delimiters="pseudo"))

        assert options.paired_delimiters == "pseudo"
        assert "widetilde" in options.protected_commands
        assert options.max_fraction_passes == 10
