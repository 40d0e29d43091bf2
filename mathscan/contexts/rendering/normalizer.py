"""
Content Normalizer

Light, best-effort rewrites applied to a math expression before it is handed to
the renderer. None of them change the mathematical meaning; they only make the
input easier for the renderer to accept.

Order of rewrites:
1. Restore row breaks (display only): an unpaired trailing backslash at a line
   end becomes \\\\. Markdown front-ends commonly unescape \\\\ to a single
   backslash before a line break.
2. Collapse line breaks and whitespace runs to single spaces.
3. Protect decoration commands (\\widetilde{...}, \\hat{...}, ...) behind
   placeholder tokens.
4. Rewrite \\left / \\right pairs according to the configured mode.
5. Rewrite parenthesized fraction arguments to braces, until a fixed point.
6. Restore the protected decorations.

Normalization is advisory. If the renderer rejects the result, callers retry
with the original content (see renderer.render_math).
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from mathscan.utils.text_processing import collapse_whitespace, find_balanced_close

DEFAULT_PROTECTED_COMMANDS = ("widetilde", "widehat", "tilde", "hat", "bar", "overline")

PLACEHOLDER_OPEN = "\ue000"
PLACEHOLDER_CLOSE = "\ue001"
PLACEHOLDER_RE = re.compile(f"{PLACEHOLDER_OPEN}(\\d+){PLACEHOLDER_CLOSE}")

# Odd run of backslashes, optional horizontal space, then a newline
TRAILING_BACKSLASH_RE = re.compile(r"(?<!\\)((?:\\\\)*)\\[ \t]*\n")

LEFT_RE = re.compile(r"\\left(?![A-Za-z])")
RIGHT_RE = re.compile(r"\\right(?![A-Za-z])")
PAIRED_DELIMITER_RE = re.compile(
    r"\\(?P<side>left|right)(?![A-Za-z])\s*"
    r"(?P<delim>\\[{}|]|\\(?:[lr]angle|[lr]vert|[lr]Vert|[lr]floor|[lr]ceil|vert|Vert)(?![A-Za-z])"
    r"|[()\[\]|./])"
)
FRACTION_RE = re.compile(r"\\(?P<command>[dt]?frac)\s*\(")

# Pseudo-commands for renderers sensitive to \left / \right pairing
PSEUDO_COMMANDS = {
    "(": r"\lparen",
    ")": r"\rparen",
    "[": r"\lbrack",
    "]": r"\rbrack",
    r"\{": r"\lbrace",
    r"\}": r"\rbrace",
}


@dataclass
class NormalizeOptions:
    """
    Attributes:
        paired_delimiters: keep | bare | pseudo | auto
        protected_commands: Decoration commands whose braced bodies are protected
        max_fraction_passes: Upper bound on fixed-point fraction passes
        restore_row_breaks: Turn an unpaired trailing backslash into \\\\ (display only)
    """

    paired_delimiters: str = "auto"
    protected_commands: Sequence[str] = field(default_factory=lambda: DEFAULT_PROTECTED_COMMANDS)
    max_fraction_passes: int = 10
    restore_row_breaks: bool = True

    @classmethod
    def from_config(cls, normalizer_config) -> "NormalizeOptions":
        """Build from a NormalizerConfig section."""
        return cls(
            paired_delimiters=normalizer_config.paired_delimiters,
            protected_commands=tuple(
                normalizer_config.protected_commands or DEFAULT_PROTECTED_COMMANDS
            ),
            max_fraction_passes=normalizer_config.max_fraction_passes,
            restore_row_breaks=normalizer_config.restore_row_breaks,
        )


def restore_row_breaks(latex: str) -> str:
    """
    Turn an unpaired backslash at the end of a line into a LaTeX row break.

    Example:
        >>> restore_row_breaks("a &= b \\\\\\nc &= d")
        'a &= b \\\\\\\\\\nc &= d'
    """
    return TRAILING_BACKSLASH_RE.sub(r"\1\\\\\n", latex)


def protect_decorations(
    latex: str, commands: Sequence[str] = DEFAULT_PROTECTED_COMMANDS
) -> Tuple[str, List[str]]:
    """
    Replace decoration commands with a braced body by placeholder tokens.

    Args:
        latex: Expression text
        commands: Command names without backslash (e.g. 'widetilde')

    Returns:
        (protected text, list of original command spans indexed by placeholder)

    Example:
        >>> text, saved = protect_decorations(r"\\widetilde{(a)} + b")
        >>> saved
        ['\\\\widetilde{(a)}']
    """
    if not commands:
        return latex, []

    names = "|".join(re.escape(name) for name in sorted(commands, key=len, reverse=True))
    command_re = re.compile(rf"\\(?:{names})(?![A-Za-z])\s*\{{")

    saved: List[str] = []
    pieces = []
    pos = 0
    while True:
        match = command_re.search(latex, pos)
        if not match:
            break
        end = find_balanced_close(latex, match.end(), "{", "}")
        if end is None:
            # Unbalanced body: leave it for the renderer to judge
            pieces.append(latex[pos : match.end()])
            pos = match.end()
            continue
        pieces.append(latex[pos : match.start()])
        pieces.append(f"{PLACEHOLDER_OPEN}{len(saved)}{PLACEHOLDER_CLOSE}")
        saved.append(latex[match.start() : end])
        pos = end

    pieces.append(latex[pos:])
    return "".join(pieces), saved


def restore_decorations(latex: str, saved: List[str]) -> str:
    """Inverse of protect_decorations()."""
    if not saved:
        return latex
    return PLACEHOLDER_RE.sub(lambda match: saved[int(match.group(1))], latex)


def rewrite_paired_delimiters(latex: str, mode: str = "auto") -> str:
    """
    Rewrite \\left X / \\right X according to mode.

    Modes:
        keep:   unchanged
        bare:   drop \\left / \\right, keep the delimiter (\\left. becomes nothing)
        pseudo: \\lparen, \\rparen, \\lbrack, \\rbrack, \\lbrace, \\rbrace where
                available, bare otherwise
        auto:   bare when the \\left and \\right counts differ, keep otherwise

    Example:
        >>> rewrite_paired_delimiters(r"\\left( x \\right)", "bare")
        '( x )'
        >>> rewrite_paired_delimiters(r"\\left( x \\right)", "auto")
        '\\\\left( x \\\\right)'
    """
    if mode == "keep":
        return latex
    if mode == "auto":
        balanced = len(LEFT_RE.findall(latex)) == len(RIGHT_RE.findall(latex))
        return latex if balanced else rewrite_paired_delimiters(latex, "bare")
    if mode not in ("bare", "pseudo"):
        raise ValueError(f"Unknown paired delimiter mode: {mode}")

    def _replace(match: re.Match) -> str:
        delim = match.group("delim")
        if delim == ".":
            return ""
        if mode == "pseudo" and delim in PSEUDO_COMMANDS:
            return PSEUDO_COMMANDS[delim] + " "
        return delim

    return PAIRED_DELIMITER_RE.sub(_replace, latex)


def _rewrite_fraction_pass(latex: str) -> str:
    """Rewrite every outermost \\frac(a)(b) in one left-to-right pass."""
    pieces = []
    pos = 0
    search_from = 0

    while True:
        match = FRACTION_RE.search(latex, search_from)
        if not match:
            break

        numerator_end = find_balanced_close(latex, match.end(), "(", ")")
        if numerator_end is None:
            search_from = match.end()
            continue

        denominator_start = numerator_end
        while denominator_start < len(latex) and latex[denominator_start].isspace():
            denominator_start += 1
        if denominator_start >= len(latex) or latex[denominator_start] != "(":
            search_from = match.end()
            continue

        denominator_end = find_balanced_close(latex, denominator_start + 1, "(", ")")
        if denominator_end is None:
            search_from = match.end()
            continue

        numerator = latex[match.end() : numerator_end - 1]
        denominator = latex[denominator_start + 1 : denominator_end - 1]
        pieces.append(latex[pos : match.start()])
        pieces.append(f"\\{match.group('command')}{{{numerator}}}{{{denominator}}}")
        pos = search_from = denominator_end

    pieces.append(latex[pos:])
    return "".join(pieces)


def rewrite_fractions(latex: str, max_passes: int = 10) -> str:
    """
    Rewrite parenthesized fraction arguments to braced groups, to a fixed point.

    Fractions nested inside a rewritten argument are picked up by later passes.

    Example:
        >>> rewrite_fractions(r"\\frac(\\frac(a)(b))(c)")
        '\\\\frac{\\\\frac{a}{b}}{c}'
    """
    for _ in range(max_passes):
        rewritten = _rewrite_fraction_pass(latex)
        if rewritten == latex:
            break
        latex = rewritten
    return latex


def normalize_latex(latex: str, display: bool = False, options: NormalizeOptions = None) -> str:
    """
    Normalize the inner content of a math expression for the renderer.

    Args:
        latex: Expression without its delimiters
        display: Whether the expression is a display (block) expression
        options: Rewrite options (defaults to NormalizeOptions())

    Returns:
        Normalized expression text

    Example:
        >>> normalize_latex("a +\\n  b")
        'a + b'
    """
    if options is None:
        options = NormalizeOptions()

    if display and options.restore_row_breaks:
        latex = restore_row_breaks(latex)

    latex = collapse_whitespace(latex)
    latex, saved = protect_decorations(latex, options.protected_commands)
    latex = rewrite_paired_delimiters(latex, options.paired_delimiters)
    latex = rewrite_fractions(latex, options.max_fraction_passes)
    return restore_decorations(latex, saved)
