"""
Math Delimiter Constants

Delimiter descriptors recognised by the scanner, grouped the same way the
scanner tries them: dollars first, then backslash brackets, then bare
heuristic brackets.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class DelimiterKind(str, Enum):
    """Which delimiter pair matched a math segment."""

    DISPLAY_DOLLARS = "display_dollars"
    INLINE_DOLLARS = "inline_dollars"
    DISPLAY_BRACKETS = "display_brackets"
    INLINE_PARENS = "inline_parens"
    HEURISTIC_BRACKETS = "heuristic_brackets"
    HEURISTIC_PARENS = "heuristic_parens"

    @property
    def is_heuristic(self) -> bool:
        return self in (DelimiterKind.HEURISTIC_BRACKETS, DelimiterKind.HEURISTIC_PARENS)


@dataclass(frozen=True)
class Delimiter:
    """
    Immutable open/close pair for one math delimiter convention.

    Attributes:
        open: Opening token sequence (e.g. '$$', '\\(')
        close: Closing token sequence
        display: Whether the expression is laid out as a block
        kind: Delimiter kind reported on matched segments
    """

    open: str
    close: str
    display: bool
    kind: DelimiterKind


DISPLAY_DOLLARS = Delimiter("$$", "$$", True, DelimiterKind.DISPLAY_DOLLARS)
INLINE_DOLLARS = Delimiter("$", "$", False, DelimiterKind.INLINE_DOLLARS)
DISPLAY_BRACKETS = Delimiter("\\[", "\\]", True, DelimiterKind.DISPLAY_BRACKETS)
INLINE_PARENS = Delimiter("\\(", "\\)", False, DelimiterKind.INLINE_PARENS)

# Bare glyphs, only valid when the content passes the math heuristic
HEURISTIC_BRACKETS = Delimiter("[", "]", True, DelimiterKind.HEURISTIC_BRACKETS)
HEURISTIC_PARENS = Delimiter("(", ")", False, DelimiterKind.HEURISTIC_PARENS)

# In scanner priority order
DOLLAR_DELIMITERS: Tuple[Delimiter, ...] = (DISPLAY_DOLLARS, INLINE_DOLLARS)
BACKSLASH_DELIMITERS: Tuple[Delimiter, ...] = (DISPLAY_BRACKETS, INLINE_PARENS)
HEURISTIC_DELIMITERS: Tuple[Delimiter, ...] = (HEURISTIC_BRACKETS, HEURISTIC_PARENS)
ALL_DELIMITERS: Tuple[Delimiter, ...] = (
    DOLLAR_DELIMITERS + BACKSLASH_DELIMITERS + HEURISTIC_DELIMITERS
)

DELIMITERS_BY_KIND = {delimiter.kind: delimiter for delimiter in ALL_DELIMITERS}

# Characters that can start any delimiter; used for a cheap pre-check
OPENING_CHARS = frozenset("$[(\\")
