"""
Delimiter Scanner

Single left-to-right pass over a text buffer that splits it into PlainText and
Math segments. The segments cover the buffer exactly, without overlaps.

Precedence at a position: display dollars, inline dollars, backslash
brackets/parens, heuristic brackets/parens. The first delimiter character
encountered wins. An opening sequence without a matching close is not a match;
its first character falls through to plain text and scanning resumes at the
very next position.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional

from mathscan.contexts.scanning.delimiters import (
    BACKSLASH_DELIMITERS,
    DISPLAY_DOLLARS,
    HEURISTIC_DELIMITERS,
    INLINE_DOLLARS,
    OPENING_CHARS,
    Delimiter,
)
from mathscan.contexts.scanning.heuristic import is_likely_math
from mathscan.contexts.scanning.segments import Math, PlainText, Segment
from mathscan.utils.text_processing import find_balanced_close, find_unescaped, is_escaped


@dataclass(frozen=True)
class DelimiterMatch:
    """A matched span [start, end) and the delimiter that produced it."""

    start: int
    end: int
    delimiter: Delimiter


def _match_dollars(text: str, pos: int) -> Optional[DelimiterMatch]:
    if text.startswith(DISPLAY_DOLLARS.open, pos):
        close = text.find(DISPLAY_DOLLARS.close, pos + len(DISPLAY_DOLLARS.open))
        if close == -1:
            # Unterminated $$ does not fall back to inline at the same position
            return None
        return DelimiterMatch(pos, close + len(DISPLAY_DOLLARS.close), DISPLAY_DOLLARS)

    if text.startswith(INLINE_DOLLARS.open, pos):
        close = find_unescaped(text, INLINE_DOLLARS.close, pos + 1)
        if close != -1:
            return DelimiterMatch(pos, close + 1, INLINE_DOLLARS)

    return None


def _match_backslash(text: str, pos: int, delimiter: Delimiter) -> Optional[DelimiterMatch]:
    """
    Match \\[...\\] or \\(...\\) with a depth counter.

    Nested unescaped occurrences of the same opening sequence increase the
    depth, so a display expression may contain a nested expression of the same
    family without closing early.
    """
    depth = 1
    i = pos + len(delimiter.open)

    while i < len(text):
        if text.startswith(delimiter.open, i) and not is_escaped(text, i):
            depth += 1
            i += len(delimiter.open)
            continue
        if text.startswith(delimiter.close, i) and not is_escaped(text, i):
            depth -= 1
            i += len(delimiter.close)
            if depth == 0:
                return DelimiterMatch(pos, i, delimiter)
            continue
        i += 1

    return None


def _match_heuristic(
    text: str, pos: int, delimiter: Delimiter, heuristic: Callable[[str], bool]
) -> Optional[DelimiterMatch]:
    end = find_balanced_close(text, pos + 1, delimiter.open, delimiter.close)
    if end is None:
        return None

    content = text[pos + 1 : end - 1]
    if not heuristic(content):
        return None
    return DelimiterMatch(pos, end, delimiter)


def find_matching_delimiter(
    text: str,
    pos: int,
    heuristic: Callable[[str], bool] = is_likely_math,
    heuristic_brackets: bool = True,
) -> Optional[DelimiterMatch]:
    """
    Try every delimiter family at pos, in priority order.

    Does not check whether pos itself is escaped; find_math_segments() does.

    Args:
        text: Text buffer
        pos: Candidate opening position
        heuristic: Predicate applied to bare bracket/paren content
        heuristic_brackets: Whether bare [...] / (...) may match at all

    Returns:
        DelimiterMatch, or None if nothing matches at pos
    """
    char = text[pos]

    if char == "$":
        return _match_dollars(text, pos)

    if char == "\\":
        for delimiter in BACKSLASH_DELIMITERS:
            if text.startswith(delimiter.open, pos):
                return _match_backslash(text, pos, delimiter)
        return None

    if heuristic_brackets:
        for delimiter in HEURISTIC_DELIMITERS:
            if char == delimiter.open:
                return _match_heuristic(text, pos, delimiter, heuristic)

    return None


def find_math_segments(
    text: str,
    heuristic: Callable[[str], bool] = is_likely_math,
    heuristic_brackets: bool = True,
) -> List[Segment]:
    """
    Split text into ordered PlainText and Math segments.

    Args:
        text: Text buffer to scan
        heuristic: Predicate deciding whether bare bracket/paren content is math
        heuristic_brackets: Whether bare [...] / (...) spans are considered

    Returns:
        Segments whose raw spans concatenate back to text exactly

    Example:
        >>> find_math_segments("$x^2+y$ done")
        [Math(raw='$x^2+y$', display=False, kind=<DelimiterKind.INLINE_DOLLARS: 'inline_dollars'>), PlainText(text=' done')]
        >>> find_math_segments(r"Cost is \\$5")
        [PlainText(text='Cost is \\\\$5')]
    """
    segments: List[Segment] = []
    pos = 0
    last_emit = 0

    while pos < len(text):
        match = None
        if text[pos] in OPENING_CHARS and not is_escaped(text, pos):
            match = find_matching_delimiter(text, pos, heuristic, heuristic_brackets)

        if match is None:
            pos += 1
            continue

        if match.start > last_emit:
            segments.append(PlainText(text[last_emit : match.start]))

        segments.append(
            Math(text[match.start : match.end], match.delimiter.display, match.delimiter.kind)
        )
        last_emit = pos = match.end

    if last_emit < len(text):
        segments.append(PlainText(text[last_emit:]))

    return segments


def has_candidate_delimiter(text: str, heuristic_brackets: bool = True) -> bool:
    """
    Cheap pre-check: could text contain any delimiter at all?

    Example:
        >>> has_candidate_delimiter("plain words")
        False
        >>> has_candidate_delimiter("see (1)", heuristic_brackets=False)
        False
    """
    if "$" in text or "\\[" in text or "\\(" in text:
        return True
    return heuristic_brackets and ("[" in text or "(" in text)
