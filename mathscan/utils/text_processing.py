"""
Escape-aware text helpers shared by the scanner, heuristic and normalizer.

Self-contained module with no project dependencies.
"""

import re
from typing import Optional, Tuple

ESCAPE_CHAR = "\\"


def count_preceding_backslashes(text: str, pos: int) -> int:
    """
    Count the run of backslashes immediately before pos.

    Example:
        >>> count_preceding_backslashes(r"a\\\\$", 3)
        2
    """
    count = 0
    i = pos - 1
    while i >= 0 and text[i] == ESCAPE_CHAR:
        count += 1
        i -= 1
    return count


def is_escaped(text: str, pos: int) -> bool:
    """
    Check whether the character at pos is escaped by a backslash.

    A character is escaped when it is preceded by an odd-length run of
    backslashes. An even run (e.g. the LaTeX row break \\\\) escapes itself
    and leaves the following character unescaped.

    Args:
        text: Text to inspect
        pos: Position of the character in question

    Returns:
        True if the character at pos is escaped

    Example:
        >>> is_escaped(r"Cost is \\$5", 9)
        True
        >>> is_escaped(r"a \\\\$x$", 4)
        False
    """
    return count_preceding_backslashes(text, pos) % 2 == 1


def find_unescaped(text: str, needle: str, start_pos: int) -> int:
    """
    Find the next occurrence of needle at or after start_pos that is not escaped.

    Returns:
        Position of the match, or -1 if none exists
    """
    pos = text.find(needle, start_pos)
    while pos != -1 and is_escaped(text, pos):
        pos = text.find(needle, pos + 1)
    return pos


def extract_balanced_delimiters(
    text: str,
    start_pos: int,
    open_char: str = '{',
    close_char: str = '}',
    escape_char: str = ESCAPE_CHAR
) -> Tuple[str, int]:
    """
    Extract content between balanced delimiters, handling escaped characters.

    Assumes start_pos is AFTER an opening delimiter. Counts nested delimiters
    to find the matching closing delimiter, skipping escaped characters.

    Args:
        text: Text containing delimited content
        start_pos: Position right after the opening delimiter
        open_char: Opening delimiter character (default: '{')
        close_char: Closing delimiter character (default: '}')
        escape_char: Character used for escaping (default: '\\')

    Returns:
        (content, end_pos) where:
        - content: Text between the delimiters (excluding delimiters themselves)
        - end_pos: Position after the closing delimiter

    Raises:
        ValueError: If delimiters are unmatched

    Example:
        >>> text = "foo {bar {nested} baz} qux"
        >>> content, end = extract_balanced_delimiters(text, 5)
        >>> content
        'bar {nested} baz'
        >>> text2 = "see [x_1 [2] y] end"
        >>> extract_balanced_delimiters(text2, 5, '[', ']')[0]
        'x_1 [2] y'
    """
    depth = 1  # Start at 1 (already inside opening delimiter)
    pos = start_pos

    while pos < len(text) and depth > 0:
        if text[pos] == escape_char:
            # Skip escaped character
            pos += 2
            continue
        elif text[pos] == open_char:
            depth += 1
        elif text[pos] == close_char:
            depth -= 1
        pos += 1

    if depth != 0:
        raise ValueError(
            f"Unmatched {open_char}{close_char} delimiters starting at position {start_pos}"
        )

    # content is from start_pos to pos-1 (excluding closing delimiter)
    content = text[start_pos:pos - 1]
    return content, pos


def find_balanced_close(
    text: str, start_pos: int, open_char: str, close_char: str
) -> Optional[int]:
    """
    Like extract_balanced_delimiters(), but return None instead of raising.

    Returns:
        Position after the closing delimiter, or None if unmatched
    """
    try:
        _, end_pos = extract_balanced_delimiters(text, start_pos, open_char, close_char)
    except ValueError:
        return None
    return end_pos


def collapse_whitespace(text: str) -> str:
    """
    Collapse line breaks and whitespace runs to single spaces, then strip.

    Example:
        >>> collapse_whitespace("  a +\\n   b  ")
        'a + b'
    """
    return re.sub(r"\s+", " ", text).strip()


def truncate_display(text: str, max_len: int) -> str:
    """
    Truncate text for display with ellipsis if needed.

    Example:
        >>> truncate_display("this is a very long string", 10)
        'this is...'
    """
    return text if len(text) <= max_len else text[: max_len - 3] + "..."
