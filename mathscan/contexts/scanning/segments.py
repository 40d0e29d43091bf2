"""
Segment types produced by the delimiter scanner.

A scan yields a list of PlainText and Math segments in left-to-right order.
Every segment exposes .raw; joining the raw spans reproduces the scanned text.
"""

from dataclasses import dataclass
from typing import List, Union

from mathscan.contexts.scanning.delimiters import DELIMITERS_BY_KIND, DelimiterKind


@dataclass(frozen=True)
class PlainText:
    """Text that contains no recognised math expression."""

    text: str

    @property
    def raw(self) -> str:
        return self.text


@dataclass(frozen=True)
class Math:
    """
    A delimited math expression.

    Attributes:
        raw: The full delimited span, e.g. '$x^2$' or '\\[ a \\]'
        display: True for block layout, False for inline
        kind: Delimiter pair that matched
    """

    raw: str
    display: bool
    kind: DelimiterKind

    @property
    def content(self) -> str:
        """Inner expression with the delimiters removed and whitespace stripped."""
        delimiter = DELIMITERS_BY_KIND[self.kind]
        return self.raw[len(delimiter.open) : len(self.raw) - len(delimiter.close)].strip()


Segment = Union[PlainText, Math]


def join_segments(segments: List[Segment]) -> str:
    """Reconstruct the scanned text from its segments."""
    return "".join(segment.raw for segment in segments)


def is_trivial(segments: List[Segment], text: str) -> bool:
    """
    Check whether a scan found nothing to do.

    True when the segment list is empty or is a single PlainText equal to the
    whole scanned text. Callers must skip all later stages in that case.
    """
    if not segments:
        return True
    return len(segments) == 1 and isinstance(segments[0], PlainText) and segments[0].text == text


def math_segments(segments: List[Segment]) -> List[Math]:
    """Return only the Math segments, in order."""
    return [segment for segment in segments if isinstance(segment, Math)]
