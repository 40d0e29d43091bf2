"""
Text Aggregator

Merges a text unit and its linear siblings (adjacent text nodes and line-break
markers) into one logical TextBuffer. Math expressions are often split across
several adjacent text fragments; scanning one fragment alone would miss
delimiters whose open and close halves land in different fragments.

Read-only: the aggregator never mutates the document. Fragments are
concatenated verbatim, so a trailing backslash before a break survives as
'\\' + '\\n' and is handled by the normalizer.
"""

from bisect import bisect_right
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Protocol, Tuple

BREAK_TEXT = "\n"


class UnitKind(str, Enum):
    TEXT = "text"
    BREAK = "break"


@dataclass(frozen=True)
class TextUnit:
    """
    Handle to a contiguous piece of source text, or a line-break marker.

    Attributes:
        kind: TEXT or BREAK
        content: Source text (empty for breaks)
        node: Opaque handle to the originating document node
    """

    kind: UnitKind
    content: str = ""
    node: Any = field(default=None, compare=False, repr=False)

    @property
    def text(self) -> str:
        """Text contributed to the buffer; a break contributes exactly one newline."""
        return BREAK_TEXT if self.kind == UnitKind.BREAK else self.content

    @property
    def length(self) -> int:
        return len(self.text)

    @classmethod
    def text_unit(cls, content: str, node: Any = None) -> "TextUnit":
        return cls(UnitKind.TEXT, content, node)

    @classmethod
    def break_unit(cls, node: Any = None) -> "TextUnit":
        return cls(UnitKind.BREAK, "", node)


@dataclass(frozen=True)
class UnitSpan:
    """Portion [start, end) of a unit's buffer text that overlaps a buffer range."""

    index: int
    unit: TextUnit
    start: int
    end: int

    @property
    def is_whole(self) -> bool:
        return self.start == 0 and self.end == self.unit.length

    @property
    def text(self) -> str:
        return self.unit.text[self.start : self.end]


@dataclass(frozen=True)
class TextBuffer:
    """
    Logical string built from a sequence of TextUnits.

    Invariant: len(text) == sum(unit.length for unit in units), with
    offsets[i] the buffer position where units[i] starts.
    """

    text: str
    units: Tuple[TextUnit, ...]
    offsets: Tuple[int, ...]

    def __len__(self) -> int:
        return len(self.text)

    @property
    def nodes(self) -> List[Any]:
        return [unit.node for unit in self.units]

    def index_at(self, offset: int) -> int:
        """Index of the unit that contributed the character at offset."""
        if not 0 <= offset < len(self.text):
            raise IndexError(f"Offset {offset} outside buffer of length {len(self.text)}")
        return bisect_right(self.offsets, offset) - 1

    def unit_at(self, offset: int) -> TextUnit:
        return self.units[self.index_at(offset)]

    def spans(self, start: int, end: int) -> Iterator[UnitSpan]:
        """
        Yield the unit portions covering buffer range [start, end), in order.

        Example:
            >>> buffer = aggregate_units([TextUnit.text_unit("$x^2"), TextUnit.text_unit("+y$ done")])
            >>> [span.text for span in buffer.spans(2, 6)]
            ['^2', '+y']
        """
        for index, unit in enumerate(self.units):
            unit_start = self.offsets[index]
            unit_end = unit_start + unit.length
            if unit_end <= start or unit_start >= end:
                continue
            yield UnitSpan(
                index=index,
                unit=unit,
                start=max(start, unit_start) - unit_start,
                end=min(end, unit_end) - unit_start,
            )


def aggregate_units(units: Iterable[TextUnit]) -> TextBuffer:
    """
    Build a TextBuffer from units in document order.

    Example:
        >>> buffer = aggregate_units([TextUnit.text_unit("a"), TextUnit.break_unit(), TextUnit.text_unit("b")])
        >>> buffer.text
        'a\\nb'
    """
    units = tuple(units)
    offsets = []
    pieces = []
    position = 0
    for unit in units:
        offsets.append(position)
        pieces.append(unit.text)
        position += unit.length
    return TextBuffer(text="".join(pieces), units=units, offsets=tuple(offsets))


class SiblingSource(Protocol):
    """Read access to a linear sibling chain, as needed by aggregate()."""

    def previous_sibling(self, node: Any) -> Optional[Any]: ...

    def next_sibling(self, node: Any) -> Optional[Any]: ...

    def as_text_unit(self, node: Any) -> Optional[TextUnit]:
        """TextUnit for a text or break node, None for anything else."""
        ...


def aggregate(start_node: Any, source: SiblingSource) -> TextBuffer:
    """
    Collect start_node and its contiguous text/break siblings into one buffer.

    Walks backward, then forward, through immediate siblings and stops at the
    first sibling that is neither a text unit nor a break marker.

    Args:
        start_node: A text node
        source: Document access providing sibling navigation

    Returns:
        TextBuffer over the collected units, in document order

    Raises:
        ValueError: If start_node is not a text unit
    """
    start_unit = source.as_text_unit(start_node)
    if start_unit is None or start_unit.kind != UnitKind.TEXT:
        raise ValueError("aggregate() must start from a text unit")

    preceding: List[TextUnit] = []
    current = source.previous_sibling(start_node)
    while current is not None:
        unit = source.as_text_unit(current)
        if unit is None:
            break
        preceding.append(unit)
        current = source.previous_sibling(current)

    following: List[TextUnit] = []
    current = source.next_sibling(start_node)
    while current is not None:
        unit = source.as_text_unit(current)
        if unit is None:
            break
        following.append(unit)
        current = source.next_sibling(current)

    return aggregate_units(list(reversed(preceding)) + [start_unit] + following)
