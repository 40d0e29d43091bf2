"""
Segment Applier

Maps a segment list back onto the document: the aggregated source units are
replaced by plain text nodes and rendered math containers, in order, at the
position of the first consumed unit.

All output is built before the document is touched. Break markers that fall
inside plain text are moved back into place rather than flattened to text;
breaks swallowed by a math expression are removed with it.
"""

from dataclasses import dataclass, field
from typing import Any, List

from mathscan.contexts.document.exceptions import StructuralError
from mathscan.contexts.document.html_document import HtmlDocument
from mathscan.contexts.rendering.normalizer import NormalizeOptions
from mathscan.contexts.rendering.renderer import MathRenderer, render_math
from mathscan.contexts.scanning.aggregator import TextBuffer, UnitKind
from mathscan.contexts.scanning.segments import Math, PlainText, Segment


@dataclass
class ApplyResult:
    """
    Outcome of apply_segments().

    Attributes:
        output: Nodes inserted into the document, in order
        consumed: Number of source units removed
        rendered: Math segments rendered successfully
        failed: Math segments kept as raw text after both render attempts failed
    """

    output: List[Any] = field(default_factory=list)
    consumed: int = 0
    rendered: int = 0
    failed: int = 0


def _plain_output(
    buffer: TextBuffer, start: int, end: int, document: HtmlDocument
) -> List[Any]:
    """Text nodes for buffer[start:end], with original break markers in between."""
    nodes: List[Any] = []
    pending: List[str] = []

    for span in buffer.spans(start, end):
        if span.unit.kind == UnitKind.BREAK:
            if pending:
                nodes.append(document.new_text("".join(pending)))
                pending = []
            nodes.append(span.unit.node)
        else:
            pending.append(span.text)

    text = "".join(pending)
    if text:
        nodes.append(document.new_text(text))
    return nodes


def build_output(
    buffer: TextBuffer,
    segments: List[Segment],
    renderer: MathRenderer,
    document: HtmlDocument,
    options: NormalizeOptions = None,
) -> ApplyResult:
    """
    Render every segment into replacement nodes without mutating the document.

    Raises:
        TypeError: If a segment is neither PlainText nor Math
    """
    result = ApplyResult()
    offset = 0

    for segment in segments:
        end = offset + len(segment.raw)
        if isinstance(segment, PlainText):
            result.output.extend(_plain_output(buffer, offset, end, document))
        elif isinstance(segment, Math):
            outcome = render_math(segment, renderer, options)
            if outcome.success:
                result.output.append(document.new_math_container(outcome.markup, segment.display))
                result.rendered += 1
            else:
                result.output.append(document.new_error_container(segment.raw, segment.display))
                result.failed += 1
        else:
            raise TypeError(f"Unknown segment type: {type(segment).__name__}")
        offset = end

    if offset != len(buffer):
        raise ValueError(f"Segments cover {offset} chars but buffer has {len(buffer)}")
    return result


def apply_segments(
    buffer: TextBuffer,
    segments: List[Segment],
    renderer: MathRenderer,
    document: HtmlDocument,
    options: NormalizeOptions = None,
) -> ApplyResult:
    """
    Replace the buffer's source units with rendered output.

    Args:
        buffer: Aggregated buffer the segments were scanned from
        segments: Scanner output covering buffer exactly
        renderer: Math renderer
        document: Document that owns the buffer's nodes
        options: Normalizer options for math segments

    Returns:
        ApplyResult describing what was inserted

    Raises:
        StructuralError: If the first unit is detached or a unit left its parent
    """
    first = buffer.units[0].node
    parent = first.parent
    if parent is None:
        raise StructuralError("First unit of span is no longer attached", first)
    for unit in buffer.units:
        if unit.node.parent is not parent:
            raise StructuralError("Unit moved out of the aggregated span", unit.node)

    result = build_output(buffer, segments, renderer, document, options)

    index = parent.index(first)
    for unit in buffer.units:
        document.remove(unit.node)
    for i, node in enumerate(result.output):
        document.insert_at(parent, index + i, node)

    result.consumed = len(buffer.units)
    return result
