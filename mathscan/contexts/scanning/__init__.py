"""
Scanning Context

Responsibilities:
- Aggregates adjacent text fragments and line breaks into one text buffer
- Scans buffers for math delimiters and produces PlainText / Math segments
- Decides whether bare [...] / (...) spans look like math

Owns: Delimiter descriptors, segment types, text buffers
Never: Mutates the document or renders math
"""

from mathscan.contexts.scanning.aggregator import (
    TextBuffer,
    TextUnit,
    UnitKind,
    aggregate,
    aggregate_units,
)
from mathscan.contexts.scanning.delimiters import Delimiter, DelimiterKind
from mathscan.contexts.scanning.heuristic import MathHeuristic, is_likely_math
from mathscan.contexts.scanning.scanner import find_math_segments, has_candidate_delimiter
from mathscan.contexts.scanning.segments import (
    Math,
    PlainText,
    Segment,
    is_trivial,
    join_segments,
)

__all__ = [
    # Aggregation
    "TextBuffer",
    "TextUnit",
    "UnitKind",
    "aggregate",
    "aggregate_units",
    # Delimiters and segments
    "Delimiter",
    "DelimiterKind",
    "Math",
    "PlainText",
    "Segment",
    "is_trivial",
    "join_segments",
    # Scanning
    "find_math_segments",
    "has_candidate_delimiter",
    "MathHeuristic",
    "is_likely_math",
]
