"""
Rendering Context

Responsibilities:
- Normalizes extracted expressions for the renderer
- Converts LaTeX to MathML (latex2mathml)
- Applies the normalized-then-original retry policy

Owns: Normalization rules, renderer adapters, render errors
Never: Scans text or touches the document
"""

from mathscan.contexts.rendering.exceptions import RenderError
from mathscan.contexts.rendering.normalizer import NormalizeOptions, normalize_latex
from mathscan.contexts.rendering.renderer import (
    Latex2MathMLRenderer,
    MathRenderer,
    RenderOutcome,
    render_math,
)

__all__ = [
    "RenderError",
    "NormalizeOptions",
    "normalize_latex",
    "Latex2MathMLRenderer",
    "MathRenderer",
    "RenderOutcome",
    "render_math",
]
