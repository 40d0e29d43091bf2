"""
Math Rendering

Converts LaTeX expressions to MathML through latex2mathml and applies the
two-attempt policy: normalized content first, the original content second.
When both attempts fail the caller keeps the raw delimited text.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Protocol

from latex2mathml.converter import convert as latex2mathml_convert

from mathscan.contexts.rendering.exceptions import RenderError
from mathscan.contexts.rendering.logger import (
    log_render_attempt,
    log_render_failure,
    log_render_retry,
)
from mathscan.contexts.rendering.normalizer import NormalizeOptions, normalize_latex
from mathscan.contexts.scanning.segments import Math

# A LaTeX command that survived conversion means the renderer did not understand it
RAW_COMMAND_RE = re.compile(r"\\[A-Za-z]+")


class MathRenderer(Protocol):
    """
    Renders LaTeX to markup.

    Implementations must be side-effect free and raise RenderError on failure.
    """

    def render(self, latex: str, display: bool) -> str: ...


class Latex2MathMLRenderer:
    """
    MathML renderer backed by latex2mathml.

    Args:
        strict: Reject output that still contains raw \\commands

    Example:
        >>> renderer = Latex2MathMLRenderer()
        >>> "<msup>" in renderer.render("x^2", display=False)
        True
    """

    def __init__(self, strict: bool = True):
        self.strict = strict

    def render(self, latex: str, display: bool) -> str:
        if not latex.strip():
            raise RenderError("Empty expression", latex=latex, display=display)

        try:
            mathml = latex2mathml_convert(latex, display="block" if display else "inline")
        except Exception as e:
            # latex2mathml raises many unrelated exception types on bad input
            raise RenderError(
                "latex2mathml could not convert expression",
                latex=latex,
                display=display,
                original_error=e,
            ) from e

        if self.strict:
            leftover = RAW_COMMAND_RE.search(mathml)
            if leftover:
                raise RenderError(
                    f"Unsupported command {leftover.group(0)}", latex=latex, display=display
                )

        return mathml


@dataclass
class RenderOutcome:
    """
    Result of render_math().

    Attributes:
        segment: The math segment that was rendered
        markup: Rendered markup (None if every attempt failed)
        latex: The input that rendered successfully
        used_original: True if the normalized input failed and the original succeeded
        errors: One RenderError per failed attempt
    """

    segment: Math
    markup: Optional[str] = None
    latex: Optional[str] = None
    used_original: bool = False
    errors: List[RenderError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.markup is not None


def render_math(
    segment: Math, renderer: MathRenderer, options: NormalizeOptions = None
) -> RenderOutcome:
    """
    Render a math segment with the two-attempt policy.

    Attempt 1 renders the normalized content. If the renderer rejects it,
    attempt 2 renders the original inner content (skipped when normalization
    changed nothing). Never raises RenderError.

    Args:
        segment: Math segment from the scanner
        renderer: Renderer to delegate to
        options: Normalizer options

    Returns:
        RenderOutcome; outcome.success is False when both attempts failed
    """
    original = segment.content
    normalized = normalize_latex(original, display=segment.display, options=options)
    attempts = [normalized] if normalized == original else [normalized, original]

    outcome = RenderOutcome(segment=segment)
    for attempt, latex in enumerate(attempts, 1):
        log_render_attempt(latex, segment.display, attempt)
        try:
            markup = renderer.render(latex, segment.display)
        except RenderError as e:
            outcome.errors.append(e)
            if attempt < len(attempts):
                log_render_retry(e)
            continue

        if not markup:
            outcome.errors.append(
                RenderError("Renderer returned no result", latex=latex, display=segment.display)
            )
            continue

        outcome.markup = markup
        outcome.latex = latex
        outcome.used_original = attempt > 1
        return outcome

    log_render_failure(segment.raw, outcome.errors)
    return outcome
