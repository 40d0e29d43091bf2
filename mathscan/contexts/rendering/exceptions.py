"""Custom exceptions for the rendering context."""

from typing import Optional


class RenderError(Exception):
    """
    Exception raised when a math renderer rejects an expression.

    Attributes:
        message: Error description
        latex: The LaTeX content that failed to render
        display: Whether block layout was requested
        original_error: The underlying renderer exception, if any
    """

    def __init__(
        self,
        message: str,
        latex: Optional[str] = None,
        display: bool = False,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.latex = latex
        self.display = display
        self.original_error = original_error

        # Build enhanced error message
        parts = [message]

        if latex:
            # Truncate snippet if too long
            snippet = latex[:200] + "..." if len(latex) > 200 else latex
            parts.append(f"\nLaTeX ({'display' if display else 'inline'}):\n{snippet}")

        if original_error:
            parts.append(f"\nOriginal error: {type(original_error).__name__}: {original_error}")

        super().__init__("\n".join(parts))
