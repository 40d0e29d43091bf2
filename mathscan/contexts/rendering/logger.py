"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from loguru import logger

from mathscan.utils.text_processing import truncate_display

CONTEXT_PREFIX = "[render]"


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_attempt(latex: str, display: bool, attempt: int) -> None:
    """Log a single renderer call."""
    mode = "display" if display else "inline"
    _log_debug(f"Attempt {attempt} ({mode}): {truncate_display(latex, 80)!r}")


def log_render_retry(error: Exception) -> None:
    """Log that normalized input was rejected and the original will be tried."""
    _log_debug(f"Normalized input rejected, retrying with original: {error}")


def log_render_failure(raw: str, errors) -> None:
    """
    Log that every attempt failed and the raw text will be kept.

    Args:
        raw: Full delimited span that will be shown verbatim
        errors: RenderError per attempt
    """
    _log_warning(f"Could not render {truncate_display(raw, 60)!r}; keeping raw text")
    for i, error in enumerate(errors, 1):
        # Multi-line error messages go out untouched
        logger.opt(raw=True).debug(f"{CONTEXT_PREFIX}   Attempt {i}: {error}\n")
