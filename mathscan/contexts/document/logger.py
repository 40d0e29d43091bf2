"""
Document context logger.

Provides logging interface for document context with automatic [document] prefix.
All document modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from mathscan.utils.logger import setup_logger as _setup_logger
from mathscan.utils.text_processing import truncate_display

CONTEXT_PREFIX = "[document]"


def setup_document_logger(
    log_dir: Path = None, input_path: Path = None, console_level: str = "INFO"
) -> Path:
    """
    Setup logger for document processing.

    Args:
        log_dir: Directory for this session (defaults under LOGS_PATH)
        input_path: Document being processed, for provenance
        console_level: Minimum level echoed to stdout

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="document",
        log_dir=log_dir,
        extra_provenance={"Input": input_path} if input_path else None,
        console_level=console_level,
    )


# Wrapper functions with automatic [document] prefix


def _log_info(message: str) -> None:
    """Log info message with [document] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [document] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [document] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [document] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [document] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level document-specific logging helpers


def log_unit_failure(node, error: Exception) -> None:
    """Log a unit that failed structurally and was skipped."""
    _log_warning(f"Skipping {truncate_display(str(node), 60)!r}: {error}")


def log_unit_applied(result) -> None:
    """Log one applied span (ApplyResult)."""
    _log_debug(
        f"Replaced {result.consumed} units with {len(result.output)} nodes "
        f"({result.rendered} rendered, {result.failed} kept raw)"
    )


def log_run_complete(run) -> None:
    """Log the end of a batched run (BatchRun)."""
    message = (
        f"Processed {run.index}/{len(run.nodes)} text nodes in {run.batches} batches: "
        f"{run.applied} spans replaced, {run.rendered} rendered, "
        f"{run.render_failures} kept raw, {run.errors} errors"
    )
    if run.errors:
        _log_warning(message)
    else:
        _log_info(message)
