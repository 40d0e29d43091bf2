"""
Scanning context logger.

Provides logging interface for scanning context with automatic [scan] prefix.
All scanning modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path

from loguru import logger

from mathscan.contexts.scanning.segments import Math
from mathscan.utils.logger import setup_logger as _setup_logger
from mathscan.utils.text_processing import truncate_display

CONTEXT_PREFIX = "[scan]"


def setup_scanning_logger(log_dir: Path = None) -> Path:
    """Setup logger for the scanning context."""
    return _setup_logger(context_name="scan", log_dir=log_dir)


def _log_info(message: str) -> None:
    """Log info message with [scan] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [scan] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [scan] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_buffer_collected(buffer) -> None:
    """Log an aggregated buffer (TextBuffer) at debug level."""
    _log_debug(
        f"Collected {len(buffer.units)} units, {len(buffer)} chars: "
        f"{truncate_display(buffer.text, 80)!r}"
    )


def log_segments_found(segments) -> None:
    """Log the result of a scan at debug level."""
    math_count = sum(1 for segment in segments if isinstance(segment, Math))
    _log_debug(f"Found {len(segments)} segments ({math_count} math)")
    for segment in segments:
        if isinstance(segment, Math):
            note = " (heuristic)" if segment.kind.is_heuristic else ""
            _log_debug(f"  {segment.kind.value}{note}: {truncate_display(segment.raw, 60)!r}")
