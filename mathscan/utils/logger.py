"""
Generic logger setup utilities.

Configures loguru sinks for one mathscan session and writes a provenance
header. Context-specific wrappers are defined in contexts/{context}/logger.py.
"""

import os
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <7} | {message}"
CONSOLE_FORMAT = "{time:HH:mm:ss} | <level>{level: <7}</level> | <level>{message}</level>"


def session_log_dir(context_name: str) -> Path:
    """Timestamped directory under LOGS_PATH for one session."""
    return LOGS_PATH / f"{context_name}_{datetime.now().strftime('%Y%m%d_%H%M%S')}"


def setup_logger(
    context_name: str,
    log_dir: Path = None,
    extra_provenance: dict = None,
    console_level: str = "INFO",
) -> Path:
    """
    Configure loguru for a context: a DEBUG file sink plus a colorized console sink.

    Args:
        context_name: Context identifier ("scan", "render", "document")
        log_dir: Directory for this session (defaults to session_log_dir(context_name))
        extra_provenance: Additional key-value pairs for the provenance header
        console_level: Minimum level echoed to stdout; the file always gets DEBUG

    Returns:
        Path to log file

    Example:
        log_file = setup_logger(
            context_name="document",
            extra_provenance={"Input": "page.html"},
            console_level="DEBUG",
        )
    """
    if log_dir is None:
        log_dir = session_log_dir(context_name)

    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(context_name, extra_provenance)

    return log_file


def log_provenance(context_name: str, extra_context: dict = None) -> None:
    """Log the command line, working directory and versions for this session."""
    from mathscan import __version__

    logger.info("=" * 80)
    logger.info(f"mathscan {__version__} ({context_name})")
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")

    if extra_context:
        for key, value in extra_context.items():
            logger.info(f"{key}: {value}")

    logger.info("=" * 80)
