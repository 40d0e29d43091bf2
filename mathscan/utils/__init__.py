"""
Shared utilities for mathscan.

Common functionality used across contexts:
- Escape-aware text helpers
- Configuration loading
- Logger setup
"""

from mathscan.utils.config import MathScanConfig, load_config
from mathscan.utils.text_processing import extract_balanced_delimiters, is_escaped

__all__ = ["MathScanConfig", "load_config", "extract_balanced_delimiters", "is_escaped"]
