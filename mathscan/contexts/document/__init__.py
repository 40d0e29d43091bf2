"""
Document Context

Responsibilities:
- Provides document access over BeautifulSoup HTML trees
- Applies scanned segments back onto the document
- Runs the pipeline in cooperative idle-time batches
- Re-runs discovery on change notifications
- Exposes the control surface (initialize, reprocess, process_element, state)

Owns: Document mutation, processed markers, scheduling
Never: Decides what counts as math (see scanning context)
"""

from mathscan.contexts.document.applier import ApplyResult, apply_segments
from mathscan.contexts.document.exceptions import StructuralError
from mathscan.contexts.document.html_document import HtmlDocument
from mathscan.contexts.document.pipeline import (
    BatchRun,
    PipelineContext,
    process_node,
    process_nodes,
)
from mathscan.contexts.document.processor import MathProcessor, ProcessorState, render_html
from mathscan.contexts.document.scheduler import Deadline, IdleScheduler
from mathscan.contexts.document.watcher import ChangeEvent, ChangeKind, ChangeWatcher

__all__ = [
    # Document access and mutation
    "HtmlDocument",
    "ApplyResult",
    "apply_segments",
    "StructuralError",
    # Pipeline and scheduling
    "PipelineContext",
    "BatchRun",
    "process_node",
    "process_nodes",
    "Deadline",
    "IdleScheduler",
    # Change notifications
    "ChangeEvent",
    "ChangeKind",
    "ChangeWatcher",
    # Control surface
    "MathProcessor",
    "ProcessorState",
    "render_html",
]
