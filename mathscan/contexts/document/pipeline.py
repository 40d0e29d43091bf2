"""
Math Pipeline

Runs aggregate -> scan -> normalize/render -> apply for one text node, and
drives that over many nodes in cooperative batches.

Each node's full run is atomic with respect to yielding: nothing crosses a
batch boundary except the index of the next node. Nodes already consumed by an
earlier node's aggregation are detached (or now inside processed output) and
are skipped.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from mathscan.contexts.document.applier import ApplyResult, apply_segments
from mathscan.contexts.document.html_document import HtmlDocument
from mathscan.contexts.document.logger import (
    _log_debug,
    log_run_complete,
    log_unit_applied,
    log_unit_failure,
)
from mathscan.contexts.document.scheduler import Deadline, IdleScheduler
from mathscan.contexts.rendering.normalizer import NormalizeOptions
from mathscan.contexts.rendering.renderer import Latex2MathMLRenderer, MathRenderer
from mathscan.contexts.scanning.aggregator import aggregate
from mathscan.contexts.scanning.heuristic import MathHeuristic
from mathscan.contexts.scanning.logger import log_buffer_collected, log_segments_found
from mathscan.contexts.scanning.scanner import find_math_segments, has_candidate_delimiter
from mathscan.contexts.scanning.segments import is_trivial
from mathscan.utils.config import MathScanConfig


@dataclass
class PipelineContext:
    """
    Explicit state passed into the pipeline.

    Attributes:
        document: Document access
        renderer: Math renderer
        heuristic: Predicate for bare bracket/paren content
        normalize_options: Normalizer options
        heuristic_brackets: Whether bare [...] / (...) are scanned at all
        renderer_ready: Set once the renderer has been checked; nodes are
                        skipped until then
        debug: Emit per-node trace logging
    """

    document: HtmlDocument
    renderer: MathRenderer
    heuristic: MathHeuristic = field(default_factory=MathHeuristic)
    normalize_options: NormalizeOptions = field(default_factory=NormalizeOptions)
    heuristic_brackets: bool = True
    renderer_ready: bool = False
    debug: bool = False

    @classmethod
    def from_config(
        cls,
        document: HtmlDocument,
        config: MathScanConfig,
        renderer: Optional[MathRenderer] = None,
    ) -> "PipelineContext":
        if renderer is None:
            renderer = Latex2MathMLRenderer(strict=config.renderer.strict)
        return cls(
            document=document,
            renderer=renderer,
            heuristic=MathHeuristic.from_config(config.heuristic),
            normalize_options=NormalizeOptions.from_config(config.normalizer),
            heuristic_brackets=config.scanner.heuristic_brackets,
        )


def process_node(node: Any, ctx: PipelineContext) -> Optional[ApplyResult]:
    """
    Run the full pipeline for one text node.

    Args:
        node: Text node to start aggregation from
        ctx: Pipeline context

    Returns:
        ApplyResult if the document was changed, None if there was nothing to do

    Raises:
        StructuralError: If the sibling span changed shape before apply
    """
    document = ctx.document
    if not ctx.renderer_ready:
        return None
    if not document.is_text_node(node) or not document.is_attached(node):
        return None
    if document.is_excluded(node):
        return None

    buffer = aggregate(node, document)
    if not has_candidate_delimiter(buffer.text, ctx.heuristic_brackets):
        return None
    if ctx.debug:
        log_buffer_collected(buffer)

    segments = find_math_segments(buffer.text, ctx.heuristic, ctx.heuristic_brackets)
    if is_trivial(segments, buffer.text):
        return None
    if ctx.debug:
        log_segments_found(segments)

    result = apply_segments(buffer, segments, ctx.renderer, document, ctx.normalize_options)
    if ctx.debug:
        log_unit_applied(result)
    return result


@dataclass
class BatchRun:
    """Progress of a batched run over a snapshot of text nodes."""

    nodes: List[Any]
    index: int = 0
    batches: int = 0
    applied: int = 0
    rendered: int = 0
    render_failures: int = 0
    errors: int = 0
    cancelled: bool = False

    @property
    def done(self) -> bool:
        return self.index >= len(self.nodes)

    def cancel(self) -> None:
        """Stop submitting further batches."""
        self.cancelled = True


def process_nodes(nodes: List[Any], ctx: PipelineContext, scheduler: IdleScheduler) -> BatchRun:
    """
    Schedule the pipeline over nodes in idle-time batches.

    Every batch processes at least one node, then keeps going while its
    deadline has time left. A failing node is logged and skipped; it never
    aborts the batch.

    Args:
        nodes: Text nodes in discovery order
        ctx: Pipeline context
        scheduler: Idle scheduler that runs the batches

    Returns:
        BatchRun, updated as batches execute
    """
    run = BatchRun(nodes=list(nodes))

    def _process_next_batch(deadline: Deadline) -> None:
        if run.cancelled:
            return
        run.batches += 1
        processed = 0
        while not run.done and (processed == 0 or deadline.time_remaining() > 0):
            node = run.nodes[run.index]
            run.index += 1
            processed += 1
            try:
                result = process_node(node, ctx)
            except Exception as e:
                # One unit's failure must not abort the batch
                run.errors += 1
                log_unit_failure(node, e)
                continue
            if result is not None:
                run.applied += 1
                run.rendered += result.rendered
                run.render_failures += result.failed

        if run.done:
            log_run_complete(run)
        elif not run.cancelled:
            scheduler.request_idle(_process_next_batch)

    if run.nodes:
        scheduler.request_idle(_process_next_batch)
    elif ctx.debug:
        _log_debug("No text nodes to process")
    return run
