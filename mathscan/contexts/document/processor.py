"""
Math Processor

Control surface for hosts: initialize, trigger a full re-scan, scan a specific
subtree, forward change notifications and report state.

Example:
    >>> processor = MathProcessor.from_html("<p>Euler: $e^{i\\\\pi} + 1 = 0$</p>")
    >>> processor.initialize()
    True
    >>> processor.run_until_idle()
    >>> "<math" in processor.document.to_html()
    True
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from mathscan.contexts.document.html_document import HtmlDocument
from mathscan.contexts.document.logger import _log_error, _log_info, _log_success
from mathscan.contexts.document.pipeline import BatchRun, PipelineContext, process_nodes
from mathscan.contexts.document.scheduler import IdleScheduler
from mathscan.contexts.document.watcher import ChangeEvent, ChangeWatcher
from mathscan.contexts.rendering.exceptions import RenderError
from mathscan.contexts.rendering.renderer import MathRenderer
from mathscan.utils.config import MathScanConfig, load_config

# Expression rendered once during initialize() to confirm the renderer works
RENDERER_CHECK_LATEX = "x"


@dataclass
class ProcessorState:
    initialized: bool
    renderer_ready: bool
    debug: bool


class MathProcessor:
    """
    Owns the pipeline context, scheduler and change watcher for one document.

    Args:
        document: Document to process
        renderer: Math renderer (defaults to latex2mathml, per config)
        config: mathscan configuration (defaults to load_config())
        scheduler: Idle scheduler (defaults to one using the configured budget)
    """

    def __init__(
        self,
        document: HtmlDocument,
        renderer: Optional[MathRenderer] = None,
        config: Optional[MathScanConfig] = None,
        scheduler: Optional[IdleScheduler] = None,
    ):
        if config is None:
            config = load_config()
        if scheduler is None:
            scheduler = IdleScheduler(batch_budget_ms=config.scheduler.batch_budget_ms)

        self.config = config
        self.document = document
        self.scheduler = scheduler
        self.context = PipelineContext.from_config(document, config, renderer)
        self.watcher = ChangeWatcher(self.context, scheduler)
        self.initialized = False

    @classmethod
    def from_html(
        cls,
        html: str,
        renderer: Optional[MathRenderer] = None,
        config: Optional[MathScanConfig] = None,
        scheduler: Optional[IdleScheduler] = None,
    ) -> "MathProcessor":
        if config is None:
            config = load_config()
        document = HtmlDocument.from_html(html, config.document)
        return cls(document, renderer=renderer, config=config, scheduler=scheduler)

    def initialize(self) -> bool:
        """
        Check the renderer, inject styles, schedule the initial scan and start watching.

        Failures are logged, never raised.

        Returns:
            True if setup completed
        """
        if self.initialized:
            return True

        _log_info("Initializing math processor...")
        try:
            self.context.renderer.render(RENDERER_CHECK_LATEX, False)
        except RenderError as e:
            _log_error(f"Renderer check failed: {e}")
            return False
        self.context.renderer_ready = True

        if self.config.document.inject_styles and self.document.inject_styles():
            _log_info("Styles injected")

        self.reprocess()
        self.watcher.start()
        self.initialized = True
        _log_success("Initialization complete")
        return True

    def reprocess(self) -> BatchRun:
        """Schedule a full re-scan of the document."""
        nodes = self.document.find_text_nodes()
        _log_info(f"Scheduling full scan of {len(nodes)} text nodes")
        return process_nodes(nodes, self.context, self.scheduler)

    def process_element(self, element: Any) -> Optional[BatchRun]:
        """Schedule a scan of one subtree (or text node)."""
        if element is None:
            _log_error("No element provided")
            return None
        return process_nodes(self.document.find_text_nodes(element), self.context, self.scheduler)

    def notify(self, events: List[ChangeEvent]) -> int:
        """Forward change notifications to the watcher."""
        return self.watcher.notify(events)

    def run_until_idle(self) -> None:
        """Run every scheduled batch and discovery pass to completion."""
        self.scheduler.run_until_idle()

    def cancel(self) -> int:
        """Stop submitting further batches. Later notifications are still processed."""
        dropped = self.scheduler.cancel()
        self.watcher.cancel()
        return dropped

    def get_state(self) -> ProcessorState:
        return ProcessorState(
            initialized=self.initialized,
            renderer_ready=self.context.renderer_ready,
            debug=self.context.debug,
        )

    def toggle_debug(self, enable: bool = True) -> None:
        self.context.debug = enable
        _log_info(f"Debug mode {'enabled' if enable else 'disabled'}")


def render_html(
    html: str,
    renderer: Optional[MathRenderer] = None,
    config: Optional[MathScanConfig] = None,
) -> str:
    """
    Render every math expression in an HTML string and return the result.

    Args:
        html: Input HTML (document or fragment)
        renderer: Math renderer (defaults to latex2mathml)
        config: mathscan configuration

    Returns:
        HTML with math replaced by MathML containers

    Raises:
        RuntimeError: If the renderer failed its initialization check
    """
    processor = MathProcessor.from_html(html, renderer=renderer, config=config)
    if not processor.initialize():
        raise RuntimeError("Math processor failed to initialize")
    processor.run_until_idle()
    return processor.document.to_html()
