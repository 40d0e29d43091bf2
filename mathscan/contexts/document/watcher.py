"""
Change Watcher

Receives change notifications from the host ("subtree changed", "text
changed") and re-runs discovery plus the pipeline over the affected parts of
the document.

Notifications are queued and merged into the next discovery pass, which runs
as its own idle callback. A notification that arrives while a batch is running
therefore never interleaves with that batch or sees a half-replaced sibling
chain.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from mathscan.contexts.document.logger import _log_debug
from mathscan.contexts.document.pipeline import BatchRun, PipelineContext, process_nodes
from mathscan.contexts.document.scheduler import Deadline, IdleScheduler


class ChangeKind(str, Enum):
    SUBTREE = "subtree"
    TEXT = "text"


@dataclass(frozen=True)
class ChangeEvent:
    """A subtree was added/changed, or a text node's content changed."""

    kind: ChangeKind
    target: Any


class ChangeWatcher:
    """
    Queues change events and schedules discovery passes.

    Args:
        ctx: Pipeline context shared with the processor
        scheduler: Idle scheduler that runs discovery and batches
    """

    def __init__(self, ctx: PipelineContext, scheduler: IdleScheduler):
        self.ctx = ctx
        self.scheduler = scheduler
        self.running = False
        self.runs: List[BatchRun] = []
        self._pending: List[ChangeEvent] = []
        self._flush_requested = False

    @property
    def pending(self) -> int:
        return len(self._pending)

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        """Stop observing and drop queued events; batches already scheduled still run."""
        self.running = False
        self._pending.clear()

    def cancel(self) -> None:
        """Forget queued events and any discovery pass the scheduler dropped; keep watching."""
        self._pending.clear()
        self._flush_requested = False

    def notify(self, events: List[ChangeEvent]) -> int:
        """
        Queue a batch of change events.

        Events whose target is verbatim or already processed output are dropped.

        Returns:
            Number of events accepted
        """
        if not self.running:
            return 0

        document = self.ctx.document
        accepted = [event for event in events if not document.is_excluded(event.target)]
        if not accepted:
            return 0

        self._pending.extend(accepted)
        if not self._flush_requested:
            self._flush_requested = True
            self.scheduler.request_idle(self._flush)
        return len(accepted)

    def discover(self, events: List[ChangeEvent]) -> List[Any]:
        """Text nodes affected by events, deduplicated, in event order."""
        document = self.ctx.document
        nodes: List[Any] = []
        seen = set()

        for event in events:
            if event.kind == ChangeKind.TEXT or document.is_text_node(event.target):
                candidates = [event.target] if document.is_text_node(event.target) else []
            else:
                candidates = document.find_text_nodes(event.target)

            for node in candidates:
                if id(node) in seen or not document.is_attached(node):
                    continue
                seen.add(id(node))
                nodes.append(node)

        return nodes

    def _flush(self, deadline: Deadline) -> None:
        self._flush_requested = False
        events, self._pending = self._pending, []
        if not self.running or not events:
            return

        nodes = self.discover(events)
        if self.ctx.debug:
            _log_debug(f"Discovery: {len(events)} events -> {len(nodes)} text nodes")
        if nodes:
            self.runs.append(process_nodes(nodes, self.ctx, self.scheduler))
