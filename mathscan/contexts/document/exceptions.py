"""Custom exceptions for the document context."""

from typing import Any, Optional


class StructuralError(Exception):
    """
    Exception raised when the document no longer has the shape a pipeline step expects.

    Typical cause: a sibling in an aggregated span was detached before apply.

    Attributes:
        message: Error description
        node: The offending node, if known
    """

    def __init__(self, message: str, node: Optional[Any] = None):
        self.message = message
        self.node = node

        parts = [message]
        if node is not None:
            snippet = str(node)
            snippet = snippet[:80] + "..." if len(snippet) > 80 else snippet
            parts.append(f"Node: {snippet!r}")

        super().__init__("\n".join(parts))
