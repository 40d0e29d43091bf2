"""
HTML Document Access

Wraps a BeautifulSoup tree with exactly the operations the math pipeline needs:
sibling navigation for aggregation, node creation and removal for the applier,
and the processed / verbatim checks that keep generated output and code
regions out of scanning.

Text units are NavigableStrings (comments, CDATA and other preformatted strings
excluded). Break markers are tags named in break_tags (<br> by default).
"""

from typing import Any, List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

from mathscan.contexts.scanning.aggregator import TextUnit
from mathscan.utils.config import DocumentConfig

STYLE_ELEMENT_ID = "mathscan-styles"

MATH_STYLES = """
.math-container {
    display: inline-block;
    vertical-align: middle;
    text-align: left;
}
.math-container[data-display="block"] {
    display: block;
    margin: 0.2em 0;
    text-align: center;
}
.math-container math {
    vertical-align: 0.5ex;
}
.math-error {
    white-space: pre-wrap;
}
"""


class HtmlDocument:
    """
    Document access over a BeautifulSoup tree.

    Args:
        soup: Parsed document (or fragment)
        config: Document section of the mathscan config

    Example:
        >>> document = HtmlDocument.from_html("<p>Let $x$ be</p>")
        >>> [str(node) for node in document.find_text_nodes()]
        ['Let $x$ be']
    """

    def __init__(self, soup: BeautifulSoup, config: DocumentConfig = None):
        if config is None:
            config = DocumentConfig()
        self.soup = soup
        self.break_tags = set(config.break_tags)
        self.verbatim_tags = set(config.verbatim_tags)
        self.processed_class = config.processed_class
        self.container_class = config.container_class
        self.error_class = config.error_class

    @classmethod
    def from_html(cls, html: str, config: DocumentConfig = None) -> "HtmlDocument":
        return cls(BeautifulSoup(html, "html.parser"), config)

    def to_html(self) -> str:
        return str(self.soup)

    # ------------------------------------------------------------------
    # Node classification
    # ------------------------------------------------------------------

    @staticmethod
    def is_text_node(node: Any) -> bool:
        return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)

    def is_break_marker(self, node: Any) -> bool:
        return isinstance(node, Tag) and node.name in self.break_tags

    def as_text_unit(self, node: Any) -> Optional[TextUnit]:
        """TextUnit for a text node or break marker, None for anything else."""
        if self.is_text_node(node):
            return TextUnit.text_unit(str(node), node)
        if self.is_break_marker(node):
            return TextUnit.break_unit(node)
        return None

    def has_processed_class(self, node: Any) -> bool:
        return isinstance(node, Tag) and self.processed_class in (node.get("class") or [])

    def is_processed(self, node: Any) -> bool:
        """Whether node or any ancestor is tagged as generated math output."""
        if self.has_processed_class(node):
            return True
        return any(self.has_processed_class(parent) for parent in node.parents)

    def is_verbatim(self, node: Any) -> bool:
        """Whether node sits inside a verbatim/code region (hard exclusion)."""
        if isinstance(node, Tag) and node.name in self.verbatim_tags:
            return True
        return any(parent.name in self.verbatim_tags for parent in node.parents)

    def is_excluded(self, node: Any) -> bool:
        return self.is_verbatim(node) or self.is_processed(node)

    @staticmethod
    def is_attached(node: Any) -> bool:
        return node.parent is not None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @staticmethod
    def previous_sibling(node: Any) -> Optional[Any]:
        return node.previous_sibling

    @staticmethod
    def next_sibling(node: Any) -> Optional[Any]:
        return node.next_sibling

    def find_text_nodes(self, root: Any = None) -> List[Any]:
        """
        Collect scannable text nodes under root in document order.

        Subtrees that are verbatim or already processed are skipped entirely.

        Args:
            root: Tag or text node (defaults to the whole document)

        Returns:
            List of NavigableStrings
        """
        if root is None:
            root = self.soup

        if self.is_excluded(root):
            return []
        if self.is_text_node(root):
            return [root]
        if not isinstance(root, Tag):
            return []

        found: List[Any] = []
        self._collect_text_nodes(root, found)
        return found

    def _collect_text_nodes(self, tag: Tag, found: List[Any]) -> None:
        for child in tag.children:
            if self.is_text_node(child):
                found.append(child)
            elif isinstance(child, Tag):
                if child.name in self.verbatim_tags or self.has_processed_class(child):
                    continue
                self._collect_text_nodes(child, found)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    @staticmethod
    def remove(node: Any) -> None:
        node.extract()

    @staticmethod
    def insert_at(parent: Tag, index: int, node: Any) -> None:
        parent.insert(index, node)

    def mark_processed(self, tag: Tag) -> Tag:
        classes = list(tag.get("class") or [])
        if self.processed_class not in classes:
            classes.append(self.processed_class)
        tag["class"] = classes
        return tag

    def new_text(self, text: str) -> NavigableString:
        return NavigableString(text)

    def new_math_container(self, markup: str, display: bool) -> Tag:
        """
        Span holding rendered markup, tagged processed.

        <span class="math-container math-processed" data-display="block|inline">
        """
        container = self._new_container(display)
        fragment = BeautifulSoup(markup, "html.parser")
        for child in list(fragment.contents):
            container.append(child.extract())
        return container

    def new_error_container(self, raw: str, display: bool) -> Tag:
        """Span holding the raw delimited text of an expression that could not be rendered."""
        container = self._new_container(display)
        container["class"] = container["class"] + [self.error_class]
        container.append(NavigableString(raw))
        return container

    def _new_container(self, display: bool) -> Tag:
        container = self.soup.new_tag("span")
        container["class"] = [self.container_class]
        container["data-display"] = "block" if display else "inline"
        return self.mark_processed(container)

    def inject_styles(self) -> bool:
        """
        Add the math stylesheet to <head> once.

        Returns:
            True if a style element was added, False if already present or no <head>
        """
        head = self.soup.find("head")
        if head is None or self.soup.find("style", id=STYLE_ELEMENT_ID) is not None:
            return False
        style = self.soup.new_tag("style", id=STYLE_ELEMENT_ID)
        style.string = MATH_STYLES
        head.append(style)
        return True
