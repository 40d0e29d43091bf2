"""
Integration tests for the document pipeline - real HTML, real latex2mathml.

Covers end-to-end rendering, idempotence, the render-failure fallback,
structural failures and batching.
"""

import pytest
from bs4 import BeautifulSoup, NavigableString

from mathscan.contexts.document.html_document import HtmlDocument
from mathscan.contexts.document.pipeline import PipelineContext, process_node, process_nodes
from mathscan.contexts.document.processor import MathProcessor, render_html
from mathscan.contexts.document.scheduler import IdleScheduler
from mathscan.contexts.rendering.exceptions import RenderError
from mathscan.contexts.rendering.renderer import Latex2MathMLRenderer


class SelectiveRenderer:
    """Wraps latex2mathml but rejects any expression containing a marker."""

    def __init__(self, marker="badcmd"):
        self.marker = marker
        self.inner = Latex2MathMLRenderer()
        self.calls = []

    def render(self, latex, display):
        self.calls.append(latex)
        if self.marker in latex:
            raise RenderError("unsupported", latex=latex, display=display)
        return self.inner.render(latex, display)


def _processed(html, renderer=None):
    processor = MathProcessor.from_html(html, renderer=renderer)
    assert processor.initialize()
    processor.run_until_idle()
    return processor


def _containers(document):
    return document.soup.find_all("span", class_="math-container")


@pytest.mark.integration
class TestRenderHtml:
    """End-to-end rendering of HTML strings."""

    def test_inline_math_rendered(self):
        html = render_html("<p>Let $x^2$ be positive.</p>")
        soup = BeautifulSoup(html, "html.parser")
        container = soup.find("span", class_="math-container")

        assert container is not None
        assert "math-processed" in container["class"]
        assert container["data-display"] == "inline"
        assert container.find("msup") is not None
        assert "$x^2$" not in html
        assert "Let " in html and " be positive." in html

    def test_display_math_rendered(self):
        html = render_html(r"<p>\[ \frac{a}{b} \]</p>")
        container = BeautifulSoup(html, "html.parser").find("span", class_="math-container")

        assert container["data-display"] == "block"
        assert container.find("mfrac") is not None

    def test_escaped_dollars_untouched(self):
        html = render_html(r"<p>Cost is \$5</p>")

        assert html == r"<p>Cost is \$5</p>"

    def test_unterminated_untouched(self):
        html = render_html(r"<p>Use \( x</p>")

        assert html == r"<p>Use \( x</p>"

    def test_numeric_brackets_untouched(self):
        processor = _processed(r"<p>See (3) and [42] but (\alpha)</p>")
        containers = _containers(processor.document)

        assert len(containers) == 1
        assert "See (3) and [42] but " in processor.document.to_html()

    def test_verbatim_regions_skipped(self):
        processor = _processed("<pre>$a$</pre><code>$b$</code><p>$c$</p>")

        assert len(_containers(processor.document)) == 1
        assert "<pre>$a$</pre>" in processor.document.to_html()
        assert "<code>$b$</code>" in processor.document.to_html()

    def test_multiline_display_with_breaks(self):
        processor = _processed("<p>$$a = 1<br/>b = 2$$ after<br/>next line</p>")
        p = processor.document.soup.p

        assert len(_containers(processor.document)) == 1
        # The break inside the math is consumed, the one after it survives
        assert len(p.find_all("br", recursive=False)) == 1
        assert "next line" in p.get_text()


@pytest.mark.integration
class TestMultiFragment:
    """Math split across adjacent text nodes."""

    def test_fragments_joined(self):
        soup = BeautifulSoup("<p></p>", "html.parser")
        soup.p.append(NavigableString("$x^2"))
        soup.p.append(NavigableString("+y$ done"))
        renderer = SelectiveRenderer()
        processor = MathProcessor(HtmlDocument(soup), renderer=renderer)

        processor.initialize()
        processor.run_until_idle()

        assert "x^2+y" in renderer.calls
        assert soup.p.contents[0]["class"][0] == "math-container"
        assert str(soup.p.contents[1]) == " done"
        assert len(soup.p.contents) == 2


@pytest.mark.integration
class TestIdempotence:
    """Re-running the pipeline over processed output is a no-op."""

    def test_reprocess_is_noop(self):
        processor = _processed(
            r"<div><p>A $x$ and $$y$$ and \(z\)</p><p>Bad \(\badcmd\) here</p></div>",
            renderer=SelectiveRenderer(),
        )
        first = processor.document.to_html()

        run = processor.reprocess()
        processor.run_until_idle()

        assert processor.document.to_html() == first
        assert run.applied == 0

    def test_second_render_html_pass_is_noop(self):
        once = render_html("<p>Let $x$ and (\\beta) be</p>")
        twice = render_html(once)

        assert len(BeautifulSoup(twice, "html.parser").find_all(class_="math-container")) == 2


@pytest.mark.integration
class TestRenderFailure:
    """Expressions the renderer rejects appear exactly as typed."""

    def test_raw_text_kept(self):
        processor = _processed(r"<p>Use \(\badcmd\) here</p>", renderer=SelectiveRenderer())
        containers = _containers(processor.document)

        assert len(containers) == 1
        assert "math-error" in containers[0]["class"]
        assert containers[0].get_text() == r"\(\badcmd\)"
        assert processor.document.soup.p.get_text() == r"Use \(\badcmd\) here"

    def test_failure_does_not_affect_neighbours(self):
        processor = _processed(r"<p>$\badcmd$ and $x$</p>", renderer=SelectiveRenderer())
        containers = _containers(processor.document)

        assert ["math-error" in c["class"] for c in containers] == [True, False]


@pytest.mark.integration
class TestStructuralFailure:
    """A unit whose siblings change mid-apply is logged and skipped."""

    def test_batch_continues(self):
        soup = BeautifulSoup("<p>$a$</p><p>$b$</p>", "html.parser")
        first_paragraph = soup.find_all("p")[0]

        class DetachingRenderer(SelectiveRenderer):
            def render(self, latex, display):
                if latex == "a":
                    first_paragraph.contents[0].extract()
                return super().render(latex, display)

        document = HtmlDocument(soup)
        ctx = PipelineContext(document=document, renderer=DetachingRenderer(), renderer_ready=True)
        scheduler = IdleScheduler()

        run = process_nodes(document.find_text_nodes(), ctx, scheduler)
        scheduler.run_until_idle()

        assert run.errors == 1
        assert run.applied == 1
        assert soup.find_all("p")[1].find("span", class_="math-container") is not None


@pytest.mark.integration
class TestBatching:
    """Cooperative batching over many nodes."""

    def _context(self, html):
        document = HtmlDocument.from_html(html)
        ctx = PipelineContext(document=document, renderer=SelectiveRenderer(), renderer_ready=True)
        return document, ctx

    def test_zero_budget_processes_one_node_per_batch(self):
        document, ctx = self._context("<p>$a$</p><p>$b$</p><p>$c$</p>")
        scheduler = IdleScheduler(batch_budget_ms=0)

        run = process_nodes(document.find_text_nodes(), ctx, scheduler)
        scheduler.run_until_idle()

        assert run.done
        assert run.batches == 3
        assert run.applied == 3
        assert run.rendered == 3

    def test_large_budget_single_batch(self):
        document, ctx = self._context("<p>$a$</p><p>$b$</p><p>$c$</p>")
        scheduler = IdleScheduler(batch_budget_ms=60_000)

        run = process_nodes(document.find_text_nodes(), ctx, scheduler)
        scheduler.run_until_idle()

        assert run.batches == 1
        assert run.applied == 3

    def test_cancel_stops_further_batches(self):
        document, ctx = self._context("<p>$a$</p><p>$b$</p><p>$c$</p>")
        scheduler = IdleScheduler(batch_budget_ms=0)

        run = process_nodes(document.find_text_nodes(), ctx, scheduler)
        scheduler.run_once()
        run.cancel()
        scheduler.run_until_idle()

        assert run.index == 1
        assert len(document.soup.find_all("span", class_="math-container")) == 1

    def test_consumed_nodes_skipped(self):
        """Nodes swallowed by an earlier aggregation are not processed twice."""
        soup = BeautifulSoup("<p></p>", "html.parser")
        soup.p.append(NavigableString("$a"))
        soup.p.append(NavigableString("b$"))
        document = HtmlDocument(soup)
        ctx = PipelineContext(document=document, renderer=SelectiveRenderer(), renderer_ready=True)
        scheduler = IdleScheduler()

        run = process_nodes(list(soup.p.contents), ctx, scheduler)
        scheduler.run_until_idle()

        assert run.applied == 1
        assert run.errors == 0
        assert ctx.renderer.calls == ["ab"]

    def test_renderer_not_ready_skips(self):
        document = HtmlDocument.from_html("<p>$a$</p>")
        ctx = PipelineContext(document=document, renderer=SelectiveRenderer())

        assert process_node(document.soup.p.string, ctx) is None
        assert document.to_html() == "<p>$a$</p>"
