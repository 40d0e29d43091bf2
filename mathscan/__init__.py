"""
mathscan - Math delimiter scanning and rendering for HTML text

Finds LaTeX-style math expressions ($$...$$, $...$, \\[...\\], \\(...\\) and
heuristic [...] / (...)) in free-form document text and replaces them with
rendered MathML.

Architecture:
- Scanning Context: Sibling aggregation, delimiter scanning, math heuristic
- Rendering Context: Content normalization and LaTeX to MathML conversion
- Document Context: Applying segments to HTML trees, batching, change watching
"""

__version__ = "0.1.0"
