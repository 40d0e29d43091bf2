"""
Ambiguous-Delimiter Heuristic

Decides whether the content of a bare [...] or (...) span looks like math.
Used only for heuristic brackets; dollar and backslash delimiters are never
second-guessed.

This is best-effort: each signal is a precision/recall trade-off, not a
correctness boundary. Any single enabled signal is enough to accept, and the
numeric rejection overrides every signal so citations and list markers like
(3) or [42] stay plain text.
"""

import re
from typing import Callable, Dict, List, Sequence

from mathscan.utils.config import ConfigError

CONTROL_CHARS_RE = re.compile(r"[_^{}\\]")
COMMAND_RE = re.compile(r"\\[a-zA-Z]+")
MATH_SYMBOLS_RE = re.compile(r"[∫∬∮∑∏∐√∛∞±∓≤≥≠≈≡≅∝∂∇∈∉∋⊂⊆⊃⊇∪∩∅→←↔⇒⇐⇔↦∀∃∄×÷·∘⊥∥∠⊕⊗]")
GREEK_RE = re.compile(r"[Α-Ωα-ωϑϕϵ]")
# Superscripts, subscripts U+2080-U+209C (digits, signs, ₐ..ₜ) and the i/j/r/u/v subscripts
SCRIPTS_RE = re.compile(r"[⁰¹²³⁴-⁹⁺⁻⁼⁽⁾ⁿⁱ₀-₎ₐ-ₜᵢᵣᵤᵥⱼ](?![0-9A-Za-z])")
NUMERIC_ONLY_RE = re.compile(r"\s*[+-]?\d+(?:[.,]\d+)*\s*")

DEFAULT_FUNCTION_NAMES = (
    "sin", "cos", "tan", "cot", "sec", "csc",
    "arcsin", "arccos", "arctan", "sinh", "cosh", "tanh",
    "log", "ln", "exp", "lim", "max", "min", "sup", "inf",
    "det", "gcd", "deg", "dim", "ker", "arg",
)


def has_control_chars(content: str) -> bool:
    """LaTeX control characters: _ ^ { } \\"""
    return bool(CONTROL_CHARS_RE.search(content))


def has_command(content: str) -> bool:
    """A real backslash command token such as \\alpha or \\frac."""
    return bool(COMMAND_RE.search(content))


def has_math_symbols(content: str) -> bool:
    return bool(MATH_SYMBOLS_RE.search(content))


def has_greek(content: str) -> bool:
    return bool(GREEK_RE.search(content))


def has_unicode_scripts(content: str) -> bool:
    """Unicode superscript/subscript not glued to a following letter or digit (x², aₙ)."""
    return bool(SCRIPTS_RE.search(content))


def function_name_pattern(names: Sequence[str]) -> re.Pattern:
    """Whole-word pattern for a list of function names, longest first."""
    alternatives = "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))
    return re.compile(rf"(?<![A-Za-z])(?:{alternatives})(?![A-Za-z])")


def is_numeric(content: str) -> bool:
    """
    Check whether content is purely numeric, optionally whitespace-padded.

    Example:
        >>> is_numeric(" 42 ")
        True
        >>> is_numeric("3.14")
        True
        >>> is_numeric("x2")
        False
    """
    return bool(NUMERIC_ONLY_RE.fullmatch(content))


SIGNAL_RULES = (
    "control_chars",
    "command",
    "math_symbols",
    "greek",
    "function_names",
    "scripts",
)


class MathHeuristic:
    """
    Configurable is-likely-math predicate.

    Args:
        rules: Enabled signal names (subset of SIGNAL_RULES)
        function_names: Names recognised by the function_names signal

    Example:
        >>> heuristic = MathHeuristic()
        >>> heuristic("\\\\alpha + 1")
        True
        >>> heuristic("3")
        False
        >>> MathHeuristic(rules=["greek"])("x_1")
        False
    """

    def __init__(
        self,
        rules: Sequence[str] = SIGNAL_RULES,
        function_names: Sequence[str] = DEFAULT_FUNCTION_NAMES,
    ):
        unknown = [rule for rule in rules if rule not in SIGNAL_RULES]
        if unknown:
            raise ConfigError(
                f"Unknown heuristic rules: {unknown}. Available: {list(SIGNAL_RULES)}"
            )

        names_re = function_name_pattern(function_names) if function_names else None
        available: Dict[str, Callable[[str], bool]] = {
            "control_chars": has_control_chars,
            "command": has_command,
            "math_symbols": has_math_symbols,
            "greek": has_greek,
            "function_names": lambda content: bool(names_re and names_re.search(content)),
            "scripts": has_unicode_scripts,
        }
        self.rules = list(rules)
        self.function_names = list(function_names)
        self._checks = [(rule, available[rule]) for rule in self.rules]

    @classmethod
    def from_config(cls, heuristic_config) -> "MathHeuristic":
        """Build from a HeuristicConfig section."""
        return cls(
            rules=heuristic_config.rules or SIGNAL_RULES,
            function_names=heuristic_config.function_names or DEFAULT_FUNCTION_NAMES,
        )

    def signals(self, content: str) -> List[str]:
        """Names of every enabled signal that fires on content (ignores rejection)."""
        return [rule for rule, check in self._checks if check(content)]

    def is_likely_math(self, content: str) -> bool:
        if not content.strip() or is_numeric(content):
            return False
        return any(check(content) for _, check in self._checks)

    __call__ = is_likely_math


_DEFAULT_HEURISTIC = MathHeuristic()


def is_likely_math(content: str) -> bool:
    """
    Decide whether bare bracket/paren content should be treated as math.

    Uses every signal rule with the default function names.

    Args:
        content: Text between the bare brackets (delimiters excluded)

    Returns:
        True if the content looks mathematical

    Example:
        >>> is_likely_math("\\\\alpha")
        True
        >>> is_likely_math("3")
        False
        >>> is_likely_math("see above")
        False
    """
    return _DEFAULT_HEURISTIC.is_likely_math(content)
