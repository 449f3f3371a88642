"""Subscript markup for chemical formulas in titles."""
from __future__ import annotations

import re

SUBSCRIPT_MARKER = "$_"
MATH_MARKER = "$"

# Two or more element groups, e.g. Bi2Te3, MoS2, CH3NH3PbI3.
_FORMULA = re.compile(r"\b(?:[A-Z][a-z]?\d*){2,}\b")
_ELEMENT_COUNT = re.compile(r"([A-Z][a-z]?)(\d+)")


def _markup(match: re.Match[str]) -> str:
    token = match.group(0)
    if not any(char.isdigit() for char in token):
        return token
    return "{" + _ELEMENT_COUNT.sub(r"\1$_\2$", token) + "}"


def latexify_materials(title: str) -> str:
    """Wrap formula-like tokens in braces with ``$_n$`` subscripts.

    A heuristic rather than a chemistry parser: acronyms followed by digits are
    marked up too, and digit-free formulas such as NaCl are left alone. Titles
    already carrying math markup are returned untouched.
    """
    if not title:
        return title
    if SUBSCRIPT_MARKER in title or MATH_MARKER in title:
        return title
    return _FORMULA.sub(_markup, title)
