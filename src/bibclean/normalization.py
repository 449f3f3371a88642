"""Normalization helpers for author lists and DOIs."""
from __future__ import annotations

import re
from typing import List

DOI_RESOLVER = "https://doi.org/"

_DOI_PATTERN = re.compile(r"10\.\d{4,9}/[-._;()/:A-Z0-9]+", re.IGNORECASE)
_DOI_PREFIX = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)
_AND = re.compile(r"\s+and\s+", re.IGNORECASE)


def split_authors(value: str) -> List[str]:
    """Split an author field on ``and`` outside of brace groups."""
    names: List[str] = []
    depth = 0
    start = 0
    pos = 0
    while pos < len(value):
        char = value[pos]
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif depth == 0 and char.isspace():
            match = _AND.match(value, pos)
            if match:
                names.append(value[start:pos])
                start = pos = match.end()
                continue
        pos += 1
    names.append(value[start:])
    return [name.strip() for name in names if name.strip()]


def is_corporate(name: str) -> bool:
    """True when ``name`` is wrapped in a single top-level brace pair."""
    if not (name.startswith("{") and name.endswith("}")):
        return False
    depth = 0
    for idx, char in enumerate(name):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0 and idx != len(name) - 1:
                return False
    return depth == 0


def name_tokens(text: str) -> List[str]:
    """Split on whitespace and periods that sit outside brace groups."""
    tokens: List[str] = []
    current: List[str] = []
    depth = 0
    for char in text:
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif depth == 0 and (char.isspace() or char == "."):
            if current:
                tokens.append("".join(current))
                current = []
            continue
        current.append(char)
    if current:
        tokens.append("".join(current))
    return tokens


def _initial(token: str) -> str:
    # {\'E}mile keeps its whole accent group so braces stay balanced.
    if token.startswith("{"):
        depth = 0
        for idx, char in enumerate(token):
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return token[: idx + 1]
        letters = [char for char in token if char.isalnum()]
        return letters[0].upper() if letters else ""
    return token[0].upper()


def initials(given: str) -> str:
    return " ".join(filter(None, (_initial(token) for token in name_tokens(given))))


def normalize_author(name: str) -> str:
    """Rewrite one name as ``"<Initial> ... <Family>"``.

    Corporate names in braces come back verbatim. ``Family, Given`` and
    ``Given Family`` forms both reduce the given part to initials; a single
    token is treated as a family-only name.
    """
    name = " ".join(name.split())
    if not name:
        return ""
    if is_corporate(name):
        return name

    if "," in name:
        family_raw, given_raw = name.split(",", 1)
        family = " ".join(name_tokens(family_raw))
        given = given_raw.replace(",", " ")
        result = f"{initials(given)} {family}".strip()
    else:
        parts = name_tokens(name)
        if len(parts) == 1:
            result = parts[0]
        else:
            result = f"{initials(' '.join(parts[:-1]))} {parts[-1]}"

    return " ".join(result.split())


def normalize_authors(value: str, strip_periods: bool = False) -> str:
    """Normalize every name in a BibTeX author list, keeping order."""
    if not value or not value.strip():
        return ""
    names = [normalize_author(name) for name in split_authors(value)]
    result = " and ".join(name for name in names if name)
    if strip_periods:
        result = result.replace(".", "")
    return result


def clean_doi(value: str) -> str:
    """Strip resolver prefixes and ``doi:`` labels from a user supplied DOI."""
    doi = value.strip()
    doi = _DOI_PREFIX.sub("", doi)
    return doi.strip()


def extract_doi(text: str | None) -> str:
    """Return the first DOI-shaped substring of ``text`` or an empty string."""
    if not text:
        return ""
    match = _DOI_PATTERN.search(text.strip())
    return match.group(0) if match else ""


def doi_url(doi: str) -> str:
    return f"{DOI_RESOLVER}{doi.strip()}"
