"""Turn Crossref ``works`` records into BibTeX entries."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional

from .models import BibEntry
from .normalization import doi_url

ENTRY_TYPE = "article"

_WORD = re.compile(r"[A-Za-z0-9]+")
_DATE_KEYS = ("issued", "published-print", "published-online", "created")


def _first_value(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else ""
    if value is None:
        return ""
    return str(value).strip()


def _year(record: Mapping[str, Any]) -> str:
    for key in _DATE_KEYS:
        issued = record.get(key)
        if issued is None:
            continue
        if not isinstance(issued, dict):
            raise ValueError(f"{key} is not an object")
        parts = issued.get("date-parts")
        if parts is None:
            continue
        if not isinstance(parts, list) or not all(isinstance(part, list) for part in parts):
            raise ValueError(f"{key}.date-parts is not a list of lists")
        if parts and parts[0] and parts[0][0] is not None:
            return str(parts[0][0])
    return ""


def _authors(record: Mapping[str, Any]) -> List[Dict[str, str]]:
    listed = record.get("author")
    if listed is None:
        return []
    if not isinstance(listed, list) or not all(isinstance(author, dict) for author in listed):
        raise ValueError("author is not a list of objects")
    return [
        {
            "given": _first_value(author.get("given")),
            "family": _first_value(author.get("family")),
            "name": _first_value(author.get("name")),
        }
        for author in listed
    ]


def _author_field(authors: List[Dict[str, str]]) -> str:
    names = []
    for author in authors:
        if author["family"]:
            names.append(f"{author['given']} {author['family']}".strip())
        elif author["name"]:
            # Organisations have no given/family split.
            names.append(f"{{{author['name']}}}")
    return " and ".join(names)


def citation_key(family: str, year: str, title: str, doi: str = "") -> str:
    """Build ``<family><year><first title word>``, never returning an empty key."""
    word = _WORD.search(title or "")
    key = "".join(family.split()) + year + (word.group(0) if word else "")
    if key:
        return key
    fallback = "".join(_WORD.findall(doi or ""))
    return fallback or "untitled"


def entry_from_metadata(record: Mapping[str, Any], entry_type: Optional[str] = None) -> BibEntry:
    """Convert one Crossref message into a :class:`BibEntry`.

    Every known field is populated, with an empty string standing in for
    anything the record lacks. Dates or authors of the wrong shape raise
    ``ValueError``. Author names are rebuilt as ``Given Family`` and
    left for the formatter to reduce to initials.
    """
    authors = _authors(record)
    title = _first_value(record.get("title"))
    year = _year(record)
    doi = _first_value(record.get("DOI"))
    first_family = authors[0]["family"] if authors else ""

    fields = {
        "author": _author_field(authors),
        "title": title,
        "journal": _first_value(record.get("container-title")),
        "year": year,
        "volume": _first_value(record.get("volume")),
        "number": _first_value(record.get("issue")),
        "pages": _first_value(record.get("page")),
        "doi": doi,
        "url": doi_url(doi) if doi else _first_value(record.get("URL")),
    }
    return BibEntry(
        entry_type=entry_type or ENTRY_TYPE,
        key=citation_key(first_family, year, title, doi),
        fields=fields,
    )


__all__ = ["citation_key", "entry_from_metadata"]
