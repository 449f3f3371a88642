"""Data models for BibTeX normalization workflows."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class BibEntry:
    """Represents one parsed BibTeX entry."""

    entry_type: str
    key: str
    fields: Dict[str, str] = field(default_factory=dict)

    def get(self, name: str) -> str:
        """Return a field value, or an empty string when absent."""
        return self.fields.get(name.lower(), "")

    def set(self, name: str, value: str) -> None:
        self.fields[name.lower()] = value


@dataclass(frozen=True)
class FormatOptions:
    """Switches recognized by the normalization passes."""

    strip_periods: bool = False
    extract_doi_from_url: bool = True
    enforce_doi_url: bool = True


@dataclass
class FormatResult:
    """Outcome of formatting a block of BibTeX text."""

    text: str
    entries: List[BibEntry] = field(default_factory=list)
    dropped: int = 0


@dataclass
class ConversionFailure:
    """A DOI that could not be turned into an entry."""

    identifier: str
    reason: str


@dataclass
class ConversionResult:
    """Outcome of converting a list of DOIs."""

    text: str
    ok: int = 0
    failed: int = 0
    failures: List[ConversionFailure] = field(default_factory=list)
