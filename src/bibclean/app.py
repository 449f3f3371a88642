"""High-level orchestrator for BibTeX formatting and DOI conversion."""
from __future__ import annotations

import logging
from typing import List, Optional

from .config import DOI_SOURCES, Settings
from .crossref import CrossrefClient, CrossrefLookupError
from .formatter import EntryFormatter
from .metadata import entry_from_metadata
from .models import (
    BibEntry,
    ConversionFailure,
    ConversionResult,
    FormatOptions,
    FormatResult,
)
from .normalization import clean_doi
from .parsers import BibTeXParser

logger = logging.getLogger(__name__)


class EmptyInputError(ValueError):
    """Raised before any work when there is nothing to process."""


class BibCleanApp:
    """Coordinates parsing, normalization, and Crossref conversion."""

    def __init__(
        self,
        client: CrossrefClient | None = None,
        options: FormatOptions | None = None,
        settings: Settings | None = None,
        doi_source: str | None = None,
    ):
        self.settings = settings or Settings()
        self.parser = BibTeXParser()
        self.formatter = EntryFormatter()
        self.client = client or CrossrefClient(settings=self.settings)
        self.options = options or FormatOptions()
        source = (doi_source or self.settings.doi_source).lower()
        if source not in DOI_SOURCES:
            raise ValueError(f"Unknown DOI source: {source}")
        self.doi_source = source

    def format_bibtex(self, text: str, options: Optional[FormatOptions] = None) -> FormatResult:
        """Normalize every entry found in ``text``."""
        if not text or not text.strip():
            raise EmptyInputError("Paste a .bib first.")

        options = options or self.options
        entries, dropped = self.parser.parse(text)
        if not entries:
            return FormatResult(text="", entries=[], dropped=dropped)

        output = self.formatter.format_many(entries, options)
        logger.info("Formatted %d entries (%d dropped)", len(entries), dropped)
        return FormatResult(text=output + "\n", entries=entries, dropped=dropped)

    @staticmethod
    def parse_identifiers(text: str) -> List[str]:
        """Return one cleaned DOI per non-blank line."""
        identifiers = [clean_doi(line) for line in (text or "").splitlines()]
        return [doi for doi in identifiers if doi]

    def convert_dois(self, text: str, options: Optional[FormatOptions] = None) -> ConversionResult:
        """Look up each DOI in order and format the results.

        A failed lookup is written inline as a ``%`` comment and does not stop
        the remaining DOIs from being processed.
        """
        identifiers = self.parse_identifiers(text)
        if not identifiers:
            raise EmptyInputError("Paste at least one DOI.")

        options = options or self.options
        blocks: List[str] = []
        result = ConversionResult(text="")
        for doi in identifiers:
            try:
                entry = self.lookup_entry(doi)
            except CrossrefLookupError as exc:
                logger.warning("Failed DOI %s: %s", doi, exc.reason)
                blocks.append(f"% Failed DOI: {doi} ({exc.reason})")
                result.failures.append(ConversionFailure(identifier=doi, reason=exc.reason))
                result.failed += 1
                continue
            blocks.append(self.formatter.format(entry, options))
            result.ok += 1

        result.text = "\n\n".join(blocks) + "\n"
        return result

    def lookup_entry(self, doi: str) -> BibEntry:
        """Fetch ``doi`` from Crossref and return it as an unformatted entry."""
        if self.doi_source == "bibtex":
            entry = self.parser.parse_entry(self.client.fetch_bibtex(doi))
            if entry is None:
                raise CrossrefLookupError(doi, "Received unparseable BibTeX.")
            if not entry.get("doi"):
                entry.set("doi", doi)
            return entry
        record = self.client.fetch_work(doi)
        try:
            return entry_from_metadata(record)
        except (TypeError, ValueError, KeyError, AttributeError) as exc:
            raise CrossrefLookupError(doi, "Malformed work record.") from exc
