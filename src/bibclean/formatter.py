"""Canonical formatting for BibTeX entries."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .materials import latexify_materials
from .models import BibEntry, FormatOptions
from .normalization import doi_url, extract_doi, normalize_authors


class EntryFormatter:
    """Normalize entries and render them in a fixed field order.

    Normalization mutates the entry's fields in place; serialization is a pure
    function of the entry, so formatting an already formatted entry again gives
    the same text.
    """

    PREFERRED_FIELDS = (
        "author",
        "title",
        "journal",
        "booktitle",
        "year",
        "volume",
        "number",
        "pages",
        "doi",
        "url",
    )

    def format(self, entry: BibEntry, options: Optional[FormatOptions] = None) -> str:
        self.normalize(entry, options)
        return self.serialize(entry)

    def format_many(
        self, entries: Iterable[BibEntry], options: Optional[FormatOptions] = None
    ) -> str:
        blocks = [self.format(entry, options) for entry in entries]
        return "\n\n".join(blocks)

    def normalize(self, entry: BibEntry, options: Optional[FormatOptions] = None) -> BibEntry:
        options = options or FormatOptions()

        if entry.get("author"):
            entry.set("author", normalize_authors(entry.get("author"), options.strip_periods))

        if entry.get("title"):
            entry.set("title", latexify_materials(entry.get("title")))

        if options.extract_doi_from_url and not entry.get("doi") and entry.get("url"):
            doi = extract_doi(entry.get("url"))
            if doi:
                entry.set("doi", doi)

        if options.enforce_doi_url and entry.get("doi"):
            doi = entry.get("doi").strip()
            entry.set("doi", doi)
            entry.set("url", doi_url(doi))

        return entry

    def serialize(self, entry: BibEntry) -> str:
        lines = [f"  {name} = {{{entry.fields[name]}}}" for name in self._ordered_fields(entry)]
        body = ",\n".join(lines)
        if body:
            return f"@{entry.entry_type}{{{entry.key},\n{body}\n}}"
        return f"@{entry.entry_type}{{{entry.key},\n}}"

    def _ordered_fields(self, entry: BibEntry) -> List[str]:
        present = [name for name, value in entry.fields.items() if value]
        ordered = [name for name in self.PREFERRED_FIELDS if name in present]
        extra = sorted(name for name in present if name not in self.PREFERRED_FIELDS)
        return ordered + extra
