"""BibTeX normalization and DOI conversion toolkit."""

from .app import BibCleanApp, EmptyInputError
from .crossref import CrossrefClient, CrossrefLookupError
from .formatter import EntryFormatter
from .materials import latexify_materials
from .metadata import entry_from_metadata
from .models import BibEntry, ConversionFailure, ConversionResult, FormatOptions, FormatResult
from .normalization import doi_url, extract_doi, normalize_authors
from .parsers import BibTeXParser

__all__ = [
    "BibCleanApp",
    "EmptyInputError",
    "CrossrefClient",
    "CrossrefLookupError",
    "EntryFormatter",
    "latexify_materials",
    "entry_from_metadata",
    "BibEntry",
    "ConversionFailure",
    "ConversionResult",
    "FormatOptions",
    "FormatResult",
    "doi_url",
    "extract_doi",
    "normalize_authors",
    "BibTeXParser",
]
