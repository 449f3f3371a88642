"""Status reporting utilities."""
from __future__ import annotations

from .models import ConversionResult, FormatResult

NO_ENTRIES = "Could not detect BibTeX entries."


def render_format_status(result: FormatResult) -> str:
    """Return a one-line summary of a formatting pass."""

    count = len(result.entries)
    if not count:
        return NO_ENTRIES
    noun = "entry" if count == 1 else "entries"
    line = f"Formatted {count} {noun}."
    if result.dropped:
        line += f" Skipped {result.dropped} unparseable fragment(s)."
    return line


def render_conversion_status(result: ConversionResult) -> str:
    return f"Converted {result.ok} DOI(s). Failed: {result.failed}."
