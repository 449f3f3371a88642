"""Parsers for splitting and reading BibTeX text."""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .models import BibEntry

logger = logging.getLogger(__name__)


class BibTeXParser:
    """Tolerant parser for the common ``@type{key, field = value}`` shape.

    Only the subset needed for normalization is understood: no ``@string``
    macros, no concatenation, and brace groups nested at most one level deep
    inside a value. An ``@word`` token inside a field value starts a new
    fragment when splitting, which truncates the surrounding entry.
    """

    ENTRY_START = re.compile(r"(?=@\w+)")
    HEADER = re.compile(r"^@(\w+)\s*\{\s*([^,]+)\s*,", re.DOTALL)
    TRAILING_BRACE = re.compile(r"\}\s*$", re.DOTALL)
    FIELD = re.compile(
        r"(\w+)\s*=\s*(\{(?:[^{}]|\{[^{}]*\})*\}|\"[^\"]*\"|[^,]+)\s*,?",
        re.DOTALL,
    )

    def split_entries(self, text: str) -> List[str]:
        """Return entry fragments, each starting at an ``@keyword``."""
        fragments = [part.strip() for part in self.ENTRY_START.split(text)]
        return [part for part in fragments if part]

    def parse_entry(self, fragment: str) -> Optional[BibEntry]:
        """Parse a single fragment, returning ``None`` when the header is missing."""
        header = self.HEADER.match(fragment.strip())
        if not header:
            return None

        key = header.group(2).strip()
        if not key:
            return None

        body = fragment.strip()[header.end():]
        body = self.TRAILING_BRACE.sub("", body, count=1).strip()

        entry = BibEntry(entry_type=header.group(1).lower(), key=key)
        for match in self.FIELD.finditer(body):
            entry.set(match.group(1), self._unwrap(match.group(2)))
        return entry

    def parse(self, text: str) -> Tuple[List[BibEntry], int]:
        """Parse every fragment in ``text``; return (entries, dropped count)."""
        entries: List[BibEntry] = []
        dropped = 0
        for fragment in self.split_entries(text):
            entry = self.parse_entry(fragment)
            if entry is None:
                dropped += 1
                logger.warning("Skipping unparseable fragment: %.60s", fragment)
                continue
            entries.append(entry)
        return entries, dropped

    def load_text(self, file_path: str | Path) -> str:
        """Read a ``.bib`` file as UTF-8 text."""
        return Path(file_path).read_text(encoding="utf-8", errors="replace")

    @staticmethod
    def _unwrap(value: str) -> str:
        value = value.strip()
        if value.startswith("{") and value.endswith("}"):
            value = value[1:-1].strip()
        if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
            value = value[1:-1].strip()
        return value
