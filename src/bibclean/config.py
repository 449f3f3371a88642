"""Runtime settings read from the environment (and an optional ``.env`` file)."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_CROSSREF_URL = "https://api.crossref.org"
DOI_SOURCES = ("metadata", "bibtex")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _float_env(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    crossref_url: str = DEFAULT_CROSSREF_URL
    mailto: str = ""
    timeout: float = 6.0
    max_retries: int = 3
    doi_source: str = "metadata"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        source = os.getenv("BIBCLEAN_DOI_SOURCE", "metadata").strip().lower()
        if source not in DOI_SOURCES:
            source = "metadata"
        level = os.getenv("BIBCLEAN_LOG_LEVEL", "WARNING").strip().upper()
        if level not in LOG_LEVELS:
            level = "WARNING"
        return cls(
            crossref_url=os.getenv("BIBCLEAN_CROSSREF_URL", DEFAULT_CROSSREF_URL).rstrip("/"),
            mailto=os.getenv("BIBCLEAN_MAILTO", "").strip(),
            timeout=_float_env("BIBCLEAN_TIMEOUT", 6.0),
            max_retries=max(_int_env("BIBCLEAN_MAX_RETRIES", 3), 1),
            doi_source=source,
            log_level=level,
        )

    @property
    def user_agent(self) -> str:
        agent = "bibclean/0.1"
        if self.mailto:
            agent = f"{agent} (mailto:{self.mailto})"
        return agent
