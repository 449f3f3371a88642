"""Crossref lookups for DOI to BibTeX conversion."""
from __future__ import annotations

import json
import logging
import time
import urllib.parse
from typing import Any, Callable, Dict, Optional

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

BIBTEX_MEDIA_TYPE = "application/x-bibtex"
_RETRY_STATUSES = {429, 500, 502, 503, 504}


class CrossrefLookupError(RuntimeError):
    """Raised when a DOI cannot be resolved to usable metadata."""

    def __init__(self, identifier: str, reason: str):
        super().__init__(f"{identifier}: {reason}")
        self.identifier = identifier
        self.reason = reason


class CrossrefClient:
    """Minimal client for the Crossref REST API.

    ``fetcher`` receives ``(url, timeout)`` and returns the response body; it
    may raise :class:`CrossrefLookupError` or ``httpx`` errors, which are
    reported against the DOI being looked up.
    """

    def __init__(
        self,
        fetcher: Optional[Callable[[str, float], str]] = None,
        settings: Optional[Settings] = None,
        backoff_factor: float = 0.5,
    ):
        self.settings = settings or Settings()
        self.timeout = self.settings.timeout
        self.max_retries = self.settings.max_retries
        self.backoff_factor = backoff_factor
        self.fetcher = fetcher or self._http_get
        self._client: Optional[httpx.Client] = None

    def fetch_work(self, doi: str) -> Dict[str, Any]:
        """Return the ``message`` object of ``/works/<doi>``."""
        payload = self._fetch(doi, self._work_url(doi))
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise CrossrefLookupError(doi, "Malformed JSON response.") from exc

        message = data.get("message") if isinstance(data, dict) else None
        if not isinstance(message, dict):
            raise CrossrefLookupError(doi, "Response has no work record.")
        return message

    def fetch_bibtex(self, doi: str) -> str:
        """Return Crossref's own BibTeX rendering of ``doi``."""
        payload = self._fetch(doi, f"{self._work_url(doi)}/transform/{BIBTEX_MEDIA_TYPE}")
        if not payload.strip():
            raise CrossrefLookupError(doi, "Empty response.")
        return payload

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _work_url(self, doi: str) -> str:
        return f"{self.settings.crossref_url}/works/{urllib.parse.quote(doi)}"

    def _fetch(self, doi: str, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            return self.fetcher(url, self.timeout)
        except CrossrefLookupError as exc:
            if exc.identifier == doi:
                raise
            raise CrossrefLookupError(doi, exc.reason) from exc
        except httpx.HTTPStatusError as exc:
            raise CrossrefLookupError(doi, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise CrossrefLookupError(doi, str(exc) or exc.__class__.__name__) from exc

    def _headers(self) -> Dict[str, str]:
        return {"User-Agent": self.settings.user_agent}

    def _http_get(self, url: str, timeout: float) -> str:
        if self._client is None:
            self._client = httpx.Client(
                timeout=timeout, headers=self._headers(), follow_redirects=True
            )
        last_error: Exception = httpx.RequestError(f"No request made to {url}")
        for attempt in range(1, max(self.max_retries, 1) + 1):
            try:
                response = self._client.get(url)
                response.raise_for_status()
                return response.text
            except httpx.RequestError as exc:
                last_error = exc
            except httpx.HTTPStatusError as exc:
                last_error = exc
                if exc.response.status_code not in _RETRY_STATUSES:
                    break
            if attempt < self.max_retries:
                sleep_time = self.backoff_factor * (2 ** (attempt - 1))
                logger.info("Retrying %s in %.1fs (%s)", url, sleep_time, last_error)
                time.sleep(sleep_time)
        raise last_error


__all__ = ["CrossrefClient", "CrossrefLookupError"]
