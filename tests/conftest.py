import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

import pytest

from bibclean.crossref import CrossrefClient, CrossrefLookupError


SAMPLE_BIB = """
@Article{Einstein1905,
  Author = {Einstein, Albert and Marcel Grossmann},
  Title = {Bi2Te3 nanosheets},
  journal = "Annalen der Physik",
  year = 1905,
  url = {https://doi.org/10.1002/andp.19053221004},
  note = {Reprinted},
}

@inproceedings{atlas2012,
  author = {{ATLAS Collaboration}},
  title = {Observation of a new particle},
  booktitle = {Proceedings},
  year = {2012}
}
"""


WORKS = {
    "10.5555/example": {
        "title": ["Trusted Article Title"],
        "author": [
            {"given": "Jane Q.", "family": "Doe"},
            {"given": "John", "family": "Smith"},
        ],
        "container-title": ["Journal of Trust"],
        "issued": {"date-parts": [[2022, 3]]},
        "volume": "4",
        "issue": "2",
        "page": "101-110",
        "DOI": "10.5555/example",
        "URL": "http://dx.doi.org/10.5555/example",
        "type": "journal-article",
    }
}


def fake_fetcher(url: str, _timeout: float) -> str:
    """Serve canned Crossref responses; unknown DOIs behave like a 404."""

    for doi, message in WORKS.items():
        if url.endswith(f"/works/{doi}"):
            return json.dumps({"status": "ok", "message": message})
    raise CrossrefLookupError(url, "HTTP 404")


@pytest.fixture()
def sample_bib() -> str:
    return SAMPLE_BIB


@pytest.fixture()
def fake_client() -> CrossrefClient:
    return CrossrefClient(fetcher=fake_fetcher)
