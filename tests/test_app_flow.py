import json

import pytest

from bibclean.app import BibCleanApp, EmptyInputError
from bibclean.crossref import CrossrefClient, CrossrefLookupError
from bibclean.models import FormatOptions
from bibclean.report import render_conversion_status, render_format_status


def test_format_bibtex_formats_every_entry(sample_bib):
    app = BibCleanApp(client=CrossrefClient(fetcher=lambda *_: ""))

    result = app.format_bibtex(sample_bib)

    assert len(result.entries) == 2
    assert result.dropped == 0
    assert result.text.startswith("@article{Einstein1905,\n  author = {A Einstein and M Grossmann},")
    assert result.text.endswith("}\n")
    assert render_format_status(result) == "Formatted 2 entries."


def test_format_bibtex_reports_dropped_fragments(sample_bib):
    result = BibCleanApp().format_bibtex("stray text " + sample_bib)

    assert result.dropped == 1
    assert render_format_status(result) == "Formatted 2 entries. Skipped 1 unparseable fragment(s)."


def test_format_bibtex_without_entries():
    result = BibCleanApp().format_bibtex("no entries here")

    assert result.entries == []
    assert result.text == ""
    assert render_format_status(result) == "Could not detect BibTeX entries."


def test_empty_input_is_rejected_before_parsing():
    with pytest.raises(EmptyInputError, match="Paste a .bib first."):
        BibCleanApp().format_bibtex("  \n ")


def test_options_snapshot_is_passed_per_call(sample_bib):
    app = BibCleanApp(options=FormatOptions(enforce_doi_url=True))

    result = app.format_bibtex(sample_bib, FormatOptions(extract_doi_from_url=False, enforce_doi_url=False))

    assert "doi = " not in result.text


def test_parse_identifiers_trims_and_cleans():
    text = "  10.1/a \n\nhttps://doi.org/10.1/b\r\n   \ndoi:10.1/c"

    assert BibCleanApp.parse_identifiers(text) == ["10.1/a", "10.1/b", "10.1/c"]


def test_convert_dois_keeps_order_and_isolates_failures(fake_client):
    app = BibCleanApp(client=fake_client)

    result = app.convert_dois("10.5555/example\n10.9999/missing\n")

    assert (result.ok, result.failed) == (1, 1)
    first, second = result.text.split("\n\n")
    assert first.startswith("@article{Doe2022Trusted,\n  author = {J Q Doe and J Smith},")
    assert "  journal = {Journal of Trust}," in first
    assert "  number = {2}," in first
    assert "  url = {https://doi.org/10.5555/example}" in first
    assert second == "% Failed DOI: 10.9999/missing (HTTP 404)\n"
    assert result.failures[0].identifier == "10.9999/missing"
    assert render_conversion_status(result) == "Converted 1 DOI(s). Failed: 1."


def test_failures_do_not_stop_later_dois(fake_client):
    result = BibCleanApp(client=fake_client).convert_dois("10.9999/missing\n10.5555/example")

    assert result.text.startswith("% Failed DOI: 10.9999/missing (HTTP 404)\n\n@article{")
    assert (result.ok, result.failed) == (1, 1)


def test_convert_dois_requires_identifiers():
    calls = []
    client = CrossrefClient(fetcher=lambda url, _timeout: calls.append(url) or "")

    with pytest.raises(EmptyInputError, match="Paste at least one DOI."):
        BibCleanApp(client=client).convert_dois("\n   \n")
    assert calls == []


def test_bibtex_source_parses_crossref_bibtex_and_fills_doi():
    bib = " @article{Doe_2022, title={Trusted Article}, author={Doe, Jane}, year=2022}"
    client = CrossrefClient(fetcher=lambda _url, _timeout: bib)
    app = BibCleanApp(client=client, doi_source="bibtex")

    result = app.convert_dois("10.5555/example")

    assert result.ok == 1
    assert result.text == (
        "@article{Doe_2022,\n"
        "  author = {J Doe},\n"
        "  title = {Trusted Article},\n"
        "  year = {2022},\n"
        "  doi = {10.5555/example},\n"
        "  url = {https://doi.org/10.5555/example}\n"
        "}\n"
    )


def test_bibtex_source_rejects_unparseable_text():
    client = CrossrefClient(fetcher=lambda _url, _timeout: "Resource not found.")
    app = BibCleanApp(client=client, doi_source="bibtex")

    result = app.convert_dois("10.1/x")

    assert result.failed == 1
    assert result.text == "% Failed DOI: 10.1/x (Received unparseable BibTeX.)\n"


def test_unknown_doi_source_is_rejected():
    with pytest.raises(ValueError):
        BibCleanApp(doi_source="pubmed")


def test_lookup_entry_surfaces_lookup_errors(fake_client):
    with pytest.raises(CrossrefLookupError):
        BibCleanApp(client=fake_client).lookup_entry("10.9999/missing")


@pytest.mark.parametrize(
    "malformed",
    [
        {"issued": {"date-parts": [2020]}},
        {"author": 5},
        {"author": [{"family": "Doe"}], "published-print": {"date-parts": "2020"}},
    ],
)
def test_malformed_work_record_fails_only_that_doi(malformed):
    good = {"DOI": "10.1/good", "title": ["Good Paper"], "author": [{"given": "Jane", "family": "Doe"}]}
    records = {"10.1/bad": malformed, "10.1/good": good}

    def fetcher(url: str, _timeout: float) -> str:
        doi = url.split("/works/", 1)[1]
        return json.dumps({"message": records[doi]})

    result = BibCleanApp(client=CrossrefClient(fetcher=fetcher)).convert_dois("10.1/bad\n10.1/good")

    assert (result.ok, result.failed) == (1, 1)
    assert "@article{DoeGood," in result.text


def test_adapter_errors_become_lookup_errors(monkeypatch, fake_client):
    def explode(_record):
        raise KeyError("DOI")

    monkeypatch.setattr("bibclean.app.entry_from_metadata", explode)

    result = BibCleanApp(client=fake_client).convert_dois("10.5555/example")

    assert result.failed == 1
    assert result.text == "% Failed DOI: 10.5555/example (Malformed work record.)\n"
