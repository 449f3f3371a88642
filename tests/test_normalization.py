import pytest

from bibclean.normalization import (
    clean_doi,
    doi_url,
    extract_doi,
    initials,
    is_corporate,
    name_tokens,
    normalize_author,
    normalize_authors,
    split_authors,
)


@pytest.mark.parametrize(
    "raw",
    ["Einstein, Albert", "Albert Einstein", "A. Einstein", "Einstein, A.", "A Einstein"],
)
def test_comma_and_space_forms_agree(raw):
    assert normalize_authors(raw) == "A Einstein"


def test_middle_names_become_initials():
    assert normalize_author("Doe, Jane Quinn") == "J Q Doe"
    assert normalize_author("jane q. doe") == "J Q doe"
    assert normalize_author("Smith, John, Jr.") == "J J Smith"


def test_family_periods_are_stripped_in_comma_form():
    assert normalize_author("St. John, Mary") == "M St John"


def test_corporate_author_passes_through():
    assert normalize_authors("{{ATLAS Collaboration}}") == "{{ATLAS Collaboration}}"
    assert normalize_authors("{ATLAS Collaboration} and Peter W. Higgs") == (
        "{ATLAS Collaboration} and P W Higgs"
    )


def test_corporate_name_containing_and_is_not_split():
    assert split_authors("{Bill and Melinda Gates Foundation} and Doe, J") == [
        "{Bill and Melinda Gates Foundation}",
        "Doe, J",
    ]


def test_is_corporate_requires_single_outer_pair():
    assert is_corporate("{ATLAS}")
    assert not is_corporate("{A} {B}")
    assert not is_corporate("ATLAS")


def test_single_token_name_is_unchanged():
    assert normalize_authors("Plato") == "Plato"


def test_separator_is_case_insensitive_and_order_preserved():
    value = "Doe, Jane AND Richard Roe and  Alexander Anderson"

    assert normalize_authors(value) == "J Doe and R Roe and A Anderson"


def test_normalization_is_idempotent():
    once = normalize_authors("Einstein, Albert and Marcel Grossmann and {CERN}")

    assert normalize_authors(once) == once


def test_strip_periods_applies_to_the_whole_result():
    assert normalize_authors("Dr. Who and Doe, J.", strip_periods=True) == "D Who and J Doe"
    assert normalize_authors("{Acme Inc.}", strip_periods=True) == "{Acme Inc}"
    assert normalize_authors("{Acme Inc.}") == "{Acme Inc.}"


@pytest.mark.parametrize("raw", ["", "   ", "\n"])
def test_empty_author_list(raw):
    assert normalize_authors(raw) == ""


def test_extract_doi_from_url():
    url = "https://doi.org/10.1038/s41586-020-1234-5"

    assert extract_doi(url) == "10.1038/s41586-020-1234-5"
    assert extract_doi("https://example.org/paper") == ""
    assert extract_doi(None) == ""


def test_doi_url_and_cleaning():
    assert doi_url("10.1/x") == "https://doi.org/10.1/x"
    assert clean_doi("  https://dx.doi.org/10.1000/ABC ") == "10.1000/ABC"
    assert clean_doi("doi: 10.1000/xyz") == "10.1000/xyz"


@pytest.mark.parametrize("raw", [r"{\'E}mile Zola", r"Zola, {\'E}mile"])
def test_accented_initial_keeps_its_brace_group(raw):
    once = normalize_authors(raw)

    assert once == r"{\'E} Zola"
    assert once.count("{") == once.count("}")
    assert normalize_authors(once) == once


def test_name_tokens_ignore_separators_inside_braces():
    assert name_tokens(r"{\'E}mile J.R. Zola") == [r"{\'E}mile", "J", "R", "Zola"]
    assert name_tokens("{Jean Paul} Sartre") == ["{Jean Paul}", "Sartre"]


def test_initials_of_braced_tokens():
    assert initials(r"{\'E}mile {\"O}dön") == r"{\'E} {\"O}"
    assert initials("{emile") == "E"


def test_comma_form_particles_collapse_on_second_pass():
    once = normalize_authors("van der Waals, Johannes")
    twice = normalize_authors(once)

    assert once == "J van der Waals"
    assert twice == "J V D Waals"
    assert normalize_authors(twice) == twice
