from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import pandas as pd
import streamlit as st

ROOT = Path(__file__).resolve().parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from bibclean.app import BibCleanApp, EmptyInputError  # noqa: E402
from bibclean.config import Settings  # noqa: E402
from bibclean.models import BibEntry, FormatOptions  # noqa: E402
from bibclean.report import render_conversion_status, render_format_status  # noqa: E402

PREVIEW_FIELDS = ["author", "title", "journal", "year", "doi"]


def _preview_rows(entries: List[BibEntry]) -> List[Dict[str, str]]:
    rows = []
    for entry in entries:
        row = {"Key": entry.key, "Type": entry.entry_type}
        row.update({name.title(): entry.get(name) for name in PREVIEW_FIELDS})
        rows.append(row)
    return rows


def _sidebar_options() -> FormatOptions:
    st.sidebar.header("Options")
    strip_periods = st.sidebar.checkbox("Remove periods from author names", value=False)
    extract_doi = st.sidebar.checkbox("Extract DOI from url when missing", value=True)
    enforce_doi_url = st.sidebar.checkbox("Rewrite url as https://doi.org/<doi>", value=True)
    return FormatOptions(
        strip_periods=strip_periods,
        extract_doi_from_url=extract_doi,
        enforce_doi_url=enforce_doi_url,
    )


def _download(content: str, key: str) -> None:
    st.download_button(
        "Download bibclean.bib",
        data=content.encode("utf-8"),
        file_name="bibclean.bib",
        mime="application/x-bibtex",
        key=key,
    )


def _bibtex_tab(checker: BibCleanApp, options: FormatOptions) -> None:
    upload = st.file_uploader("Upload .bib", type=["bib", "txt"])
    initial = upload.getvalue().decode("utf-8", errors="replace") if upload else ""
    text = st.text_area("BibTeX entries", value=initial, height=260)

    if st.button("Format BibTeX"):
        try:
            result = checker.format_bibtex(text, options)
        except EmptyInputError as exc:
            st.warning(str(exc))
            return
        status = render_format_status(result)
        if not result.entries:
            st.info(status)
            return
        st.success(status)
        st.code(result.text, language="latex")
        st.dataframe(pd.DataFrame(_preview_rows(result.entries)), use_container_width=True, hide_index=True)
        _download(result.text, "bib-download")


def _doi_tab(checker: BibCleanApp, options: FormatOptions) -> None:
    text = st.text_area("DOIs, one per line", height=160, placeholder="10.1038/s41586-020-1234-5")

    if st.button("Convert DOIs"):
        try:
            with st.spinner("Querying Crossref..."):
                result = checker.convert_dois(text, options)
        except EmptyInputError as exc:
            st.warning(str(exc))
            return
        status = render_conversion_status(result)
        if result.failed:
            st.warning(status)
        else:
            st.success(status)
        st.code(result.text, language="latex")
        if result.ok:
            _download(result.text, "doi-download")


def main() -> None:
    st.set_page_config(page_title="bibclean", layout="wide")
    st.title("bibclean")
    st.caption("Normalize BibTeX authors, chemical formulas and DOI links, or convert DOIs to BibTeX.")

    options = _sidebar_options()
    checker = BibCleanApp(settings=Settings.from_env())

    bib_tab, doi_tab = st.tabs(["Fix BibTeX", "DOI to BibTeX"])
    with bib_tab:
        _bibtex_tab(checker, options)
    with doi_tab:
        _doi_tab(checker, options)


if __name__ == "__main__":
    main()
