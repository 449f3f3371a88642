"""FastAPI + Tailwind interface for bibclean.

Run with:
    uvicorn bibclean.web:app --reload
"""
from __future__ import annotations

from html import escape
from secrets import token_hex
from typing import Dict

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import HTMLResponse, Response

from .app import BibCleanApp, EmptyInputError
from .config import Settings
from .models import FormatOptions
from .report import render_conversion_status, render_format_status

app = FastAPI(title="bibclean", description="Normalize BibTeX and convert DOIs from the browser")

generated_exports: Dict[str, str] = {}
MAX_EXPORTS = 100


def _build_app() -> BibCleanApp:
    return BibCleanApp(settings=Settings.from_env())


def _options(strip_periods: bool, extract_doi: bool, enforce_doi_url: bool) -> FormatOptions:
    return FormatOptions(
        strip_periods=strip_periods,
        extract_doi_from_url=extract_doi,
        enforce_doi_url=enforce_doi_url,
    )


def _layout(content: str) -> str:
    """Wrap provided content in a Tailwind-powered HTML page."""

    return f"""
    <!doctype html>
    <html lang=\"en\" class=\"h-full bg-slate-50\">
    <head>
        <meta charset=\"utf-8\" />
        <title>bibclean</title>
        <link href=\"https://cdn.jsdelivr.net/npm/tailwindcss@3.4.4/dist/tailwind.min.css\" rel=\"stylesheet\" />
    </head>
    <body class=\"min-h-full py-10\">
        <div class=\"max-w-5xl mx-auto px-4\">
            <div class=\"bg-white shadow rounded-lg p-6\">
                <h1 class=\"text-3xl font-semibold text-slate-900\">bibclean</h1>
                <p class=\"text-slate-600 mt-2\">Paste or upload BibTeX to normalize authors, formulas and DOI links, or turn a list of DOIs into BibTeX.</p>
                {content}
            </div>
        </div>
    </body>
    </html>
    """


def _option_boxes(prefix: str, options: FormatOptions) -> str:
    boxes = [
        ("strip_periods", "Remove periods from author names", options.strip_periods),
        ("extract_doi", "Extract DOI from url when missing", options.extract_doi_from_url),
        ("enforce_doi_url", "Rewrite url as https://doi.org/&lt;doi&gt;", options.enforce_doi_url),
    ]
    rows = []
    for name, label, checked in boxes:
        box_id = f"{prefix}_{name}"
        rows.append(
            f"""
        <div class=\"flex items-center gap-2 mt-2\">
            <input type=\"checkbox\" id=\"{box_id}\" name=\"{name}\" value=\"1\" {"checked" if checked else ""} class=\"h-4 w-4 border-slate-300 rounded\" />
            <label for=\"{box_id}\" class=\"text-sm text-slate-700\">{label}</label>
        </div>"""
        )
    return "".join(rows)


def _form_page(
    output: str | None = None,
    status: str | None = None,
    download_token: str | None = None,
    options: FormatOptions | None = None,
) -> str:
    """Render the landing page with optional output and download link."""

    options = options or FormatOptions()

    bib_form = f"""
    <form action=\"/format\" method=\"post\" class=\"bg-slate-50 border border-slate-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-slate-800\">Fix BibTeX</h2>
        <label class=\"block text-sm font-medium text-slate-700 mb-2\" for=\"text\">BibTeX entries</label>
        <textarea name=\"text\" placeholder=\"@article{{key, author = {{Einstein, Albert}}, ...}}\" class=\"w-full h-44 border border-slate-300 rounded-md p-3 text-sm font-mono\"></textarea>
        {_option_boxes("bib", options)}
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-slate-900 text-white rounded-md shadow\">Format</button>
    </form>
    """

    upload_form = f"""
    <form action=\"/upload\" method=\"post\" enctype=\"multipart/form-data\" class=\"bg-slate-50 border border-slate-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-slate-800\">Upload .bib</h2>
        <input type=\"file\" name=\"file\" accept=\".bib,.txt\" required class=\"block w-full text-sm text-slate-800\" />
        {_option_boxes("upload", options)}
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-slate-900 text-white rounded-md shadow\">Format file</button>
    </form>
    """

    doi_form = f"""
    <form action=\"/convert\" method=\"post\" class=\"bg-slate-50 border border-slate-200 rounded-lg p-4 mt-6\">
        <h2 class=\"text-xl font-semibold text-slate-800\">DOI to BibTeX</h2>
        <label class=\"block text-sm font-medium text-slate-700 mb-2\" for=\"dois\">DOIs, one per line</label>
        <textarea name=\"dois\" placeholder=\"10.1038/s41586-020-1234-5\" class=\"w-full h-32 border border-slate-300 rounded-md p-3 text-sm font-mono\"></textarea>
        {_option_boxes("doi", options)}
        <button type=\"submit\" class=\"mt-4 inline-flex items-center px-4 py-2 bg-slate-900 text-white rounded-md shadow\">Convert</button>
    </form>
    """

    status_block = ""
    if status:
        status_block = f"""
        <p class=\"mt-8 text-sm text-slate-700\" id=\"status\">{escape(status)}</p>
        """

    output_block = ""
    if output:
        output_block = f"""
        <div class=\"mt-4\">
            <h2 class=\"text-xl font-semibold text-slate-800\">Output</h2>
            <textarea readonly class=\"mt-3 w-full h-72 bg-slate-900 text-green-100 p-4 rounded-lg text-sm font-mono\">{escape(output)}</textarea>
        </div>
        """

    download_block = ""
    if download_token:
        download_block = f"""
        <div class=\"mt-4\">
            <a class=\"inline-flex items-center px-4 py-2 bg-emerald-600 text-white rounded-md shadow hover:bg-emerald-700\" href=\"/download/{download_token}\">Download bibclean.bib</a>
        </div>
        """

    return _layout(bib_form + upload_form + doi_form + status_block + output_block + download_block)


def _store(output: str) -> str:
    token = token_hex(8)
    generated_exports[token] = output
    while len(generated_exports) > MAX_EXPORTS:
        # Oldest undownloaded export goes first.
        generated_exports.pop(next(iter(generated_exports)))
    return token


def _format_response(text: str, options: FormatOptions) -> HTMLResponse:
    try:
        result = _build_app().format_bibtex(text, options)
    except EmptyInputError as exc:
        return HTMLResponse(_form_page(status=str(exc), options=options))

    status = render_format_status(result)
    token = _store(result.text) if result.entries else None
    return HTMLResponse(
        _form_page(result.text, status=status, download_token=token, options=options)
    )


@app.get("/", response_class=HTMLResponse)
async def home() -> HTMLResponse:
    """Serve the BibTeX and DOI forms."""

    return HTMLResponse(_form_page())


@app.post("/format", response_class=HTMLResponse)
async def format_text(
    text: str = Form(""),
    strip_periods: bool = Form(False),
    extract_doi: bool = Form(False),
    enforce_doi_url: bool = Form(False),
) -> HTMLResponse:
    """Normalize pasted BibTeX."""

    return _format_response(text, _options(strip_periods, extract_doi, enforce_doi_url))


@app.post("/upload", response_class=HTMLResponse)
async def format_upload(
    file: UploadFile = File(...),
    strip_periods: bool = Form(False),
    extract_doi: bool = Form(False),
    enforce_doi_url: bool = Form(False),
) -> HTMLResponse:
    """Normalize an uploaded .bib file."""

    data = await file.read()
    text = data.decode("utf-8", errors="replace")
    return _format_response(text, _options(strip_periods, extract_doi, enforce_doi_url))


@app.post("/convert", response_class=HTMLResponse)
def convert_dois(
    dois: str = Form(""),
    strip_periods: bool = Form(False),
    extract_doi: bool = Form(False),
    enforce_doi_url: bool = Form(False),
) -> HTMLResponse:
    """Convert a DOI list via Crossref, one DOI at a time."""

    options = _options(strip_periods, extract_doi, enforce_doi_url)
    checker = _build_app()
    try:
        result = checker.convert_dois(dois, options)
    except EmptyInputError as exc:
        return HTMLResponse(_form_page(status=str(exc), options=options))
    finally:
        checker.client.close()

    token = _store(result.text) if result.ok else None
    return HTMLResponse(
        _form_page(
            result.text,
            status=render_conversion_status(result),
            download_token=token,
            options=options,
        )
    )


@app.get("/download/{token}")
async def download(token: str) -> Response:
    """Serve a generated .bib once."""

    content = generated_exports.pop(token, None)
    if content is None:
        raise HTTPException(status_code=404, detail="Export not found or expired")

    return Response(
        content,
        media_type="application/x-bibtex; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="bibclean.bib"'},
    )


def main() -> None:
    """Run the FastAPI app using uvicorn."""

    import uvicorn

    uvicorn.run("bibclean.web:app", host="0.0.0.0", port=8000, reload=False)


__all__ = ["app", "main"]
