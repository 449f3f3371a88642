"""Command line interface for formatting BibTeX and converting DOIs."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List

from .app import BibCleanApp, EmptyInputError
from .config import DOI_SOURCES, Settings
from .crossref import CrossrefClient
from .models import FormatOptions
from .parsers import BibTeXParser
from .report import render_conversion_status, render_format_status


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return BibTeXParser().load_text(source)


def _write_output(text: str, destination: Path | None) -> None:
    if destination:
        destination.write_text(text, encoding="utf-8")
    else:
        sys.stdout.write(text)


def _options(args: argparse.Namespace) -> FormatOptions:
    return FormatOptions(
        strip_periods=args.strip_periods,
        extract_doi_from_url=not args.no_extract_doi,
        enforce_doi_url=not args.no_enforce_doi_url,
    )


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", help="Input file, or '-' to read from stdin")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the formatted BibTeX to this file instead of stdout",
    )
    parser.add_argument(
        "--strip-periods",
        action="store_true",
        help="Remove periods from normalized author names",
    )
    parser.add_argument(
        "--no-extract-doi",
        action="store_true",
        help="Do not fill a missing DOI from the url field",
    )
    parser.add_argument(
        "--no-enforce-doi-url",
        action="store_true",
        help="Keep the existing url instead of rewriting it from the DOI",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bibclean", description="Normalize BibTeX entries and convert DOIs to BibTeX"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    format_parser = subparsers.add_parser("format", help="Normalize a .bib file")
    _add_common_arguments(format_parser)

    doi_parser = subparsers.add_parser("doi", help="Convert a list of DOIs (one per line)")
    _add_common_arguments(doi_parser)
    doi_parser.add_argument(
        "--source",
        choices=list(DOI_SOURCES),
        help="Build entries from Crossref metadata (default) or Crossref's BibTeX",
    )
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )

    options = _options(args)
    text = _read_input(args.input)

    if args.command == "format":
        app = BibCleanApp(options=options, settings=settings)
        try:
            result = app.format_bibtex(text)
        except EmptyInputError as exc:
            print(exc, file=sys.stderr)
            return 1
        print(render_format_status(result), file=sys.stderr)
        if not result.entries:
            return 1
        _write_output(result.text, args.output)
        return 0

    client = CrossrefClient(settings=settings)
    app = BibCleanApp(client=client, options=options, settings=settings, doi_source=args.source)
    try:
        conversion = app.convert_dois(text)
    except EmptyInputError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        client.close()
    _write_output(conversion.text, args.output)
    print(render_conversion_status(conversion), file=sys.stderr)
    return 0 if conversion.ok else 1


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
