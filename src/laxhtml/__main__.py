#!/usr/bin/env python3
"""Command-line interface for laxhtml."""

from __future__ import annotations

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .parser import LaxHTML
from .selector import select

_EPILOG = """\
examples:
  laxhtml page.html
  curl -s https://example.com | laxhtml -
  laxhtml page.html -s 'main p' -f text
  laxhtml page.html -s 'li:nth-child(odd)' -n 3
  laxhtml page.html --errors > /dev/null

The exit status is 1 when the selector matches nothing.
"""


def _installed_version() -> str:
    try:
        return version("laxhtml")
    except PackageNotFoundError:  # pragma: no cover
        return "unknown"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laxhtml",
        description="Parse HTML leniently and print what a CSS selector finds in it.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("source", nargs="?", metavar="PATH", help="document to read; '-' reads standard input")
    parser.add_argument("-s", "--selector", metavar="CSS", help="print matching elements instead of the whole document")

    output = parser.add_argument_group("output")
    output.add_argument(
        "-f",
        "--format",
        choices=("html", "text"),
        default="html",
        help="print normalized markup or extracted text (default: %(default)s)",
    )
    output.add_argument("--first", action="store_true", help="stop at the first match (same as --limit 1)")
    output.add_argument("-n", "--limit", type=int, default=0, metavar="N", help="stop after N matches; 0 prints all")

    text = parser.add_argument_group("text format")
    text.add_argument("--separator", default=" ", metavar="SEP", help="placed between text segments (default: a space)")
    text.add_argument(
        "--strip",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="trim each text segment and skip the empty ones (default: on)",
    )

    diagnostics = parser.add_argument_group("diagnostics")
    diagnostics.add_argument("--errors", action="store_true", help="list parser recoveries on standard error")
    diagnostics.add_argument("-v", "--verbose", action="store_true", help="log debug messages on standard error")
    diagnostics.add_argument("--version", action="version", version=f"%(prog)s {_installed_version()}")
    return parser


def _load(source: str) -> str | bytes:
    if source == "-":
        return sys.stdin.read()
    # Undecodable bytes become U+FFFD in the parser
    return Path(source).read_bytes()


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.source is None:
        parser.print_help(sys.stderr)
        raise SystemExit(1)
    if args.limit < 0:
        parser.error("--limit cannot be negative")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    doc = LaxHTML(_load(args.source), collect_errors=args.errors)
    for error in doc.errors:
        print(error, file=sys.stderr)

    if args.selector:
        nodes = select(doc.root, args.selector, limit=1 if args.first else args.limit)
    else:
        nodes = [doc.root]

    if not nodes:
        raise SystemExit(1)

    for node in nodes:
        if args.format == "text":
            print(node.to_text(separator=args.separator, strip=args.strip))
        else:
            print(node.to_html())


if __name__ == "__main__":
    main()
