"""Command line entry point: table files to an HTML clipboard."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .clipboard import clipboard_sink
from .convert import convert_sources
from .errors import ConfigurationError, TabclipError
from .rules import DEFAULT_FORMAT, FORMAT_NAMES, STDIN_MARKER, VERSION
from .sniff import parse_delimiter, parse_format, preferring

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tabclip",
        description="Table data to clipboard",
    )
    parser.add_argument(
        "files", nargs="*", metavar="FILE",
        help=f"input table files; {STDIN_MARKER} or nothing reads stdin",
    )
    parser.add_argument(
        "-f", "--format", default=DEFAULT_FORMAT,
        help=f"set input table format; formats are {','.join(FORMAT_NAMES)}",
    )
    parser.add_argument(
        "-j", "--join", action="store_true",
        help="put the rows of all inputs in one table",
    )
    parser.add_argument(
        "-o", "--stdout", action="store_true",
        help="write the HTML to stdout instead of the clipboard",
    )
    parser.add_argument(
        "--prefer", choices=("tsv", "csv"), default=None,
        help="delimiter to pick when sniffing ends in a tie",
    )
    parser.add_argument(
        "--log-level", type=str.upper, default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="logging level (default: WARNING)",
    )
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    return parser


def run(args: argparse.Namespace) -> None:
    selector = parse_format(args.format)
    strategy = preferring(parse_delimiter(args.prefer))
    names = args.files or [STDIN_MARKER]

    if args.stdout:
        convert_sources(sys.stdout.buffer, names, selector, join=args.join, strategy=strategy)
        sys.stdout.buffer.flush()
        return

    with clipboard_sink() as sink:
        convert_sources(sink, names, selector, join=args.join, strategy=strategy)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level,
        format="%(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args)
    except ConfigurationError as exc:
        print(f"tabclip: {exc}", file=sys.stderr)
        return 2
    except TabclipError as exc:
        logger.debug("conversion aborted", exc_info=True)
        print(f"tabclip: {exc}", file=sys.stderr)
        return 1
    return 0
