"""
Streaming table renderer.

Records are parsed with standard CSV quoting and written to the sink as
`<tr>` fragments one at a time. The `<table>` wrapper belongs to the caller
so several sources can share one table or get one each.
"""

from __future__ import annotations

import csv
import html
import io
import logging
import sys
from typing import BinaryIO, Iterable, TextIO

from .errors import RenderError
from .models import Delimiter, RenderSummary
from .rules import OUTPUT_ENCODING, STREAM_ENCODING

logger = logging.getLogger(__name__)


def escape_field(text: str) -> str:
    return html.escape(text, quote=True)


def lift_field_size_limit() -> int:
    """Let `csv` accept fields of any length; the C long bound caps it on some platforms."""
    limit = sys.maxsize
    while True:
        try:
            csv.field_size_limit(limit)
            return limit
        except OverflowError:
            limit //= 2


def render_row(fields: Iterable[str]) -> str:
    cells = "".join(f"<td>{escape_field(field)}</td>" for field in fields)
    return f"<tr>{cells}</tr>"


def write_fragment(sink: BinaryIO, fragment: str) -> None:
    sink.write(fragment.encode(OUTPUT_ENCODING))
    flush = getattr(sink, "flush", None)
    if flush is not None:
        flush()


def open_table(sink: BinaryIO) -> None:
    try:
        write_fragment(sink, "<table>")
    except OSError as exc:
        raise RenderError(f"write failed: {exc}") from exc


def close_table(sink: BinaryIO) -> None:
    try:
        write_fragment(sink, "</table>")
    except OSError as exc:
        raise RenderError(f"write failed: {exc}") from exc


def render_records(stream: TextIO, delimiter: Delimiter, sink: BinaryIO) -> RenderSummary:
    """
    Parse `stream` and write one `<tr>` per record to `sink`.

    Blank lines yield no record. Stray quotes and ragged rows are accepted.
    """
    lift_field_size_limit()
    summary = RenderSummary()
    reader = csv.reader(stream, delimiter=delimiter.value, strict=False)
    try:
        for record in reader:
            if not record:
                continue
            write_fragment(sink, render_row(record))
            summary.records += 1
            summary.fields += len(record)
    except csv.Error as exc:
        raise RenderError(f"line {reader.line_num}: {exc}") from exc
    except OSError as exc:
        raise RenderError(f"I/O error after {summary.records} records: {exc}") from exc

    logger.debug("rendered %d records, %d fields", summary.records, summary.fields)
    return summary


def render(
    stream: BinaryIO,
    delimiter: Delimiter,
    sink: BinaryIO,
    encoding: str = STREAM_ENCODING,
) -> RenderSummary:
    """Render a binary stream; invalid bytes decode to U+FFFD. `stream` stays open."""
    text = io.TextIOWrapper(stream, encoding=encoding, errors="replace", newline="")
    try:
        return render_records(text, delimiter, sink)
    finally:
        text.detach()
