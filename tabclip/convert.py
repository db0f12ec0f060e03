"""
Source orchestration.

Responsibilities:
- open each source (file or stdin) and always release it
- resolve the delimiter, buffering only sources that need sniffing
- drive the renderer and compose tables (one per source, or joined)
"""

from __future__ import annotations

import codecs
import io
import logging
import sys
from contextlib import contextmanager
from typing import BinaryIO, Callable, Iterable, Iterator, List, Sequence, Tuple, TypeVar

from charset_normalizer import from_bytes

from .errors import RenderError, SourceOpenError
from .models import ConvertResponse, SourceReport
from .render import close_table, open_table, render, render_records
from .rules import ENCODING_SAMPLE_SIZE, OUTPUT_ENCODING, STDIN_MARKER, STREAM_ENCODING
from .sniff import SniffStrategy, delimiter_hint, parse_format, resolve_delimiter, sniff_by_field_count

logger = logging.getLogger(__name__)

UTF8_BOM = b"\xef\xbb\xbf"

T = TypeVar("T")


@contextmanager
def open_source(name: str) -> Iterator[BinaryIO]:
    """Yield a binary stream for `name`; stdin is yielded but never closed."""
    if name == STDIN_MARKER:
        yield sys.stdin.buffer
        return

    try:
        f = open(name, "rb")
    except OSError as exc:
        raise SourceOpenError(name, exc.strerror or str(exc)) from exc
    with f:
        yield f


class PrefixedReader(io.RawIOBase):
    """Replay bytes already read from `stream`, then continue with `stream`."""

    def __init__(self, prefix: bytes, stream: BinaryIO):
        self._prefix = prefix
        self._stream = stream
        self._read = getattr(stream, "read1", stream.read)

    def readable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        if self._prefix:
            n = min(len(b), len(self._prefix))
            b[:n] = self._prefix[:n]
            self._prefix = self._prefix[n:]
            return n
        data = self._read(len(b))
        n = len(data)
        b[:n] = data
        return n


def guess_encoding(sample: bytes, final: bool = True) -> str:
    """
    Pick an encoding for `sample`.

    Rules:
    - UTF-8 (utf-8-sig with a BOM) when the bytes are valid UTF-8.
      With `final` false a multibyte sequence cut at the end still counts.
    - Otherwise the best guess from charset-normalizer.
    - Otherwise UTF-8; the caller decodes with replacement characters.
    """
    encoding = "utf-8-sig" if sample.startswith(UTF8_BOM) else "utf-8"
    try:
        codecs.getincrementaldecoder(encoding)().decode(sample, final=final)
        return encoding
    except UnicodeDecodeError:
        pass

    match = from_bytes(sample).best()
    if match is not None:
        return match.encoding
    return "utf-8"


def decode_buffer(raw: bytes) -> Tuple[str, str]:
    """Decode a fully buffered source; returns the text and the encoding used."""
    encoding = guess_encoding(raw)
    try:
        return raw.decode(encoding), encoding
    except (UnicodeDecodeError, LookupError):
        logger.debug("detected encoding %s did not decode, using replacement", encoding)
    return raw.decode("utf-8", errors="replace"), "utf-8"


def read_all(stream: BinaryIO, name: str) -> bytes:
    try:
        return stream.read()
    except OSError as exc:
        raise RenderError(f"{name}: read failed: {exc}") from exc


def read_sample(stream: BinaryIO, name: str, size: int = ENCODING_SAMPLE_SIZE) -> bytes:
    chunks = []
    remaining = size
    try:
        while remaining > 0:
            data = stream.read(remaining)
            if not data:
                break
            chunks.append(data)
            remaining -= len(data)
    except OSError as exc:
        raise RenderError(f"{name}: read failed: {exc}") from exc
    return b"".join(chunks)


def convert_stream(
    sink: BinaryIO,
    stream: BinaryIO,
    name: str,
    format_selector,
    strategy: SniffStrategy = sniff_by_field_count,
) -> SourceReport:
    """Render one already opened source as `<tr>` rows (no table wrapper)."""
    hint = delimiter_hint(format_selector, name)
    if hint is not None:
        delimiter, resolution = hint
        # Only the sample is held back; the rest streams through the decoder.
        sample = read_sample(stream, name)
        encoding = guess_encoding(sample, final=len(sample) < ENCODING_SAMPLE_SIZE)
        decoder = STREAM_ENCODING if encoding in ("utf-8", "utf-8-sig") else encoding
        replay = io.BufferedReader(PrefixedReader(sample, stream))
        summary = render(replay, delimiter, sink, encoding=decoder)
    else:
        text, encoding = decode_buffer(read_all(stream, name))
        delimiter, resolution = resolve_delimiter(format_selector, name, text, strategy)
        summary = render_records(io.StringIO(text, newline=""), delimiter, sink)

    report = SourceReport(
        name=name,
        delimiter=delimiter,
        resolution=resolution,
        encoding=encoding,
        records=summary.records,
        fields=summary.fields,
    )
    logger.info(
        "%s: %d records via %s delimiter (%s)",
        name, report.records, delimiter.label, resolution.value,
    )
    return report


def convert_source(
    sink: BinaryIO,
    name: str,
    format_selector,
    strategy: SniffStrategy = sniff_by_field_count,
) -> SourceReport:
    with open_source(name) as stream:
        return convert_stream(sink, stream, name, format_selector, strategy)


def compose_tables(
    sink: BinaryIO,
    items: Iterable[T],
    convert_one: Callable[[T], SourceReport],
    join: bool = False,
) -> List[SourceReport]:
    """Wrap each item's rows in its own table, or all of them in one when `join`."""
    reports: List[SourceReport] = []
    if join:
        open_table(sink)
    for item in items:
        if not join:
            open_table(sink)
        reports.append(convert_one(item))
        if not join:
            close_table(sink)
    if join:
        close_table(sink)
    return reports


def convert_sources(
    sink: BinaryIO,
    names: Sequence[str],
    format_selector="auto",
    join: bool = False,
    strategy: SniffStrategy = sniff_by_field_count,
) -> List[SourceReport]:
    """
    Convert every source in order; the first failure aborts the run.

    The format is validated before any source is opened. The sink is left
    open for the caller.
    """
    selector = parse_format(format_selector)
    names = list(names) or [STDIN_MARKER]
    return compose_tables(
        sink, names, lambda name: convert_source(sink, name, selector, strategy), join
    )


def convert_bytes(
    payloads: Iterable[Tuple[str, bytes]],
    format_selector="auto",
    join: bool = False,
    strategy: SniffStrategy = sniff_by_field_count,
) -> ConvertResponse:
    """In-memory variant: `(name, bytes)` pairs to an HTML string plus reports."""
    selector = parse_format(format_selector)
    sink = io.BytesIO()

    def convert_one(payload: Tuple[str, bytes]) -> SourceReport:
        name, raw = payload
        return convert_stream(sink, io.BytesIO(raw), name, selector, strategy)

    reports = compose_tables(sink, payloads, convert_one, join)
    return ConvertResponse(html=sink.getvalue().decode(OUTPUT_ENCODING), sources=reports)
