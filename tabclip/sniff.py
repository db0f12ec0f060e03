"""
Delimiter resolution.

A delimiter comes from, in order:
- an explicit format (tsv / csv),
- the file extension when the format is auto,
- content sniffing over the fully buffered source.

Sniffing parses the whole buffer once per candidate and keeps the delimiter
that yields the most fields. A wrong delimiter collapses each line into one
wide field, so the total field count separates the candidates well without
knowing the expected column count.
"""

from __future__ import annotations

import csv
import io
import logging
import os
from typing import Callable, Iterable, Optional, Tuple

from .errors import ConfigurationError, SniffError
from .models import Delimiter, FormatSelector, Resolution, SniffCandidate
from .render import lift_field_size_limit
from .rules import EXTENSION_DELIMITERS, SNIFF_CANDIDATES, STDIN_MARKER

logger = logging.getLogger(__name__)

SniffStrategy = Callable[[str], Delimiter]


def parse_format(value) -> FormatSelector:
    if isinstance(value, FormatSelector):
        return value
    try:
        return FormatSelector(str(value).strip().lower())
    except ValueError:
        raise ConfigurationError(f"unsupported format: {value}") from None


def parse_delimiter(value) -> Optional[Delimiter]:
    """Accept a Delimiter, its character, or a format name ("tsv"/"csv")."""
    if value is None or isinstance(value, Delimiter):
        return value
    text = str(value)
    if text.lower() == FormatSelector.TSV.value:
        return Delimiter.TAB
    if text.lower() == FormatSelector.CSV.value:
        return Delimiter.COMMA
    try:
        return Delimiter(text)
    except ValueError:
        raise ConfigurationError(f"unsupported delimiter: {value!r}") from None


def delimiter_from_extension(name: Optional[str]) -> Optional[Delimiter]:
    if not name or name == STDIN_MARKER:
        return None
    ext = os.path.splitext(name)[1].lower()
    char = EXTENSION_DELIMITERS.get(ext)
    return Delimiter(char) if char is not None else None


def delimiter_hint(
    format_selector, name: Optional[str]
) -> Optional[Tuple[Delimiter, Resolution]]:
    """
    Resolve without looking at content.

    Returns None when the source has to be buffered and sniffed.
    """
    selector = parse_format(format_selector)
    if selector is FormatSelector.TSV:
        return Delimiter.TAB, Resolution.FORMAT
    if selector is FormatSelector.CSV:
        return Delimiter.COMMA, Resolution.FORMAT

    by_ext = delimiter_from_extension(name)
    if by_ext is not None:
        return by_ext, Resolution.EXTENSION
    return None


def score_candidate(content: str, delimiter: Delimiter) -> SniffCandidate:
    """Count every field of every record when parsing with `delimiter`."""
    lift_field_size_limit()
    reader = csv.reader(io.StringIO(content, newline=""), delimiter=delimiter.value, strict=False)
    total = 0
    try:
        for record in reader:
            total += len(record)
    except csv.Error as exc:
        return SniffCandidate(delimiter=delimiter, field_count=total, ok=False, error=str(exc))
    return SniffCandidate(delimiter=delimiter, field_count=total)


def sniff_by_field_count(
    content: str,
    candidates: Iterable[Delimiter] = tuple(Delimiter(c) for c in SNIFF_CANDIDATES),
    prefer: Optional[Delimiter] = None,
) -> Delimiter:
    """
    Pick the cleanly parsing candidate with the strictly greatest field count.

    Equal top scores raise SniffError unless `prefer` is one of the tied
    delimiters.
    """
    scored = [score_candidate(content, d) for d in candidates]
    for c in scored:
        logger.debug("sniff candidate %s: fields=%d ok=%s", c.delimiter.label, c.field_count, c.ok)

    usable = [c for c in scored if c.ok and c.field_count > 0]
    if not usable:
        raise SniffError("unknown format", scored)

    best = max(c.field_count for c in usable)
    top = [c for c in usable if c.field_count == best]
    if len(top) == 1:
        return top[0].delimiter

    if prefer is not None and any(c.delimiter is prefer for c in top):
        logger.info("sniff tie at %d fields, preferring %s", best, prefer.label)
        return prefer
    raise SniffError("unknown format", scored)


def preferring(prefer: Optional[Delimiter]) -> SniffStrategy:
    """Build a field-count strategy with a fixed tie-break."""
    if prefer is None:
        return sniff_by_field_count

    def strategy(content: str) -> Delimiter:
        return sniff_by_field_count(content, prefer=prefer)

    return strategy


def resolve_delimiter(
    format_selector,
    name: Optional[str],
    content: Optional[str],
    strategy: SniffStrategy = sniff_by_field_count,
) -> Tuple[Delimiter, Resolution]:
    hint = delimiter_hint(format_selector, name)
    if hint is not None:
        logger.debug("%s: delimiter %s from %s", name, hint[0].label, hint[1].value)
        return hint

    if content is None:
        raise SniffError("unknown format")
    delimiter = strategy(content)
    logger.info("%s: sniffed %s delimiter", name or STDIN_MARKER, delimiter.label)
    return delimiter, Resolution.CONTENT
