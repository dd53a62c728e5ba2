"""
CSV text to row records.

Turns raw CSV text into an ordered list of rows, each a mapping from
header name to string cell value. Files with leading metadata lines
are handled with a header offset: that many physical lines are
skipped before the header is read.

Fields go through the csv module, so quoted cells may contain commas,
escaped quotes, and newlines. Every cell is trimmed and loses any
surrounding quote characters. No type coercion happens here.

Data lines whose field count differs from the header's are either
dropped and reported as rejected outcomes (lenient, the default) or
raised as MalformedRowError (strict).
"""

import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

import pandas as pd

from .errors import MalformedRowError

logger = logging.getLogger(__name__)

Row = dict[str, str]


@dataclass
class RowOutcome:
    """Parse result for one data record."""
    line_number: int                # 1-based line in the trimmed text
    row: Optional[Row] = None
    error: Optional[str] = None
    field_count: int = 0

    @property
    def ok(self) -> bool:
        return self.row is not None


@dataclass
class ParseResult:
    """Headers, accepted rows, and rejected outcomes for one CSV text."""
    headers: list[str] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)
    rejected: list[RowOutcome] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


def clean_cell(value: str) -> str:
    """Trim whitespace and strip surrounding quote characters."""
    return value.strip().strip('"').strip()


def _is_blank(record: list[str]) -> bool:
    return len(record) <= 1 and not "".join(record).strip()


def _iter_records(text: str, header_row: int) -> Iterator[tuple[int, list[str]]]:
    """Yield (line_number, cleaned cells) for every non-blank record after the offset."""
    if header_row < 0:
        raise ValueError(f"header_row must be >= 0, got {header_row}")

    text = (text or "").lstrip("\ufeff").strip()
    parts = text.split("\n", header_row)
    if len(parts) <= header_row:
        return
    body = parts[header_row]

    reader = csv.reader(io.StringIO(body, newline=""))
    prev_line = 0
    for record in reader:
        line_number = header_row + prev_line + 1
        prev_line = reader.line_num
        if _is_blank(record):
            continue
        yield line_number, [clean_cell(c) for c in record]


def _outcomes(
    headers: list[str],
    records: Iterator[tuple[int, list[str]]],
    strict: bool,
) -> Iterator[RowOutcome]:
    expected = len(headers)
    for line_number, cells in records:
        if len(cells) != expected:
            if strict:
                raise MalformedRowError(line_number, expected, len(cells))
            yield RowOutcome(
                line_number=line_number,
                error=f"expected {expected} fields, found {len(cells)}",
                field_count=len(cells),
            )
            continue
        yield RowOutcome(
            line_number=line_number,
            row=dict(zip(headers, cells)),
            field_count=len(cells),
        )


def _read_header(text: str, header_row: int):
    records = _iter_records(text, header_row)
    first = next(records, None)
    if first is None:
        return [], records
    _, headers = first
    return headers, records


def iter_row_outcomes(
    text: str,
    header_row: int = 0,
    strict: bool = False,
) -> Iterator[RowOutcome]:
    """Lazily yield one RowOutcome per data record, in source order."""
    headers, records = _read_header(text, header_row)
    if not headers:
        return
    yield from _outcomes(headers, records, strict)


def parse_csv_text(
    text: str,
    header_row: int = 0,
    strict: bool = False,
) -> ParseResult:
    """
    Parse CSV text into a ParseResult.

    Args:
        text: Raw CSV text.
        header_row: Number of leading lines to skip before the header.
        strict: Raise MalformedRowError on a field-count mismatch
            instead of rejecting the line.

    Returns:
        ParseResult with headers, accepted rows, and rejected outcomes.
        Empty input (or fewer lines than the offset) gives an empty result.
    """
    headers, records = _read_header(text, header_row)
    result = ParseResult(headers=headers)
    if not headers:
        return result

    for outcome in _outcomes(headers, records, strict):
        if outcome.ok:
            result.rows.append(outcome.row)
        else:
            result.rejected.append(outcome)

    if result.rejected:
        logger.debug(
            f"Rejected {len(result.rejected)} malformed lines: "
            f"{[o.line_number for o in result.rejected]}"
        )
    return result


def rows_to_frame(rows: list[Row], headers: Optional[list[str]] = None) -> pd.DataFrame:
    """Row records as a string-valued DataFrame, one column per header."""
    if headers is None:
        headers = list(rows[0].keys()) if rows else []
    return pd.DataFrame.from_records(rows, columns=headers)
