"""
app/parsing/csv_tokenizer.py

Lenient CSV tokenizer and header/value record builder.

Sensor exports are often hand-edited and ragged, so this does not reject
rows whose width differs from the header row; see ``build_raw_records``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence

from app.domain.air_quality import RawRecord
from app.domain.errors import EmptyInputError

logger = logging.getLogger(__name__)

_QUOTE = '"'
_ESCAPE = "\\"
_DELIMITER = ","


def tokenize_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.

    Commas inside double quotes do not split. A quote preceded by a
    backslash is kept literally and does not open or close a quoted span.
    """

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    previous = ""

    for char in line:
        if char == _QUOTE and previous != _ESCAPE:
            in_quotes = not in_quotes
        elif char == _DELIMITER and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        previous = char

    fields.append("".join(current).strip())
    return fields


def tokenize_csv(text: str | None) -> Iterator[list[str]]:
    """
    Return a lazy iterator of tokenized rows, header row first.

    Blank lines are skipped. Raises ``EmptyInputError`` immediately when the
    text holds no non-blank line.
    """

    if text is None or not text.strip():
        raise EmptyInputError("No CSV content was provided.")
    return _iter_rows(text)


def _iter_rows(text: str) -> Iterator[list[str]]:
    for line in text.split("\n"):
        if not line.strip():
            continue
        yield tokenize_line(line)


def build_raw_records(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    *,
    first_row_number: int = 2,
) -> Iterator[tuple[int, RawRecord]]:
    """
    Zip each tokenized row against the headers.

    Rows shorter than the header leave trailing columns unset; values past
    the last header are dropped. Yields ``(row_number, record)`` pairs where
    the header row is row 1.
    """

    header_count = len(headers)
    for row_number, values in enumerate(rows, start=first_row_number):
        if len(values) != header_count:
            logger.debug(
                "CSV row width mismatch row=%s values=%s headers=%s",
                row_number,
                len(values),
                header_count,
            )
        record: dict[str, str] = {}
        for header, value in zip(headers, values):
            record[header] = value
        yield row_number, record
