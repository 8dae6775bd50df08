"""
CSV encoding of record rows.

Output rules:
- Header line = keys of the first row, in order
- One line per row, lines joined with "\\n", no trailing newline
- A field is wrapped in double quotes, with inner quotes doubled, if and
  only if it contains the delimiter, a double quote, "\\r" or "\\n"
- No rows encodes as the empty string

All rows are expected to share the first row's fields. A field missing
from a later row encodes as an empty value; strict=True rejects any row
whose fields differ from the header instead.
"""

import csv
import io
import json
from typing import Any, Mapping, Sequence

from done_export.core.errors import HeterogeneousRowsError

QUOTE = '"'
LINE_SEPARATOR = "\n"
LIST_SEPARATOR = ";"

# Keys carrying the display text of lookup and person values
_DISPLAY_KEYS = ("lookupValue", "title", "Title")


def format_value(value: Any) -> str:
    """
    Convert a field value to its CSV text.

    Examples:
        >>> format_value(None)
        ''
        >>> format_value(True)
        'true'
        >>> format_value([{"lookupValue": "Sprint 1"}, {"lookupValue": "Sprint 2"}])
        'Sprint 1;Sprint 2'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        for key in _DISPLAY_KEYS:
            if value.get(key) not in (None, ""):
                return str(value[key])
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(format_value(item) for item in value)
    return str(value)


def _check_delimiter(delimiter: str) -> None:
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")
    if delimiter in (QUOTE, "\r", "\n"):
        raise ValueError(f"delimiter cannot be {delimiter!r}")


def _check_row_fields(index: int, row: Mapping[str, Any], headers: list[str]) -> None:
    keys = list(row.keys())
    if keys == headers:
        return
    missing = [h for h in headers if h not in row]
    unexpected = [k for k in keys if k not in headers]
    if missing or unexpected:
        raise HeterogeneousRowsError(index, missing, unexpected)


def encode_line(values: Sequence[Any], delimiter: str = ",") -> str:
    """
    Encode one CSV line (without line terminator) from a sequence of values.

    Examples:
        >>> encode_line([1, 'say "hi", then leave'])
        '1,"say ""hi"", then leave"'
    """
    buffer = io.StringIO()
    # "\r\n" terminator makes both line break characters trigger quoting
    writer = csv.writer(
        buffer,
        delimiter=delimiter,
        quotechar=QUOTE,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\r\n",
    )
    writer.writerow([format_value(v) for v in values])
    return buffer.getvalue()[:-2]


def to_csv(
    rows: Sequence[Mapping[str, Any]],
    delimiter: str = ",",
    strict: bool = False,
) -> str:
    """
    Encode record rows as CSV text.

    Args:
        rows: Record rows sharing the first row's fields
        delimiter: Field delimiter (single character, not a quote or line break)
        strict: Reject rows whose fields differ from the header

    Returns:
        CSV text (empty string for no rows)

    Raises:
        ValueError: If the delimiter is unusable
        HeterogeneousRowsError: If strict and a row's fields differ from the header
    """
    _check_delimiter(delimiter)

    if not rows:
        return ""

    headers = list(rows[0].keys())
    lines = [encode_line(headers, delimiter)]

    for index, row in enumerate(rows):
        if strict:
            _check_row_fields(index, row, headers)
        lines.append(encode_line([row.get(h) for h in headers], delimiter))

    return LINE_SEPARATOR.join(lines)
