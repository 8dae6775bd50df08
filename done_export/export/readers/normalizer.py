"""
Normalization of raw list rows into record rows.
"""

from datetime import datetime
from typing import Any, Iterable, Mapping

from done_export.core.timestamps import parse_iso_utc, to_iso_utc


def normalize_value(value: Any) -> Any:
    """
    Normalize one field value.

    - Strings that are ISO-8601 UTC timestamps ("...Z") are re-emitted in
      canonical form (YYYY-MM-DDTHH:MM:SS.mmmZ)
    - None becomes ""
    - Everything else passes through unchanged

    Normalization is idempotent: normalize_value(normalize_value(v)) == normalize_value(v).

    Examples:
        >>> normalize_value("2023-01-01T00:00:00Z")
        '2023-01-01T00:00:00.000Z'
        >>> normalize_value(None)
        ''
        >>> normalize_value("Done")
        'Done'
    """
    if value is None:
        return ""
    if isinstance(value, str) and value.endswith("Z"):
        parsed = parse_iso_utc(value)
        if parsed is not None:
            return to_iso_utc(parsed)
    return value


def normalize_row(
    raw_row: Mapping[str, Any],
    fields: Iterable[str],
    exported_on: str,
    exported_on_field: str,
) -> dict[str, Any]:
    """
    Project one raw row onto the requested fields and normalize the values.

    A requested field missing from the row is exported as "" rather than
    rejected; the server already refused unknown fields when it ran the query.

    Args:
        raw_row: Row as returned by the server (includes metadata fields)
        fields: Requested fields, in column order
        exported_on: Export timestamp (canonical ISO-8601 UTC)
        exported_on_field: Column name for the export timestamp

    Returns:
        Record row with the requested fields plus the export timestamp
    """
    row = {field: normalize_value(raw_row.get(field)) for field in fields}
    row[exported_on_field] = exported_on
    return row


def normalize_rows(
    raw_rows: Iterable[Mapping[str, Any]],
    fields: list[str],
    exported_on: datetime,
    exported_on_field: str,
) -> list[dict[str, Any]]:
    """Normalize a sequence of raw rows; every row gets the same export timestamp."""
    stamp = to_iso_utc(exported_on)
    return [normalize_row(raw, fields, stamp, exported_on_field) for raw in raw_rows]
