"""
Flatten nested records into rows for CSV/spreadsheet export.

Nested mappings become dot-path columns, lists are stored as JSON text.
"""
import csv
import io
import json
from collections.abc import Mapping


def flatten_record(record, prefix: str = "") -> dict:
    """
    Flatten ``record`` into ``{column: scalar}``.

        >>> flatten_record({"type": "LINE", "startPoint": {"x": 1, "y": 2}})
        {'type': 'LINE', 'startPoint.x': 1, 'startPoint.y': 2}
    """
    row = {}
    if not isinstance(record, Mapping):
        return row

    for key, value in record.items():
        column = f"{prefix}{key}"
        if isinstance(value, Mapping):
            row.update(flatten_record(value, f"{column}."))
        elif isinstance(value, (list, tuple)):
            row[column] = json.dumps(value, default=str, ensure_ascii=False)
        else:
            row[column] = value
    return row


def flatten_collection(records, label: str = "entity") -> list[dict]:
    """One flat row per record, columns prefixed with ``<label>[<index>].``."""
    return [
        flatten_record(record, f"{label}[{index}].")
        for index, record in enumerate(records or [])
    ]


def collect_columns(rows) -> list[str]:
    """Union of row keys in first-seen order."""
    columns = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return list(columns)


def format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def rows_to_csv(rows) -> str:
    """Render rows as CSV with every cell quoted; missing cells stay empty."""
    rows = list(rows or [])
    columns = collect_columns(rows)

    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
    if columns:
        writer.writerow(columns)
    for row in rows:
        writer.writerow([format_cell(row.get(column)) for column in columns])
    return output.getvalue()
