"""
CSV import/export of the medication table.

Export writes the Column Set as the header followed by one record per row.
Import reads a header row plus data rows and returns a fresh Column Set and
Row Set; callers replace their whole draft with the result.
"""
import csv
import io
import uuid
from typing import Any, Dict, List, Tuple

from python_medref.columns import is_placeholder, normalize_key
from python_medref.errors import ParseError, ValidationError

EXPORT_FILENAME = "medications.csv"


def export_csv(columns: List[str], rows: List[Dict[str, Any]]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=list(columns), extrasaction="ignore")
    writer.writeheader()
    for r in rows:
        data = r.get("data") or {}
        writer.writerow({c: "" if data.get(c) is None else data.get(c) for c in columns})
    return output.getvalue()


def _header(fields: List[str]) -> List[Tuple[int, str]]:
    """Map header positions to surviving column names."""
    kept = []
    seen = set()
    for idx, raw in enumerate(fields):
        name = normalize_key(raw)
        # Excel leaves blank headers or "Unnamed: X" behind
        if not name or is_placeholder(name):
            continue
        if name.lower() in seen:
            raise ValidationError(f'Duplicate column name: "{name}"')
        seen.add(name.lower())
        kept.append((idx, name))
    return kept


def import_csv(text: str) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Parse CSV text into a fresh Column Set and Row Set.

    Only truly empty lines are skipped; a line of bare delimiters is a row of
    blank values. A record with fewer fields than the header is padded with
    "" (a missing trailing field is an empty value), while extra fields raise
    ParseError because they have no column to land in.
    """
    if text.startswith("\ufeff"):
        text = text[1:]

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    records: List[List[str]] = []
    try:
        for record in reader:
            records.append(record)
    except csv.Error as e:
        # records holds the header plus every complete data row so far
        raise ParseError(f"CSV parse error: {e}", row=max(len(records), 1))

    if not records:
        raise ValidationError("CSV must have a header row (column names).")

    fields = records[0]
    header = _header(fields)
    columns = [name for _, name in header]
    if not columns:
        raise ValidationError("CSV must have a header row (column names).")
    if any(not c.strip() for c in columns):
        raise ValidationError("CSV has empty column names. Please name all columns before importing.")

    rows = []
    for number, record in enumerate(records[1:], start=1):
        if not record:
            continue
        if len(record) > len(fields):
            raise ParseError(
                f"CSV parse error: Too many fields: expected {len(fields)} fields but parsed {len(record)}",
                row=number,
            )
        data = {}
        for idx, name in header:
            data[name] = record[idx] if idx < len(record) else ""
        rows.append({"id": str(uuid.uuid4()), "data": data})
    return columns, rows


def import_csv_file(path: str) -> Tuple[List[str], List[Dict[str, Any]]]:
    with open(path, "r", encoding="utf-8", newline="") as fh:
        return import_csv(fh.read())
