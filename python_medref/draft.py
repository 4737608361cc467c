"""
Admin editing session.

A ``Draft`` is an in-memory copy of the Column Set and Row Set. Edits stay
local until the draft is sent through the admin-update endpoint; reloading
discards them. Column operations keep every row's value-map in step with the
Column Set.
"""
import uuid
from typing import Any, Dict, List, Optional

from python_medref import csv_bridge
from python_medref.columns import is_placeholder, normalize_key
from python_medref.errors import ValidationError
from python_medref.grouping import ALL_CATEGORIES, GroupedRows, category_options, group_rows


class Draft:
    def __init__(self, columns: Optional[List[str]] = None, rows: Optional[List[Dict[str, Any]]] = None):
        self.columns: List[str] = list(columns or [])
        self.rows: List[Dict[str, Any]] = [
            {"id": r.get("id") or str(uuid.uuid4()), "data": dict(r.get("data") or {})}
            for r in (rows or [])
        ]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Draft":
        return cls(payload.get("columns"), payload.get("rows"))

    def payload(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [{"id": r["id"], "data": dict(r["data"])} for r in self.rows],
        }

    # --- columns ---

    def _index_of(self, name: str) -> int:
        target = normalize_key(name).lower()
        for idx, c in enumerate(self.columns):
            if c.lower() == target:
                return idx
        return -1

    def add_column(self, name: str) -> str:
        name = normalize_key(name)
        if not name:
            raise ValidationError("New column name is required.")
        if is_placeholder(name):
            raise ValidationError('Column name cannot start with "Unnamed".')
        if self._index_of(name) != -1:
            raise ValidationError(f'Column already exists: "{name}"')
        self.columns.append(name)
        for r in self.rows:
            r["data"][name] = ""
        return name

    def remove_column(self, name: str) -> str:
        idx = self._index_of(name)
        if idx == -1:
            raise ValidationError(f'Column not found: "{name}"')
        col = self.columns.pop(idx)
        for r in self.rows:
            r["data"].pop(col, None)
        return col

    def move_column(self, name: str, new_index: int) -> None:
        idx = self._index_of(name)
        if idx == -1:
            raise ValidationError(f'Column not found: "{name}"')
        new_index = max(0, min(new_index, len(self.columns) - 1))
        self.columns.insert(new_index, self.columns.pop(idx))

    # --- rows ---

    def add_row(self, values: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Prepend an empty row (optionally pre-filled) and return it."""
        values = values or {}
        row = {
            "id": str(uuid.uuid4()),
            "data": {c: values.get(c, "") for c in self.columns},
        }
        self.rows.insert(0, row)
        return row

    def _find_row(self, row_id: str) -> Dict[str, Any]:
        for r in self.rows:
            if r["id"] == row_id:
                return r
        raise ValidationError(f'Row not found: "{row_id}"')

    def set_cell(self, row_id: str, column: str, value: str) -> None:
        if column not in self.columns:
            raise ValidationError(f'Column not found: "{column}"')
        self._find_row(row_id)["data"][column] = value

    def delete_row(self, row_id: str) -> None:
        self.rows.remove(self._find_row(row_id))

    def clear_rows(self) -> None:
        """Remove every row; columns stay."""
        self.rows = []

    # --- CSV ---

    def replace_from_csv(self, text: str) -> None:
        columns, rows = csv_bridge.import_csv(text)
        self.columns = columns
        self.rows = rows

    def export_csv(self) -> str:
        return csv_bridge.export_csv(self.columns, self.rows)

    # --- display ---

    def grouped(self, category_filter: str = ALL_CATEGORIES, search_query: str = "") -> GroupedRows:
        return group_rows(self.columns, self.rows, category_filter, search_query)

    def category_options(self) -> List[str]:
        return category_options(self.columns, self.rows)

    def __repr__(self):
        return f"<Draft {len(self.columns)} columns, {len(self.rows)} rows>"
