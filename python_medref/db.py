"""
sqlite3 persistence for the medication table.

Two tables: ``table_meta`` holds the Column Set as a JSON list in a single
row (id = 1), ``table_rows`` holds one JSON value-map per row. Saves replace
both wholesale inside one transaction.
"""
import json
import logging
import os
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from python_medref import config
from python_medref.columns import (
    DEFAULT_COLUMNS,
    normalize_key,
    restrict_to_columns,
    sanitize_columns,
    validate_columns,
)
from python_medref.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

META_ID = 1


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_db(db_path: Optional[str] = None) -> sqlite3.Connection:
    path = db_path or config.get_db_path()
    parent = os.path.dirname(path)
    try:
        if parent:
            os.makedirs(parent, exist_ok=True)
        conn = sqlite3.connect(path)
    except (OSError, sqlite3.Error) as e:
        logger.exception("Cannot open database %s", path)
        raise StorageError(f"Database unavailable: {e}")
    conn.row_factory = sqlite3.Row
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Create both tables if missing and seed the default Column Set (idempotent)."""
    try:
        with conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS table_meta (
                    id INTEGER PRIMARY KEY,
                    columns TEXT NOT NULL, -- JSON array of column names
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS table_rows (
                    id TEXT PRIMARY KEY,
                    data TEXT NOT NULL, -- JSON object keyed by column name
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                "INSERT OR IGNORE INTO table_meta (id, columns, updated_at) VALUES (?, ?, ?)",
                (META_ID, json.dumps(DEFAULT_COLUMNS), _now()),
            )
    except sqlite3.Error as e:
        logger.exception("Schema initialization failed")
        raise StorageError(f"Database error: {e}")


def _load_json(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Ignoring undecodable JSON in storage: %r", raw[:80])
        return None


def fetch_all(conn: sqlite3.Connection) -> Tuple[List[str], List[Dict[str, Any]]]:
    """Return the Column Set and every row in creation order.

    A stored Column Set holding blank or "Unnamed" entries (left over from an
    old spreadsheet import) is cleaned and written back.
    """
    init_db(conn)
    try:
        meta = conn.execute("SELECT columns FROM table_meta WHERE id = ?", (META_ID,)).fetchone()
        raw_cols = _load_json(meta["columns"]) if meta else None
        columns = sanitize_columns(raw_cols) or list(DEFAULT_COLUMNS)

        if raw_cols is not None and raw_cols != columns:
            logger.info("Healing stored column set: %r -> %r", raw_cols, columns)
            with conn:
                conn.execute(
                    "UPDATE table_meta SET columns = ?, updated_at = ? WHERE id = ?",
                    (json.dumps(columns), _now(), META_ID),
                )

        # rowid breaks ties between rows inserted by the same save
        db_rows = conn.execute(
            "SELECT id, data FROM table_rows ORDER BY created_at ASC, rowid ASC"
        ).fetchall()
    except sqlite3.Error as e:
        logger.exception("Fetching data failed")
        raise StorageError(f"Database error: {e}")

    rows = []
    for r in db_rows:
        data = _load_json(r["data"])
        rows.append({"id": r["id"], "data": data if isinstance(data, dict) else {}})
    return columns, rows


def prepare_rows(rows: Any, columns: List[str]) -> List[Tuple[str, Dict[str, Any]]]:
    if not isinstance(rows, list):
        raise ValidationError("rows is required")
    prepared = []
    seen = set()
    for r in rows:
        if not isinstance(r, dict):
            raise ValidationError("Each row must be an object.")
        row_id = normalize_key(r.get("id")) or str(uuid.uuid4())
        if row_id in seen:
            raise ValidationError(f'Duplicate row id: "{row_id}"')
        seen.add(row_id)
        # keep only known columns to avoid accidental junk
        prepared.append((row_id, restrict_to_columns(r.get("data"), columns)))
    return prepared


def replace_all(conn: sqlite3.Connection, columns: Any, rows: Any) -> Tuple[List[str], int]:
    """Overwrite the Column Set and every row. Last write wins, no merge.

    Validation happens before any statement runs. The meta update, the delete
    and the inserts share one transaction, so readers never see an empty table
    mid-save and a failure leaves the previous data untouched.
    """
    clean_columns = validate_columns(columns)
    prepared = prepare_rows(rows, clean_columns)

    init_db(conn)
    now = _now()
    try:
        with conn:
            conn.execute(
                """
                INSERT INTO table_meta (id, columns, updated_at) VALUES (?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET columns = excluded.columns, updated_at = excluded.updated_at
                """,
                (META_ID, json.dumps(clean_columns), now),
            )
            conn.execute("DELETE FROM table_rows")
            conn.executemany(
                "INSERT INTO table_rows (id, data, created_at, updated_at) VALUES (?, ?, ?, ?)",
                [(row_id, json.dumps(data), now, now) for row_id, data in prepared],
            )
    except sqlite3.Error as e:
        logger.exception("Replace-all failed, transaction rolled back")
        raise StorageError(f"Database error: {e}")

    logger.info("Saved %d columns and %d rows", len(clean_columns), len(prepared))
    return clean_columns, len(prepared)
