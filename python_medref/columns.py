import re
from typing import Any, Iterable, List, Optional

from python_medref.errors import ValidationError

DEFAULT_COLUMNS = [
    "Category",
    "Generic Name",
    "Dose",
    "Route",
    "Indications",
    "Contraindications",
]

# Spreadsheet exports label blank header cells "Unnamed: 3" and the like
_PLACEHOLDER_RE = re.compile(r"^unnamed\b", re.IGNORECASE)


def normalize_key(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_placeholder(name: str) -> bool:
    return bool(_PLACEHOLDER_RE.match(name))


def sanitize_columns(cols: Any) -> List[str]:
    """Trim names and drop blanks and "Unnamed" placeholders, keeping order."""
    if not isinstance(cols, (list, tuple)):
        return []
    result = []
    for c in cols:
        name = normalize_key(c)
        if name and not is_placeholder(name):
            result.append(name)
    return result


def validate_columns(raw: Any) -> List[str]:
    """Validate a submitted Column Set and return the sanitized list.

    The blank/placeholder check runs on the raw input so a caller gets an
    explicit error instead of having names silently stripped.
    """
    columns = sanitize_columns(raw)
    if not columns:
        raise ValidationError("columns is required")

    raw_names = [normalize_key(c) for c in raw]
    if any(not c or is_placeholder(c) for c in raw_names):
        raise ValidationError(
            'Some column names are empty or invalid (e.g., "Unnamed"). '
            "Please ensure all columns are named."
        )

    seen = set()
    for c in columns:
        lc = c.lower()
        if lc in seen:
            raise ValidationError(f'Duplicate column name: "{c}"')
        seen.add(lc)
    return columns


def find_column_name(columns: Iterable[str], candidates: Iterable[str]) -> Optional[str]:
    """Resolve a logical column (e.g. "route") against the current Column Set.

    Exact case-insensitive matches win, tried in candidate order. Failing that,
    the first column whose name contains any candidate is returned.
    """
    columns = list(columns)
    candidates = [str(c).lower() for c in candidates]

    lower_map = {}
    for c in columns:
        lower_map.setdefault(str(c).lower(), c)
    for cand in candidates:
        if cand in lower_map:
            return lower_map[cand]

    for c in columns:
        lc = str(c).lower()
        for cand in candidates:
            if cand in lc:
                return c
    return None


def restrict_to_columns(data: Any, columns: List[str]) -> dict:
    """Project a row value-map onto ``columns``; missing or null values become ""."""
    if not isinstance(data, dict):
        data = {}
    clean = {}
    for c in columns:
        value = data.get(c)
        clean[c] = "" if value is None else value
    return clean
