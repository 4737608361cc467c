"""
Grouping and filtering of medication rows for display.

Rows are filtered by category and free-text search, then partitioned by
category and by route. Both dimensions are located by name, not position,
so renamed columns such as "Drug Category" or "Route of Admin" still work.
"""
import unicodedata
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from python_medref.columns import find_column_name, normalize_key

ALL_CATEGORIES = "__ALL__"

CATEGORY_CANDIDATES = ["category"]
ROUTE_CANDIDATES = ["route"]
GENERIC_CANDIDATES = ["generic name", "generic"]

UNCATEGORIZED = "Uncategorized"
OTHER_ROUTE = "Other"
ALL_LABEL = "All"


@dataclass
class RouteGroup:
    route: str
    rows: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"route": self.route, "rows": self.rows}


@dataclass
class CategoryGroup:
    category: str
    routes: List[RouteGroup] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"category": self.category, "routes": [r.to_dict() for r in self.routes]}


@dataclass
class GroupedRows:
    category_col: Optional[str]
    route_col: Optional[str]
    groups: List[CategoryGroup]
    filtered_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "categoryCol": self.category_col,
            "routeCol": self.route_col,
            "groups": [g.to_dict() for g in self.groups],
            "filteredCount": self.filtered_count,
        }


def sort_key(value: str):
    """Collation close to ICU root order: accents and case only break ties.

    On a case tie lowercase sorts first, as it does in a browser's localeCompare.
    """
    decomposed = unicodedata.normalize("NFKD", value)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), decomposed.casefold(), value.swapcase())


def _values(row: Dict[str, Any]) -> Dict[str, Any]:
    data = row.get("data") if isinstance(row, dict) else None
    return data if isinstance(data, dict) else {}


def _cell(values: Dict[str, Any], col: str) -> str:
    value = values.get(col)
    return "" if value is None else str(value)


def _label(values: Dict[str, Any], col: Optional[str], default: str) -> str:
    if not col:
        return ALL_LABEL
    return normalize_key(values.get(col)) or default


def _matches(row, columns, category_col, category_filter, query) -> bool:
    values = _values(row)
    if category_col and category_filter and category_filter != ALL_CATEGORIES:
        if _label(values, category_col, UNCATEGORIZED) != category_filter:
            return False
    if query:
        haystack = " ".join(_cell(values, c) for c in columns).lower()
        if query not in haystack:
            return False
    return True


def group_rows(
    columns: List[str],
    rows: List[Dict[str, Any]],
    category_filter: Optional[str] = ALL_CATEGORIES,
    search_query: Optional[str] = "",
) -> GroupedRows:
    category_col = find_column_name(columns, CATEGORY_CANDIDATES)
    route_col = find_column_name(columns, ROUTE_CANDIDATES)
    generic_col = find_column_name(columns, GENERIC_CANDIDATES)
    query = normalize_key(search_query).lower()

    filtered = [r for r in rows if _matches(r, columns, category_col, category_filter, query)]

    by_category: Dict[str, List[Dict[str, Any]]] = {}
    for r in filtered:
        cat = _label(_values(r), category_col, UNCATEGORIZED)
        by_category.setdefault(cat, []).append(r)

    groups: List[CategoryGroup] = []
    for cat in sorted(by_category, key=sort_key):
        by_route: Dict[str, List[Dict[str, Any]]] = {}
        for r in by_category[cat]:
            route = _label(_values(r), route_col, OTHER_ROUTE)
            by_route.setdefault(route, []).append(r)

        route_groups = []
        for route in sorted(by_route, key=sort_key):
            bucket = by_route[route]
            if generic_col:
                bucket = sorted(bucket, key=lambda r: sort_key(_cell(_values(r), generic_col)))
            route_groups.append(RouteGroup(route=route, rows=bucket))
        groups.append(CategoryGroup(category=cat, routes=route_groups))

    return GroupedRows(
        category_col=category_col,
        route_col=route_col,
        groups=groups,
        filtered_count=len(filtered),
    )


def category_options(columns: List[str], rows: List[Dict[str, Any]]) -> List[str]:
    """Distinct category labels for the picker; blank values appear as "Uncategorized"."""
    category_col = find_column_name(columns, CATEGORY_CANDIDATES)
    if not category_col:
        return []
    cats = {_label(_values(r), category_col, UNCATEGORIZED) for r in rows}
    return sorted(cats, key=sort_key)
