from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from .cells import cell_text, to_cell
from .normalize import normalize_header

"""Header locator.

Spreadsheet authors put the header row wherever they like, name columns
inconsistently, and pad sheets with title rows. The locator scans the first
rows of a matrix for one that resolves every required logical field through
the alias table below. Matching is exact-or-prefix on normalised text, so a
header ``Abbreviation (code)`` still satisfies alias ``abbreviation``.
"""

__all__ = [
    "DEFAULT_SCAN_ROWS",
    "FIELD_ALIASES",
    "HeaderLocation",
    "find_column_index",
    "find_header_row",
]

DEFAULT_SCAN_ROWS = 30

# logical field -> aliases (already normalised), tried in order per column
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "abbreviation": ("abbreviation", "abbr", "dept"),
    "fulldepartmentname": ("fulldepartmentname", "departmentname"),
    "headcount": ("headcount", "count"),
    "quarter": ("quarter", "qtr"),
    "dept": ("dept", "department", "abbreviation"),
    "rolloutdate": ("rolloutdate", "date"),
    "qtr": ("qtr", "quarter"),
    "commsteward": ("commsteward", "steward", "owner"),
    "note": ("note", "notes"),
    "count": ("count", "headcount"),
    "conversionrate": (
        "conversionrate",
        "conversion",
        "conversionpercent",
        "digitalbadgeconversion",
    ),
}


@dataclass(frozen=True)
class HeaderLocation:
    """Header row index plus logical field -> column index (-1 when absent)."""
    row_index: int
    column_index: dict[str, int]

    def column(self, field: str) -> int:
        return self.column_index.get(field, -1)


def find_column_index(headers: Sequence[str], aliases: Iterable[str]) -> int:
    """First column whose normalised header equals or starts with any alias."""
    alias_list = [normalize_header(a) for a in aliases]
    for i, value in enumerate(headers):
        if not value:
            continue
        if any(value == a or value.startswith(a) for a in alias_list):
            return i
    return -1


def find_header_row(
    matrix: Sequence[Sequence[Any]],
    required: Iterable[str],
    scan_rows: int = DEFAULT_SCAN_ROWS,
) -> HeaderLocation | None:
    """Locate the header row that resolves every required field.

    Args:
        matrix: Raw sheet matrix
        required: Logical field names (keys of ``FIELD_ALIASES``)
        scan_rows: Only rows ``0..scan_rows-1`` are considered

    Returns:
        HeaderLocation, or None when no scanned row qualifies. Callers treat
        None as "sheet contributes no rows".
    """
    required_fields = list(required)
    unknown = [f for f in required_fields if f not in FIELD_ALIASES]
    if unknown:
        raise KeyError(f"unknown header fields: {unknown}")

    limit = min(len(matrix), scan_rows)
    for row_index in range(limit):
        normalized = [normalize_header(cell_text(to_cell(v))) for v in (matrix[row_index] or [])]
        index = {key: find_column_index(normalized, aliases) for key, aliases in FIELD_ALIASES.items()}
        if all(index[key] >= 0 for key in required_fields):
            return HeaderLocation(row_index=row_index, column_index=index)
    return None
